# pkgbump/modules/bump.py
"""
Orquestrador do bump de versão.

Fluxo:
  1. carrega o PKGBUILD
  2. pkgver=<nova versão> (e pkgrel=1, se reset_pkgrel estiver ativo)
  3. extrai metadados (fontes + algoritmos) via bash
  4. monta o DigestSet (algoritmo desconhecido falha antes de qualquer download)
  5. baixa cada fonte, na ordem declarada, calculando todos os digests
  6. reescreve cada campo <algo>sums
"""

from __future__ import annotations
import os
from typing import Callable, Dict, List, Optional

import yaml

from pkgbump.modules import logger as _logger
from pkgbump.modules.config import config
from pkgbump.modules.digest import DigestSet
from pkgbump.modules.errors import IoError
from pkgbump.modules.extract import Metadata, MetadataExtractor
from pkgbump.modules.fetch import Fetcher
from pkgbump.modules.recipe import DEFAULT_RECIPE, Recipe


def render_checksums(algorithm: str, digests: List[str]) -> str:
    """
    Formata a lista de digests como valor de ``<algo>sums``::

        ('d0'
         <indent>'d1')

    com as entradas seguintes alinhadas sob a primeira aspa.
    """
    if not digests:
        return "()"
    indent = " " * (len(f"{algorithm}sums") + 2)
    return "(" + f"\n{indent}".join(f"'{d}'" for d in digests) + ")"


class BumpResult:
    def __init__(self, recipe: Recipe, metadata: Metadata, matrix: List[List[str]],
                 old_version: Optional[str], new_version: str):
        self.recipe = recipe
        self.metadata = metadata
        # matrix[i][j]: digest da fonte j pelo algoritmo i
        self.matrix = matrix
        self.old_version = old_version
        self.new_version = new_version

    @property
    def checksums(self) -> Dict[str, List[str]]:
        out: Dict[str, List[str]] = {}
        for name, row in zip(self.metadata.hashes, self.matrix):
            out.setdefault(name, row)
        return out

    def to_report(self) -> dict:
        return {
            "old_version": self.old_version,
            "new_version": self.new_version,
            "sources": [
                dict(src.to_dict(), checksums={
                    name: row[j] for name, row in zip(self.metadata.hashes, self.matrix)
                })
                for j, src in enumerate(self.metadata.sources)
            ],
            "hashes": list(self.metadata.hashes),
        }

    def write_report(self, path: str) -> str:
        try:
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.to_report(), f, sort_keys=False, allow_unicode=True)
        except OSError as e:
            raise IoError(f"cannot write report {path}: {e}") from e
        return os.path.abspath(path)


class Bumper:
    def __init__(self,
                 logger: Optional[_logger.Logger] = None,
                 fetcher: Optional[Fetcher] = None,
                 extractor_factory: Optional[Callable[[], MetadataExtractor]] = None,
                 reset_pkgrel: Optional[bool] = None,
                 dest_dir: str = "."):
        self.log = logger or _logger.Logger("bump")
        self.fetcher = fetcher or Fetcher(logger=self.log)
        self.extractor_factory = extractor_factory or (lambda: MetadataExtractor(logger=self.log))
        if reset_pkgrel is None:
            reset_pkgrel = config.getboolean("bump", "reset_pkgrel", fallback=False)
        self.reset_pkgrel = reset_pkgrel
        self.dest_dir = dest_dir

    def extract(self, recipe: Recipe) -> Metadata:
        with self.extractor_factory() as extractor:
            return extractor.run(recipe)

    def bump(self, new_version: str, recipe: Optional[Recipe] = None,
             on_source: Optional[Callable] = None) -> BumpResult:
        """
        ``on_source(index, source)`` é chamado antes de cada download e deve
        devolver um callback de progresso (ou None).
        """
        if recipe is None:
            recipe = Recipe.load(config.get("bump", "recipe_file", fallback=DEFAULT_RECIPE))

        old_version = recipe.get("pkgver")
        recipe.set("pkgver", new_version)
        if self.reset_pkgrel and old_version is not None and old_version != new_version:
            recipe.set("pkgrel", "1")
        self.log.info(f"pkgver: {old_version} -> {new_version}")

        metadata = self.extract(recipe)
        digests = DigestSet.from_names(metadata.hashes)

        matrix: List[List[str]] = [[] for _ in range(len(digests))]
        for j, source in enumerate(metadata.sources):
            progress = on_source(j, source) if on_source else None
            row = self.fetcher.fetch(source, digests, dest_dir=self.dest_dir, on_progress=progress)
            for i, hexdigest in enumerate(row):
                matrix[i].append(hexdigest)

        for name, digests_hex in zip(metadata.hashes, matrix):
            recipe.set(f"{name}sums", render_checksums(name, digests_hex))

        self.log.debug(f"{len(metadata.sources)} fonte(s) processada(s)")
        return BumpResult(recipe, metadata, matrix, old_version, new_version)
