# pkgbump/modules/extract.py
"""
Extração de metadados do PKGBUILD.

O PKGBUILD só pode ser avaliado corretamente por um shell (expansão de
variáveis, arrays...). Em vez de reimplementar bash, o script embutido
``extract_pkgbuild.sh`` é gravado num arquivo temporário e executado com
o PKGBUILD em stdin; a saída é um JSON ``{"sources": [...], "hashes": [...]}``.
"""

from __future__ import annotations
import json
import os
import subprocess
import tempfile
import weakref
from importlib import resources
from typing import Any, Dict, List, Optional

from pkgbump.modules import logger as _logger
from pkgbump.modules.config import config
from pkgbump.modules.digest import check_algorithms
from pkgbump.modules.errors import (
    ChildFailedError,
    IoError,
    MetadataDecodeError,
    SpawnError,
)

SCRIPT_NAME = "extract_pkgbuild.sh"


def load_script() -> bytes:
    return resources.files("pkgbump.modules").joinpath(SCRIPT_NAME).read_bytes()


class Source:
    """Uma entrada de ``source=()``: nome local e URL de download."""

    def __init__(self, filename: str, url: str):
        self.filename = filename
        self.url = url

    def to_dict(self) -> Dict[str, str]:
        return {"filename": self.filename, "url": self.url}

    def __eq__(self, other):
        if not isinstance(other, Source):
            return NotImplemented
        return (self.filename, self.url) == (other.filename, other.url)

    def __repr__(self):
        return f"Source(filename={self.filename!r}, url={self.url!r})"


class Metadata:
    def __init__(self, sources: List[Source], hashes: List[str]):
        self.sources = sources
        self.hashes = hashes

    @classmethod
    def from_dict(cls, data: Any) -> "Metadata":
        if not isinstance(data, dict):
            raise MetadataDecodeError("metadata must be a JSON object")
        if set(data) != {"sources", "hashes"}:
            raise MetadataDecodeError(
                f"metadata must have exactly the keys 'sources' and 'hashes', got {sorted(data)}")

        raw_sources, raw_hashes = data["sources"], data["hashes"]
        if not isinstance(raw_sources, list):
            raise MetadataDecodeError("'sources' must be a list")
        if not isinstance(raw_hashes, list) or not all(isinstance(h, str) for h in raw_hashes):
            raise MetadataDecodeError("'hashes' must be a list of strings")

        sources = []
        for i, item in enumerate(raw_sources):
            if not isinstance(item, dict):
                raise MetadataDecodeError(f"source #{i} must be an object")
            filename, url = item.get("filename"), item.get("url")
            if not isinstance(filename, str) or not isinstance(url, str):
                raise MetadataDecodeError(f"source #{i} needs string 'filename' and 'url'")
            sources.append(Source(filename, url))
        return cls(sources, list(raw_hashes))

    @classmethod
    def from_json(cls, payload) -> "Metadata":
        try:
            data = json.loads(payload)
        except (ValueError, UnicodeDecodeError) as e:
            raise MetadataDecodeError(f"invalid metadata document: {e}") from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {"sources": [s.to_dict() for s in self.sources], "hashes": list(self.hashes)}

    def __repr__(self):
        return f"Metadata(sources={self.sources!r}, hashes={self.hashes!r})"


def _remove(path):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


class MetadataExtractor:
    """
    Executa o script embutido num processo bash.

    O script vive num arquivo temporário próprio da instância, criado no
    construtor e removido em ``close()`` (ou ao sair do ``with``).
    """

    def __init__(self, shell: Optional[str] = None, timeout: Optional[float] = None,
                 makepkg_library: Optional[str] = None, logger: Optional[_logger.Logger] = None):
        self.shell = shell or config.get("extract", "shell", fallback="bash")
        self.timeout = timeout if timeout is not None else (config.getfloat("extract", "timeout") or None)
        self.makepkg_library = makepkg_library or config.get("extract", "makepkg_library")
        self.log = logger or _logger.Logger("extract")

        try:
            fd, path = tempfile.mkstemp(prefix="pkgbump-", suffix=".sh")
        except OSError as e:
            raise IoError(f"cannot create helper script: {e}") from e
        self.script_path = path
        self._finalizer = weakref.finalize(self, _remove, path)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(load_script())
        except OSError as e:
            self.close()
            raise IoError(f"cannot write helper script {path}: {e}") from e
        self.log.debug(f"Script auxiliar em {path}")

    def close(self):
        self._finalizer()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _env(self):
        env = os.environ.copy()
        if self.makepkg_library:
            env["MAKEPKG_LIBRARY"] = self.makepkg_library
        return env

    def run(self, recipe) -> Metadata:
        """Avalia ``recipe`` (bytes ou objeto com ``__bytes__``) e devolve Metadata."""
        if self.closed:
            raise IoError("extractor already closed")
        data = recipe if isinstance(recipe, (bytes, bytearray)) else bytes(recipe)
        command = [self.shell, self.script_path]
        self.log.debug(f"Executando: {' '.join(command)}")

        try:
            proc = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=self._env(),
            )
        except OSError as e:
            raise SpawnError(f"cannot launch {self.shell}: {e}") from e

        try:
            stdout, stderr = proc.communicate(data, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
            raise ChildFailedError(self.shell, proc.returncode,
                                   f"timed out after {self.timeout}s") from None
        except OSError as e:
            proc.kill()
            proc.wait()
            raise IoError(f"cannot talk to {self.shell}: {e}") from e

        err_text = stderr.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            raise ChildFailedError(self.shell, proc.returncode, err_text)
        if err_text.strip():
            self.log.debug(err_text.strip())

        metadata = Metadata.from_json(stdout)
        check_algorithms(metadata.hashes)
        self.log.debug(f"Metadados: {len(metadata.sources)} fonte(s), hashes={metadata.hashes}")
        return metadata


def extract(recipe, **kwargs) -> Metadata:
    with MetadataExtractor(**kwargs) as extractor:
        return extractor.run(recipe)
