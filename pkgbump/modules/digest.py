# pkgbump/modules/digest.py
"""
Fábrica de digests: nomes de algoritmo (na ordem do PKGBUILD) -> engines
de hash incrementais do hashlib, na mesma ordem.
"""

import hashlib
from typing import Iterable, List

from pkgbump.modules.errors import UnknownAlgorithmError

# nome -> (construtor, largura do digest em bytes)
ALGORITHMS = {
    "md5": (hashlib.md5, 16),
    "sha1": (hashlib.sha1, 20),
    "sha224": (hashlib.sha224, 28),
    "sha256": (hashlib.sha256, 32),
    "sha384": (hashlib.sha384, 48),
    "sha512": (hashlib.sha512, 64),
}


def check_algorithms(names: Iterable[str]) -> List[str]:
    names = list(names)
    for name in names:
        if name not in ALGORITHMS:
            raise UnknownAlgorithmError(name)
    return names


class HashEngine:
    """Engine incremental: absorve bytes e finaliza reiniciando o estado."""

    def __init__(self, name: str):
        if name not in ALGORITHMS:
            raise UnknownAlgorithmError(name)
        self.name = name
        self._factory, self.digest_size = ALGORITHMS[name]
        self._h = self._factory()

    def update(self, data) -> None:
        self._h.update(data)

    def finalize_and_reset(self) -> bytes:
        out = self._h.digest()
        self._h = self._factory()
        return out

    def hexdigest_and_reset(self) -> str:
        return self.finalize_and_reset().hex()

    def __repr__(self):
        return f"HashEngine({self.name!r})"


class DigestSet:
    def __init__(self, engines: List[HashEngine]):
        self.engines = engines

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "DigestSet":
        # sem deduplicação: cada nome gera uma engine independente
        return cls([HashEngine(n) for n in check_algorithms(names)])

    @property
    def names(self) -> List[str]:
        return [e.name for e in self.engines]

    def update(self, chunk) -> None:
        for engine in self.engines:
            engine.update(chunk)

    def hexdigests_and_reset(self) -> List[str]:
        return [e.hexdigest_and_reset() for e in self.engines]

    def __len__(self):
        return len(self.engines)

    def __iter__(self):
        return iter(self.engines)
