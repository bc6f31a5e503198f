# pkgbump/modules/recipe.py
"""
Recipe - buffer de texto de um PKGBUILD com substituição pontual de valores.

O PKGBUILD não é interpretado: cada entrada ``chave=valor`` no início de
uma linha é reconhecida por uma expressão regular e apenas o valor das
chaves pedidas é trocado. Todo o resto do arquivo permanece idêntico.

Subconjunto suportado:
  - ``chave=token`` (valor até o fim da linha)
  - ``chave=(...)`` (lista entre parênteses, pode ocupar várias linhas,
    mas não pode conter ``)``)

Listas com ``)`` interno (subshells, ``$(...)``) não são reconhecidas
como bloco e ficam intactas.
"""

from __future__ import annotations
import os
import re
from typing import Optional

from pkgbump.modules.errors import IoError, MissingInputError

DEFAULT_RECIPE = "PKGBUILD"

ENTRY_RE = re.compile(r"^([^\n=]+)=(\([^)]*\)|[^\r\n]+)", re.MULTILINE)


class Recipe:
    def __init__(self, content: str, path: Optional[str] = None):
        self.content = content
        self.path = path
        self.regex = ENTRY_RE

    @classmethod
    def load(cls, path: str = DEFAULT_RECIPE) -> "Recipe":
        """Lê o PKGBUILD (por padrão do diretório atual)."""
        try:
            # newline="" preserva \r\n e afins byte a byte
            with open(path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except FileNotFoundError:
            raise MissingInputError(path) from None
        except (OSError, UnicodeDecodeError) as e:
            raise IoError(f"cannot read {path}: {e}") from e
        return cls(content, path=path)

    def save(self, path: Optional[str] = None) -> str:
        dest = path or self.path or DEFAULT_RECIPE
        try:
            with open(dest, "w", encoding="utf-8", newline="") as f:
                f.write(self.content)
        except OSError as e:
            raise IoError(f"cannot write {dest}: {e}") from e
        return os.path.abspath(dest)

    def set(self, key: str, value: str) -> "Recipe":
        """Troca o valor de todas as entradas ``key=...``.

        O valor é inserido literalmente, sem aspas nem escape. Chave
        inexistente não é erro.
        """
        def repl(m):
            if m.group(1) != key:
                return m.group(0)
            return f"{m.group(1)}={value}"

        self.content = self.regex.sub(repl, self.content)
        return self

    def get(self, key: str) -> Optional[str]:
        for m in self.regex.finditer(self.content):
            if m.group(1) == key:
                return m.group(2)
        return None

    def keys(self):
        return [m.group(1) for m in self.regex.finditer(self.content)]

    @property
    def text(self) -> str:
        return self.content

    def as_bytes(self) -> bytes:
        return self.content.encode("utf-8")

    def __bytes__(self):
        return self.as_bytes()

    def __str__(self):
        return self.content

    def __repr__(self):
        return f"Recipe(path={self.path!r}, keys={len(self.keys())})"
