# pkgbump/modules/post.py
"""
Ações opcionais depois de um bump bem-sucedido:
 - gravar o PKGBUILD alterado
 - gerar .SRCINFO com ``makepkg --printsrcinfo``
 - criar um commit git com PKGBUILD/.SRCINFO
"""

import os
import subprocess
from typing import List, Optional

from pkgbump.modules import logger as _logger
from pkgbump.modules.errors import ChildFailedError, IoError, SpawnError


class PostActions:
    def __init__(self, cwd: str = ".", makepkg: str = "makepkg", git: str = "git",
                 logger: Optional[_logger.Logger] = None):
        self.cwd = cwd
        self.makepkg = makepkg
        self.git = git
        self.log = logger or _logger.Logger("post")

    def _run(self, cmd: List[str]) -> str:
        self.log.debug(f"Running: {' '.join(cmd)} (cwd={self.cwd})")
        try:
            res = subprocess.run(cmd, cwd=self.cwd, stdout=subprocess.PIPE,
                                 stderr=subprocess.PIPE, text=True)
        except OSError as e:
            raise SpawnError(f"cannot launch {cmd[0]}: {e}") from e
        if res.returncode != 0:
            raise ChildFailedError(" ".join(cmd), res.returncode, res.stderr)
        return res.stdout

    def write_recipe(self, recipe, path: Optional[str] = None) -> str:
        dest = recipe.save(path)
        self.log.success(f"PKGBUILD gravado em {dest}")
        return dest

    def generate_srcinfo(self, buildscript: Optional[str] = None) -> str:
        """Roda ``makepkg --printsrcinfo``; ``buildscript`` vira ``-p`` (padrão: PKGBUILD)."""
        cmd = [self.makepkg, "--printsrcinfo"]
        if buildscript and buildscript != "PKGBUILD":
            cmd += ["-p", buildscript]
        content = self._run(cmd)
        dest = os.path.join(self.cwd, ".SRCINFO")
        try:
            with open(dest, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise IoError(f"cannot write {dest}: {e}") from e
        self.log.success(f".SRCINFO gerado em {dest}")
        return dest

    def git_commit(self, version: str, files: List[str]) -> str:
        message = f"Update to {version}"
        self._run([self.git, "add", "--"] + files)
        self._run([self.git, "commit", "-m", message, "--"] + files)
        self.log.success(f"Commit criado: {message}")
        return message
