# pkgbump/modules/errors.py
"""
Hierarquia de erros do pkgbump.

Todo erro é fatal para a execução: a CLI captura ``BumpError`` e imprime
uma única linha ``Error: <mensagem>`` em stderr.
"""


class BumpError(Exception):
    pass


class ConfigError(BumpError):
    pass


class IoError(BumpError):
    """Falha de sistema de arquivos ou de I/O de processo."""


class MissingInputError(IoError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"recipe not found: {path}")


class HttpError(BumpError):
    """Falha de conexão ou de transferência."""


class HttpStatusError(HttpError):
    def __init__(self, code, url=None):
        self.code = code
        self.url = url
        msg = f"HTTP status {code}"
        if url:
            msg += f" for {url}"
        super().__init__(msg)


class SpawnError(BumpError):
    pass


class ChildFailedError(BumpError):
    def __init__(self, command, returncode, stderr=""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr or ""
        msg = f"{command} exited with status {returncode}"
        detail = self.stderr.strip()
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class MetadataDecodeError(BumpError):
    pass


class UnknownAlgorithmError(BumpError):
    def __init__(self, name):
        self.name = name
        super().__init__(f"unsupported hash algorithm: {name}")
