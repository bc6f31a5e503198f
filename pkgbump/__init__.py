"""pkgbump - atualiza um PKGBUILD para uma nova versão upstream."""

__version__ = "0.1.0"
