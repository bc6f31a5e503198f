import configparser
import os

from pkgbump import __version__
from pkgbump.modules.errors import ConfigError

DEFAULT_LOCATIONS = [
    os.path.expanduser("~/.config/pkgbump/pkgbump.conf"),
    "/etc/pkgbump/pkgbump.conf",
]

DEFAULTS = {
    "bump": {
        "recipe_file": "PKGBUILD",
        "reset_pkgrel": "false",
    },
    "extract": {
        "shell": "bash",
        "timeout": "60",
    },
    "fetch": {
        "buffer_size": "8192",
        "timeout": "30",
        "user_agent": f"pkgbump/{__version__}",
    },
    "logging": {
        "level": "info",
        "color_output": "true",
        "log_to_file": "false",
        "log_file": "~/.cache/pkgbump/pkgbump.log",
        "log_format": "text",
        "max_log_size_kb": "0",
    },
}


class BumpConfig:
    def __init__(self, locations=None):
        self.locations = locations or self._default_locations()
        self.config = configparser.ConfigParser(interpolation=None)
        self.loaded_from = None
        self.reload()

    @staticmethod
    def _default_locations():
        env = os.environ.get("PKGBUMP_CONFIG")
        return ([env] if env else []) + DEFAULT_LOCATIONS

    def reload(self, locations=None, required=False):
        """(Re)carrega a configuração do primeiro arquivo disponível.

        Sem nenhum arquivo, valem apenas os padrões embutidos. Com
        ``required=True`` a ausência de todos os caminhos é um erro.
        """
        if locations is not None:
            self.locations = locations
        self.config = configparser.ConfigParser(interpolation=None)
        self.config.read_dict(DEFAULTS)
        self.loaded_from = None
        for path in self.locations:
            if os.path.isfile(path):
                try:
                    self.config.read(path, encoding="utf-8")
                except (configparser.Error, OSError, UnicodeDecodeError) as e:
                    raise ConfigError(f"Configuração inválida em {path}: {e}") from e
                self.loaded_from = path
                return
        if required:
            raise ConfigError(f"Nenhum arquivo de configuração encontrado em: {self.locations}")

    def get(self, section, option, fallback=None):
        try:
            return self.config.get(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def getboolean(self, section, option, fallback=False):
        try:
            return self.config.getboolean(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def getint(self, section, option, fallback=0):
        try:
            return self.config.getint(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def getfloat(self, section, option, fallback=None):
        try:
            return self.config.getfloat(section, option, fallback=fallback)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def getlist(self, section, option, fallback=None, delimiter=","):
        raw = self.get(section, option, fallback="")
        if raw:
            return [item.strip() for item in raw.split(delimiter) if item.strip()]
        return fallback or []

    def set(self, section, option, value):
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, option, str(value))

    def __getitem__(self, section):
        if section in self.config:
            return dict(self.config[section])
        raise KeyError(f"Seção '{section}' não encontrada.")

    def __contains__(self, section):
        return section in self.config


# Instância global padrão para uso em outros módulos
config = BumpConfig()
