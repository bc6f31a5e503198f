import os
import datetime
import threading
import json

from rich.console import Console

from pkgbump.modules.config import config


class Logger:
    LEVELS = {
        "debug": 10,
        "info": 20,
        "success": 25,
        "warning": 30,
        "error": 40,
    }

    LOG_STYLES = {
        "DEBUG": "bright_black",
        "INFO": "blue",
        "SUCCESS": "green",
        "WARNING": "yellow",
        "ERROR": "red",
    }

    def __init__(self, name="pkgbump", console=None, level=None):
        self.name = name
        self.log_file = os.path.expanduser(
            config.get("logging", "log_file", fallback="~/.cache/pkgbump/pkgbump.log"))
        self.color_output = config.getboolean("logging", "color_output", fallback=True)
        self.log_to_file = config.getboolean("logging", "log_to_file", fallback=False)
        self.use_utc = config.getboolean("logging", "timestamp_utc", fallback=False)
        self.log_format = config.get("logging", "log_format", fallback="text").lower()
        self.max_log_size_kb = config.getint("logging", "max_log_size_kb", fallback=0)

        # stdout é reservado para o PKGBUILD gerado
        self.console = console or Console(stderr=True, no_color=not self.color_output,
                                          highlight=False, soft_wrap=True)

        level_str = (level or config.get("logging", "level", fallback="info")).lower()
        self.min_level = self.LEVELS.get(level_str, 20)

        if self.log_to_file:
            self._ensure_dir(self.log_file)

        self._lock = threading.Lock()

    def set_level(self, level):
        self.min_level = self.LEVELS.get(level.lower(), self.min_level)

    def _ensure_dir(self, filepath):
        dirpath = os.path.dirname(filepath)
        if not dirpath:
            return
        try:
            os.makedirs(dirpath, exist_ok=True)
        except OSError as e:
            self.log_to_file = False
            self.console.print(f"Logger: falha ao criar diretório de log {dirpath}: {e}",
                               markup=False)

    def _get_timestamp(self):
        if self.use_utc:
            now = datetime.datetime.now(datetime.timezone.utc)
        else:
            now = datetime.datetime.now()
        return now.strftime("%Y-%m-%d %H:%M:%S")

    def _rotate_if_needed(self, filepath):
        if self.max_log_size_kb <= 0:
            return
        if os.path.exists(filepath) and os.path.getsize(filepath) > self.max_log_size_kb * 1024:
            rotated = filepath + ".1"
            try:
                if os.path.exists(rotated):
                    os.remove(rotated)
                os.rename(filepath, rotated)
            except OSError as e:
                self.console.print(f"Logger: erro ao rotacionar log {filepath}: {e}", markup=False)

    def _write_file(self, message):
        if not self.log_to_file:
            return
        self._rotate_if_needed(self.log_file)
        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(message + "\n")
        except OSError as e:
            self.console.print(f"Logger: falha ao escrever no arquivo de log {self.log_file}: {e}",
                               markup=False)

    def _format_text(self, level, message):
        timestamp = self._get_timestamp()
        return f"[{timestamp}] [{self.name}] [{level}] {message}"

    def _format_json(self, level, message):
        return json.dumps({
            "timestamp": self._get_timestamp(),
            "logger": self.name,
            "level": level,
            "message": message
        })

    def _format_message(self, level, message):
        if self.log_format == "json":
            return self._format_json(level, message)
        return self._format_text(level, message)

    def _log_to_console(self, level, message):
        if self.log_format == "json":
            self.console.print(self._format_json(level, message), markup=False, highlight=False)
            return
        style = self.LOG_STYLES.get(level) if self.color_output else None
        self.console.print(message, style=style, markup=False)

    def _should_log(self, level):
        return self.LEVELS.get(level.lower(), 0) >= self.min_level

    def log(self, level, message):
        level = level.upper()
        if not self._should_log(level):
            return

        with self._lock:
            self._log_to_console(level, message)
            self._write_file(self._format_message(level, message))

    def debug(self, message):
        self.log("DEBUG", message)

    def info(self, message):
        self.log("INFO", message)

    def success(self, message):
        self.log("SUCCESS", message)

    def warning(self, message):
        self.log("WARNING", message)

    def error(self, message):
        self.log("ERROR", message)
