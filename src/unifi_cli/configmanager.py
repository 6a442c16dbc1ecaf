from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

DEFAULT_ENV_FILE = ".env"
DEFAULT_VERIFY_TLS = True
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_INTERFACE = "wan"
DEFAULT_LOG_FILE_NAME = "unifi-cli.log"


class ConfigManager:
    """Centralized configuration.

    - Loads `.env` (or `UNIFI_ENV_FILE`) best-effort via python-dotenv.
    - Reads runtime config from environment variables.
    - Assigns project defaults consistently.
    """

    @staticmethod
    def _env_bool(value: str | None, *, default: bool) -> bool:
        if value is None:
            return default
        s = value.strip().lower()
        return s not in {"0", "false", "no", "off"}

    @staticmethod
    def _env_str(name: str) -> str | None:
        v = os.getenv(name)
        return v.strip() if v and v.strip() else None

    @staticmethod
    def load_dotenv(path: str | None = None) -> None:
        """Load env file into process env.

        A missing file does not break the CLI.
        """
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=path or os.getenv("UNIFI_ENV_FILE") or DEFAULT_ENV_FILE)

    @staticmethod
    def base_url() -> str | None:
        return ConfigManager._env_str("UNIFI_BASE_URL")

    @staticmethod
    def username() -> str | None:
        return ConfigManager._env_str("UNIFI_USERNAME")

    @staticmethod
    def password() -> str | None:
        # Passwords are taken verbatim; surrounding whitespace may be significant.
        return os.getenv("UNIFI_PASSWORD")

    @staticmethod
    def verify_tls() -> bool:
        return ConfigManager._env_bool(os.getenv("UNIFI_VERIFY_TLS"), default=DEFAULT_VERIFY_TLS)

    @staticmethod
    def default_interface() -> str:
        return ConfigManager._env_str("UNIFI_DEFAULT_INTERFACE") or DEFAULT_INTERFACE

    @staticmethod
    def timeout_s() -> float | None:
        """Request timeout in seconds; None means the client default."""
        raw = ConfigManager._env_str("UNIFI_TIMEOUT")
        if raw is None:
            return None
        try:
            v = float(raw)
        except Exception as e:
            raise ValueError("UNIFI_TIMEOUT must be a number") from e
        if v <= 0:
            raise ValueError("UNIFI_TIMEOUT must be > 0")
        return v

    @staticmethod
    def log_level() -> str:
        v = os.getenv("UNIFI_LOG_LEVEL")
        return (v or DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL

    @staticmethod
    def _parse_log_level(level: str) -> int:
        normalized = (level or DEFAULT_LOG_LEVEL).strip().upper()
        try:
            logging_level = getattr(logging, normalized)
            if not isinstance(logging_level, int):
                raise AttributeError
        except Exception as e:
            raise ValueError("log_level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL") from e
        return logging_level

    @staticmethod
    def _resolve_log_file_path(value: str | os.PathLike[str] | None) -> Path | None:
        if value is None:
            return None
        raw = str(value).strip()
        if not raw:
            return None

        p = Path(os.path.expanduser(raw))
        # A directory gets the default file name inside it.
        if p.exists() and p.is_dir():
            return p / DEFAULT_LOG_FILE_NAME
        if raw.endswith(("/", os.sep)):
            return p / DEFAULT_LOG_FILE_NAME
        return p

    @staticmethod
    def configure_logging(
        console_level: str,
        *,
        log_file: str | os.PathLike[str] | None = None,
        file_level: str | None = None,
    ) -> None:
        """Configure logging.

        Always logs to stderr. If log_file is set, also logs to that file.
        The console and file handlers can have different levels.
        """
        console_logging_level = ConfigManager._parse_log_level(console_level)
        file_logging_level = (
            ConfigManager._parse_log_level(file_level) if (file_level is not None and str(file_level).strip()) else None
        )
        file_path = ConfigManager._resolve_log_file_path(log_file)

        console_formatter = logging.Formatter(
            "%(asctime)s %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        file_formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

        root = logging.getLogger()
        for h in list(root.handlers):
            root.removeHandler(h)

        min_level = console_logging_level
        if file_logging_level is not None:
            min_level = min(min_level, file_logging_level)
        root.setLevel(min_level)

        console_handler = logging.StreamHandler(stream=sys.stderr)
        console_handler.setLevel(console_logging_level)
        console_handler.setFormatter(console_formatter)
        root.addHandler(console_handler)

        if file_path is not None:
            try:
                file_path.parent.mkdir(parents=True, exist_ok=True)
                fh = logging.FileHandler(file_path, encoding="utf-8")
                fh.setLevel(file_logging_level if file_logging_level is not None else console_logging_level)
                fh.setFormatter(file_formatter)
                root.addHandler(fh)
            except OSError as e:
                root.warning("Failed to enable file logging to %s (%s)", file_path, str(e))

        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        return logging.getLogger(name)
