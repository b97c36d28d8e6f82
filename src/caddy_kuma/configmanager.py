from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from . import utils

DEFAULT_ENV_FILE = ".env"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE_NAME = "caddy-kuma.log"
DEFAULT_CADDY_URL = "http://localhost:2019/config/"
DEFAULT_FETCH_TIMEOUT_S = 10.0
DEFAULT_VERIFY_TLS = True
DEFAULT_USE_HTTPS = True


@dataclass(frozen=True)
class CaddySettings:
    """Settings of the Caddy source, resolved once per process."""

    enabled: bool = True
    url: str = DEFAULT_CADDY_URL
    use_https: bool = DEFAULT_USE_HTTPS
    monitor_name_prefix: str | None = None
    parent_name: str | None = None
    timeout_s: float = DEFAULT_FETCH_TIMEOUT_S
    verify_tls: bool = DEFAULT_VERIFY_TLS


class ConfigManager:
    """Centralized configuration.

    - Loads `.env` (or `CADDY_KUMA_ENV_FILE`) best-effort via python-dotenv.
    - Reads runtime config from environment variables.
    - Assigns project defaults consistently.
    """

    @staticmethod
    def _env_bool(value: str | None, *, default: bool) -> bool:
        if value is None or not value.strip():
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

        Best-effort: a missing file does not break the CLI.
        """
        from dotenv import load_dotenv

        target = path or os.getenv("CADDY_KUMA_ENV_FILE") or DEFAULT_ENV_FILE
        if not Path(target).is_file():
            return
        load_dotenv(dotenv_path=target)

    @staticmethod
    def enabled() -> bool:
        return ConfigManager._env_bool(os.getenv("CADDY_ENABLED"), default=True)

    @staticmethod
    def url() -> str:
        return ConfigManager._env_str("CADDY_URL") or DEFAULT_CADDY_URL

    @staticmethod
    def use_https() -> bool:
        return ConfigManager._env_bool(os.getenv("CADDY_USE_HTTPS"), default=DEFAULT_USE_HTTPS)

    @staticmethod
    def monitor_name_prefix() -> str | None:
        # Prefixes like "Caddy - " are meaningful with their trailing space.
        v = os.getenv("CADDY_MONITOR_NAME_PREFIX")
        return v if v else None

    @staticmethod
    def parent_name() -> str | None:
        return ConfigManager._env_str("CADDY_PARENT_NAME")

    @staticmethod
    def verify_tls() -> bool:
        return ConfigManager._env_bool(os.getenv("CADDY_VERIFY_TLS"), default=DEFAULT_VERIFY_TLS)

    @staticmethod
    def timeout_s() -> float:
        """Bound on a single config fetch, in seconds."""
        raw = os.getenv("CADDY_TIMEOUT")
        if raw is None or not str(raw).strip():
            return DEFAULT_FETCH_TIMEOUT_S
        v = utils.normalize_float(raw)
        if v is None:
            raise ValueError("CADDY_TIMEOUT must be a number")
        if v <= 0:
            raise ValueError("CADDY_TIMEOUT must be > 0")
        return v

    @staticmethod
    def log_level() -> str:
        v = os.getenv("CADDY_KUMA_LOG_LEVEL")
        return (v or DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL

    @staticmethod
    def caddy_settings() -> CaddySettings:
        return CaddySettings(
            enabled=ConfigManager.enabled(),
            url=ConfigManager.url(),
            use_https=ConfigManager.use_https(),
            monitor_name_prefix=ConfigManager.monitor_name_prefix(),
            parent_name=ConfigManager.parent_name(),
            timeout_s=ConfigManager.timeout_s(),
            verify_tls=ConfigManager.verify_tls(),
        )

    @staticmethod
    def log_level_number(level: str | None) -> int:
        name = (level or DEFAULT_LOG_LEVEL).strip().upper()
        number = logging.getLevelName(name)
        if not isinstance(number, int):
            raise ValueError(f"Unknown log level {level!r}; use DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return number

    @staticmethod
    def log_file_path(value: str | None) -> Path | None:
        """Path for --log-file; a directory gets `caddy-kuma.log` inside it."""
        raw = (value or "").strip()
        if not raw:
            return None
        p = Path(raw).expanduser()
        if p.is_dir() or raw.endswith(("/", os.sep)):
            return p / DEFAULT_LOG_FILE_NAME
        return p

    @staticmethod
    def configure_logging(
        level: str,
        *,
        log_file: str | None = None,
        file_level: str | None = None,
    ) -> None:
        """Log to stderr, and to `log_file` at `file_level` when given.

        Replaces any handlers already on the root logger.
        """
        console_level = ConfigManager.log_level_number(level)
        file_path = ConfigManager.log_file_path(log_file)
        file_level_number = ConfigManager.log_level_number(file_level) if file_level else console_level

        root = logging.getLogger()
        for h in list(root.handlers):
            root.removeHandler(h)
        root.setLevel(min(console_level, file_level_number) if file_path else console_level)

        console = logging.StreamHandler(sys.stderr)
        console.setLevel(console_level)
        console.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s", datefmt="%H:%M:%S"))
        root.addHandler(console)

        if file_path is not None:
            try:
                file_path.parent.mkdir(parents=True, exist_ok=True)
                fh = logging.FileHandler(file_path, encoding="utf-8")
            except OSError as e:
                root.warning("Cannot log to %s: %s", file_path, e)
            else:
                fh.setLevel(file_level_number)
                fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
                root.addHandler(fh)

        # Per-request lines from httpx duplicate the CaddyApi debug hooks.
        for name in ("httpx", "httpcore"):
            logging.getLogger(name).setLevel(logging.WARNING)

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        return logging.getLogger(name)
