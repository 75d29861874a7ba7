"""Runtime settings loaded from the environment and an optional .env file."""
import os
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Optional

ENV_KEYS = {
    "API_URL",
    "PUBLIC_BASE_URL",
    "REQUEST_TIMEOUT",
    "PAGE_SIZE",
    "NOTICE_SECONDS",
    "ADMIN_NOTICE_SECONDS",
    "TOKEN_STORE",
    "TOKEN_FILE",
    "LOG_LEVEL",
}

_ENV_LOADED = False
_ENV_LOCK = Lock()
_settings: Optional["Settings"] = None


@dataclass(frozen=True)
class Settings:
    """Front-end configuration."""

    api_url: str = "http://127.0.0.1:8000"
    public_base_url: str = "http://localhost:8501"
    request_timeout: float = 15.0
    page_size: int = 10
    notice_seconds: float = 4.2
    admin_notice_seconds: float = 4.5
    token_store: str = "session"
    token_file: str = "data/tokens.json"
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.token_store not in ("session", "file"):
            raise ValueError(f"TOKEN_STORE must be 'session' or 'file', got: {self.token_store}")
        if self.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT must be positive")
        if self.page_size <= 0:
            raise ValueError("PAGE_SIZE must be positive")


def _load_env_file(env_path: Path = Path(".env")) -> None:
    """Load known keys from a .env file; values already in the environment win."""
    global _ENV_LOADED

    if _ENV_LOADED:
        return

    with _ENV_LOCK:
        if _ENV_LOADED:
            return

        if env_path.exists():
            for raw_line in env_path.read_text(encoding="utf-8").splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"\'')

                if key in ENV_KEYS and key not in os.environ:
                    os.environ[key] = value

        _ENV_LOADED = True


def load_settings() -> Settings:
    """Build Settings from environment variables (after reading .env)."""
    _load_env_file()
    defaults = Settings()

    return Settings(
        api_url=os.getenv("API_URL", defaults.api_url).rstrip("/"),
        public_base_url=os.getenv("PUBLIC_BASE_URL", defaults.public_base_url).rstrip("/"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", defaults.request_timeout)),
        page_size=int(os.getenv("PAGE_SIZE", defaults.page_size)),
        notice_seconds=float(os.getenv("NOTICE_SECONDS", defaults.notice_seconds)),
        admin_notice_seconds=float(os.getenv("ADMIN_NOTICE_SECONDS", defaults.admin_notice_seconds)),
        token_store=os.getenv("TOKEN_STORE", defaults.token_store).strip().lower(),
        token_file=os.getenv("TOKEN_FILE", defaults.token_file),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def _clear_settings_cache() -> None:
    """Forget cached settings (used by tests)."""
    global _settings, _ENV_LOADED
    _settings = None
    _ENV_LOADED = False
