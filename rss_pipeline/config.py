from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional, Tuple, TypeVar

N = TypeVar("N", int, float)

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_DOTENV_CANDIDATES = (_PROJECT_ROOT / ".env.local", _PROJECT_ROOT / ".env")
_dotenv_loaded = False

DEFAULT_RETELL_MODEL = "google/gemini-3-flash-preview"
_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _parse_dotenv_line(raw: str) -> Optional[Tuple[str, str]]:
    line = raw.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, _, value = line.partition("=")
    key = key.strip()
    if not key:
        return None
    return key, _unquote(value.strip())


def _apply_dotenv(path: Path) -> None:
    """Copy ``KEY=value`` pairs from ``path`` into the environment without overriding."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return
    for raw in text.splitlines():
        parsed = _parse_dotenv_line(raw)
        if parsed is not None:
            os.environ.setdefault(*parsed)


def load_environment() -> None:
    """Read ``.env.local`` then ``.env`` once; exported variables always win."""
    global _dotenv_loaded
    if _dotenv_loaded:
        return
    for path in _DOTENV_CANDIDATES:
        _apply_dotenv(path)
    _dotenv_loaded = True


def _first_env(*names: str) -> Optional[str]:
    return next((os.environ[name] for name in names if os.environ.get(name)), None)


def _env_number(name: str, cast: Callable[[str], N], default: N) -> N:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        return default
    return value or default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _functions_base_url() -> str:
    explicit = _first_env("FUNCTIONS_BASE_URL")
    if explicit:
        return explicit.rstrip("/")
    supabase_url = _first_env("SUPABASE_URL")
    if supabase_url:
        return f"{supabase_url.rstrip('/')}/functions/v1"
    return "http://localhost:54321/functions/v1"


@dataclass(frozen=True)
class Settings:
    db_host: str
    db_port: int
    db_name: str
    db_user: str
    db_password: Optional[str]
    db_schema: str
    functions_base_url: str
    service_role_key: Optional[str]
    retell_model: str
    http_timeout: float
    function_timeout: float
    scrape_full_text: bool
    pending_window_hours: int
    fetch_all_process_cap: int
    console_basic_username: Optional[str]
    console_basic_password: Optional[str]
    console_api_token: Optional[str]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from the environment (plus dotenv files) once per process."""
    load_environment()
    return Settings(
        db_host=_first_env("DB_HOST", "POSTGRES_HOST") or "localhost",
        db_port=int(_first_env("DB_PORT", "POSTGRES_PORT") or 5432),
        db_name=_first_env("DB_NAME", "POSTGRES_DB") or "postgres",
        db_user=_first_env("DB_USER", "POSTGRES_USER") or "postgres",
        db_password=_first_env("DB_PASSWORD", "POSTGRES_PASSWORD"),
        db_schema=_first_env("DB_SCHEMA", "POSTGRES_SCHEMA") or "public",
        functions_base_url=_functions_base_url(),
        service_role_key=_first_env("SERVICE_ROLE_KEY", "SUPABASE_SERVICE_ROLE_KEY"),
        retell_model=_first_env("RETELL_MODEL") or DEFAULT_RETELL_MODEL,
        http_timeout=_env_number("HTTP_TIMEOUT", float, 20.0),
        function_timeout=_env_number("FUNCTION_TIMEOUT", float, 120.0),
        scrape_full_text=_env_flag("SCRAPE_FULL_TEXT", True),
        pending_window_hours=_env_number("PENDING_WINDOW_HOURS", int, 48),
        fetch_all_process_cap=_env_number("FETCH_ALL_PROCESS_CAP", int, 20),
        console_basic_username=_first_env("CONSOLE_BASIC_USERNAME"),
        console_basic_password=_first_env("CONSOLE_BASIC_PASSWORD"),
        console_api_token=_first_env("CONSOLE_API_TOKEN"),
    )


__all__ = ["DEFAULT_RETELL_MODEL", "Settings", "get_settings", "load_environment"]
