from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'file' (default), 'sqlite' or 'memory'
    - DATA_DIR: directory holding the collection files. Default './data'
    - USERS_FILE / TASKS_FILE: JSON collection files. Default '<DATA_DIR>/users.json' and '<DATA_DIR>/tasks.json'
    - SQLITE_DB_PATH: path to sqlite db file. Default '<DATA_DIR>/tracker.db'
    - PASSWORD_SCHEME: 'sha256' (default) or 'pbkdf2_sha256'
    - PASSWORD_MIN_LENGTH: minimum password length at registration (default: 6)
    - SESSION_TTL_SECONDS: lifetime of a login token (default: 86400)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: console log level (default: INFO)
    - LOG_DIR: directory for rotating log files; empty (default) logs to console only
    """

    persistence_backend: str = "file"
    data_dir: str = "./data"
    users_file: str = "./data/users.json"
    tasks_file: str = "./data/tasks.json"
    sqlite_db_path: str = "./data/tracker.db"
    password_scheme: str = "sha256"
    password_min_length: int = 6
    session_ttl_seconds: int = 24 * 60 * 60
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    log_dir: str = ""


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "file").strip().lower()
    if backend not in {"file", "sqlite", "memory"}:
        backend = "file"

    data_dir = _get_env("DATA_DIR", "./data").strip()
    users_file = _get_env("USERS_FILE", os.path.join(data_dir, "users.json")).strip()
    tasks_file = _get_env("TASKS_FILE", os.path.join(data_dir, "tasks.json")).strip()
    sqlite_path = _get_env("SQLITE_DB_PATH", os.path.join(data_dir, "tracker.db")).strip()

    scheme = _get_env("PASSWORD_SCHEME", "sha256").strip().lower()
    if scheme not in {"sha256", "pbkdf2_sha256"}:
        scheme = "sha256"

    return Settings(
        persistence_backend=backend,
        data_dir=data_dir,
        users_file=users_file,
        tasks_file=tasks_file,
        sqlite_db_path=sqlite_path,
        password_scheme=scheme,
        password_min_length=_parse_int(_get_env("PASSWORD_MIN_LENGTH", "6"), 6),
        session_ttl_seconds=_parse_int(_get_env("SESSION_TTL_SECONDS", "86400"), 86400),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_dir=os.getenv("LOG_DIR", "").strip(),
    )
