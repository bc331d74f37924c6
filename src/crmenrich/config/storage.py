"""Where the engine keeps its SQLite database and HTTP cache."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import bool_env_var, optional_env_var

APP_DIR_NAME: Final[str] = "crmenrich"
DATA_DIR_ENV_VAR: Final[str] = "CRMENRICH_DATA_DIR"
DATABASE_URI_ENV_VAR: Final[str] = "DATABASE_URI"
DATABASE_ECHO_ENV_VAR: Final[str] = "CRMENRICH_DATABASE_ECHO"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = "crmenrich.db"
    http_cache_filename: str = "http_cache.db"

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def file_path(self, filename: str, *, ensure: bool = True) -> Path:
        """Path of ``filename`` inside the data directory, creating the directory if asked."""

        data_dir = self.resolve_data_dir()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / filename

    def database_path(self, *, ensure: bool = True) -> Path:
        return self.file_path(self.database_filename, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self.file_path(self.http_cache_filename, ensure=ensure)


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.uri.startswith("sqlite")


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return base_path / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    env_dir = optional_env_var(DATA_DIR_ENV_VAR)
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Use ``DATABASE_URI`` when set, else a SQLite file in the data directory."""

    echo = bool_env_var(DATABASE_ECHO_ENV_VAR)
    uri = optional_env_var(DATABASE_URI_ENV_VAR)
    if uri is None:
        database_path = (storage or get_storage_config()).database_path()
        uri = f"sqlite+pysqlite:///{database_path}"
    return DatabaseConfig(uri=uri, echo=echo)
