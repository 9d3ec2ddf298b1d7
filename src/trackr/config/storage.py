"""Where the inventory database lives and how the engine talks to it."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_bool

DATA_DIR_ENV: Final[str] = "TRACKR_DATA_DIR"
DB_FILENAME_ENV: Final[str] = "TRACKR_DB_FILENAME"
DB_ECHO_ENV: Final[str] = "TRACKR_DB_ECHO"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"

DEFAULT_DB_FILENAME: Final[str] = "inventory.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """On-disk location of the default SQLite inventory store."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def database_path(self, *, ensure: bool = True) -> Path:
        """Resolved database file path; ``ensure`` creates the data directory."""

        data_dir = self.data_dir.expanduser().resolve()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def default_data_dir() -> Path:
    # XDG on POSIX, LOCALAPPDATA on Windows
    if os.name == "nt":
        root = os.getenv("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    else:
        root = os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(root).expanduser() / "trackr"


def get_storage_config() -> StorageConfig:
    data_dir = os.getenv(DATA_DIR_ENV)
    filename = os.getenv(DB_FILENAME_ENV, "").strip() or DEFAULT_DB_FILENAME
    return StorageConfig(
        data_dir=Path(data_dir) if data_dir else default_data_dir(),
        database_filename=filename,
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """An explicit ``DATABASE_URI`` wins over the SQLite file in the data directory."""

    echo = env_bool(DB_ECHO_ENV, default=False)
    uri = os.getenv(DATABASE_URI_ENV, "").strip()
    if uri:
        return DatabaseConfig(uri=uri, echo=echo)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri(), echo=echo)
