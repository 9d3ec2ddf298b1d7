from __future__ import annotations

import os
from pathlib import Path  # noqa: TC003

import pytest

from trackr.config import ConfigurationError, StorageConfig, get_database_config, get_storage_config
from trackr.config.storage import DEFAULT_DB_FILENAME, default_data_dir


@pytest.fixture(autouse=True)
def clean_storage_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TRACKR_DATA_DIR", "TRACKR_DB_FILENAME", "TRACKR_DB_ECHO", "DATABASE_URI"):
        monkeypatch.delenv(name, raising=False)


def test_storage_config_reads_directory_and_filename(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("TRACKR_DATA_DIR", str(tmp_path / "custom-data"))
    monkeypatch.setenv("TRACKR_DB_FILENAME", "assets.db")

    config = get_storage_config()

    assert config.database_path(ensure=False) == (tmp_path / "custom-data" / "assets.db").resolve()


@pytest.mark.skipif(os.name == "nt", reason="XDG layout applies to POSIX only")
def test_storage_config_falls_back_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert default_data_dir() == tmp_path / "trackr"
    assert get_storage_config().database_filename == DEFAULT_DB_FILENAME


def test_database_config_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://inventory")
    monkeypatch.setenv("TRACKR_DB_ECHO", "true")

    config = get_database_config()

    assert config.uri == "postgresql+psycopg://inventory"
    assert config.echo is True


def test_database_config_creates_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TRACKR_DATA_DIR", str(tmp_path / "data-dir"))

    config = get_database_config()

    expected_path = (tmp_path / "data-dir" / DEFAULT_DB_FILENAME).resolve()
    assert config.uri == f"sqlite+pysqlite:///{expected_path}"
    assert config.echo is False
    assert expected_path.parent.exists()


def test_database_path_without_ensure_leaves_disk_untouched(tmp_path: Path) -> None:
    config = StorageConfig(data_dir=tmp_path / "later", database_filename="inventory.db")

    path = config.database_path(ensure=False)

    assert path == (tmp_path / "later" / "inventory.db").resolve()
    assert not path.parent.exists()


def test_invalid_echo_flag_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACKR_DB_ECHO", "loud")

    with pytest.raises(ConfigurationError, match="TRACKR_DB_ECHO"):
        get_database_config()
