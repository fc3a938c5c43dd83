import configparser
from pathlib import Path

import pytest

from pacup.exceptions import ConfigurationError
from pacup.models.config import PacupConfig
from pacup.storage import ConfigManager


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    config = ConfigManager(tmp_path / "config.ini").load_config()
    assert config.max_workers == 4
    assert config.write_mode == "overwrite"
    assert config.cleanup_partial is True
    assert config.config_path == str(tmp_path)
    assert not (tmp_path / "config.ini").exists()


def test_saved_config_loads_back(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "nested" / "config.ini")
    manager.save_new_config(
        {"max_workers": 8, "write_mode": "append", "cleanup_partial": False}
    )

    config = ConfigManager(tmp_path / "nested" / "config.ini").load_config()
    assert config.max_workers == 8
    assert config.write_mode == "append"
    assert config.cleanup_partial is False
    assert config.read_timeout == 90


def test_saved_file_has_no_internal_keys(tmp_path: Path) -> None:
    path = tmp_path / "config.ini"
    ConfigManager(path).save_new_config({})
    parser = configparser.ConfigParser()
    parser.read(path)
    assert set(parser["DEFAULT"]) == PacupConfig.get_ini_keys()
    assert "dry_run" not in parser["DEFAULT"]


def test_old_config_is_migrated(tmp_path: Path) -> None:
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nmax_workers = 2\n", encoding="utf-8")

    config = ConfigManager(path).load_config()
    assert config.max_workers == 2

    parser = configparser.ConfigParser()
    parser.read(path)
    assert parser["DEFAULT"]["max_workers"] == "2"
    assert parser["DEFAULT"]["chunk_size"] == "131072"
    assert parser["DEFAULT"]["cleanup_partial"] == "true"


def test_cli_options_override_file(tmp_path: Path) -> None:
    path = tmp_path / "config.ini"
    ConfigManager(path).save_new_config({"max_workers": 8})
    config = ConfigManager(path).load_config({"max_workers": 1, "dry_run": True})
    assert config.max_workers == 1
    assert config.dry_run is True


@pytest.mark.parametrize(
    "body",
    [
        "[DEFAULT]\nmax_workers = 0\n",
        "[DEFAULT]\nmax_workers = many\n",
        "[DEFAULT]\nwrite_mode = resume\n",
        "[DEFAULT]\nwrite_mode = append\ncleanup_partial = true\n",
        "max_workers = 2\n",
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, body: str) -> None:
    path = tmp_path / "config.ini"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ConfigManager(path).load_config()


def test_write_mode_is_case_insensitive() -> None:
    assert PacupConfig(write_mode=" APPEND ", cleanup_partial=False).write_mode == "append"
