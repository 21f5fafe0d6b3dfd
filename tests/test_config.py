"""Tests for loading the YAML config file."""

from pathlib import Path

import pytest
import yaml

from cchistory.config import Config, load_config


def test_missing_file_is_created_with_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "cchistory" / "config.yaml"

    config = load_config(config_path)

    assert config.max_result_length == 3000
    assert config.max_preview_length == 100
    assert config_path.exists()
    written = yaml.safe_load(config_path.read_text())
    assert written["max_result_length"] == 3000
    assert "allowed_base_path" not in written


def test_values_override_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("max_result_length: 500\nexport_dir: ~/out\n")

    config = load_config(config_path)

    assert config.max_result_length == 500
    assert config.export_dir == "~/out"
    assert config.date_format == "%Y/%m/%d %H:%M:%S"


def test_invalid_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("max_result_length: [unclosed\n")

    assert load_config(config_path).max_result_length == 3000


def test_invalid_values_fall_back_to_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("max_result_length: -5\n")

    assert load_config(config_path) == Config()


def test_non_mapping_falls_back_to_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- just\n- a list\n")

    assert load_config(config_path).max_preview_length == 100


def test_export_dir_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CCHISTORY_EXPORT_DIR", "/srv/exports")

    assert Config().export_dir == "/srv/exports"
