"""Tests for persistent settings and the conversion configuration."""

import json

import pytest

from xmi2conll.config import ConversionConfig
from xmi2conll.settings import coerce_setting, get_config_file, read_config, write_config


def test_read_missing_config(config_dir) -> None:
    assert read_config() == {}
    assert not config_dir.exists()


def test_write_merges_settings(config_dir) -> None:
    write_config({"default_format": "ca"})
    write_config({"context_chars": 10})
    assert read_config() == {"default_format": "ca", "context_chars": 10}
    assert get_config_file(create_dir=False) == config_dir / "config.json"


def test_corrupt_config_is_ignored(config_dir) -> None:
    config_dir.mkdir(parents=True)
    (config_dir / "config.json").write_text("{not json", encoding="utf-8")
    assert read_config() == {}
    (config_dir / "config.json").write_text(json.dumps(["list"]), encoding="utf-8")
    assert read_config() == {}


def test_coerce_setting() -> None:
    assert coerce_setting("context_chars", "12") == 12
    assert coerce_setting("default_format", "at") == "at"
    with pytest.raises(ValueError, match="Unknown setting"):
        coerce_setting("color", "red")
    with pytest.raises(ValueError, match="Invalid value"):
        coerce_setting("context_chars", "many")


def test_config_from_settings(config_dir) -> None:
    assert ConversionConfig.from_settings().context_chars == 30
    write_config({"context_chars": 5})
    assert ConversionConfig.from_settings().context_chars == 5
    config = ConversionConfig.from_settings(context_chars=8, document_name="d")
    assert config.context_chars == 8
    assert config.document_name == "d"
    assert ConversionConfig.from_settings(document_name=None).document_name is None
