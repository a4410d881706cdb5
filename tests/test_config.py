"""Tests for TOML-backed scan settings."""

import pytest

from jobgraph import config_manager
from jobgraph.config import DEFAULT_INVOKE_METHODS, ScanSettings


def test_defaults_without_file():
    settings = config_manager.load_scan_settings()
    assert settings == ScanSettings()
    assert settings.invoke_methods == DEFAULT_INVOKE_METHODS
    assert settings.exclude == "!spec/"
    assert settings.max_indent == 80


def test_save_and_load():
    config_manager.save_setting("job_suffix", "Worker")
    config_manager.save_setting("invoke_methods", "perform_async, perform_in")
    config_manager.save_setting("max_indent", "40")

    settings = config_manager.load_scan_settings()
    assert settings.job_suffix == "Worker"
    assert settings.invoke_methods == ("perform_async", "perform_in")
    assert settings.max_indent == 40


def test_other_sections_are_preserved():
    config_manager._save_full_config({"team": {"owner": "platform"}})
    config_manager.save_setting("backend", "python")

    full = config_manager.load_full_config()
    assert full["team"] == {"owner": "platform"}
    assert full["scan"]["backend"] == "python"


def test_unknown_key():
    with pytest.raises(KeyError):
        config_manager.save_setting("colour", "blue")


@pytest.mark.parametrize(
    "key, value",
    [("backend", "grep"), ("unresolved", "ignore"), ("max_indent", "0"), ("max_indent", "deep"), ("exclude", "")],
)
def test_invalid_values(key, value):
    with pytest.raises(ValueError):
        config_manager.save_setting(key, value)


def test_reset():
    assert config_manager.reset_config() is False
    config_manager.save_setting("job_suffix", "Worker")
    assert config_manager.reset_config() is True
    assert config_manager.load_scan_settings() == ScanSettings()


def test_from_mapping_ignores_unknown_keys():
    settings = ScanSettings.from_mapping({"job_suffix": "Task", "legacy": True})
    assert settings.job_suffix == "Task"
    assert settings.to_mapping()["invoke_methods"] == list(DEFAULT_INVOKE_METHODS)


def test_scalar_invoke_methods_is_one_method():
    settings = ScanSettings.from_mapping({"invoke_methods": "perform_async"})
    assert settings.invoke_methods == ("perform_async",)
