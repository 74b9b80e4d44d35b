# SPDX-License-Identifier: MIT
"""Tests for configuration loading."""

from pathlib import Path

import pytest

from lazy_schema.runtime.settings import Settings, load_settings


def test_defaults() -> None:
    settings = load_settings()

    assert settings.version_field == "_v"
    assert settings.id_field == "_id"
    assert settings.missing_version == "zero"
    assert settings.update_concurrency == 32
    assert settings.bulk_writes is True
    assert settings.log_level == "warn"
    assert settings.logfire_token is None


def test_load_settings_reads_env(monkeypatch) -> None:
    """Environment variables should populate the settings model."""
    monkeypatch.setenv("LAZY_SCHEMA_VERSION_FIELD", "schema_version")
    monkeypatch.setenv("LAZY_SCHEMA_MISSING_VERSION", "error")
    monkeypatch.setenv("LAZY_SCHEMA_UPDATE_CONCURRENCY", "4")
    monkeypatch.setenv("LAZY_SCHEMA_BULK_WRITES", "false")

    settings = load_settings()

    assert settings.version_field == "schema_version"
    assert settings.missing_version == "error"
    assert settings.update_concurrency == 4
    assert settings.bulk_writes is False


def test_load_settings_reads_yaml_file(tmp_path: Path) -> None:
    config = tmp_path / "lazy_schema.yaml"
    config.write_text("id_field: key\nupdate_concurrency: 8\n", encoding="utf-8")

    settings = load_settings(config)

    assert settings.id_field == "key"
    assert settings.update_concurrency == 8


def test_environment_overrides_yaml_file(monkeypatch, tmp_path: Path) -> None:
    config = tmp_path / "lazy_schema.yaml"
    config.write_text("update_concurrency: 8\nid_field: key\n", encoding="utf-8")
    monkeypatch.setenv("LAZY_SCHEMA_UPDATE_CONCURRENCY", "2")

    settings = load_settings(str(config))

    assert settings.update_concurrency == 2
    assert settings.id_field == "key"


def test_empty_yaml_file_uses_defaults(tmp_path: Path) -> None:
    config = tmp_path / "empty.yaml"
    config.write_text("", encoding="utf-8")

    assert load_settings(config) == Settings()


@pytest.mark.parametrize(
    "content",
    ["update_concurrency: 0\n", "missing_version: maybe\n", "- a\n", "a: [\n"],
)
def test_invalid_configuration_raises_runtime_error(tmp_path: Path, content) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text(content, encoding="utf-8")

    with pytest.raises(RuntimeError):
        load_settings(config)


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.yaml")


def test_token_hidden_from_repr() -> None:
    assert "secret" not in repr(Settings(logfire_token="secret"))
