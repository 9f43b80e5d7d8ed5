"""
Tests for environment-driven settings.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from cryptodoc import ConfigError, store_save_folder
from cryptodoc.config import DEFAULT_SETTINGS_FILE, load_settings


def test_defaults(clean_env):
    settings = load_settings(clean_env / "missing.env")

    assert settings.save_dir is None
    assert settings.settings_file == Path(DEFAULT_SETTINGS_FILE)
    assert settings.log_level == logging.INFO
    assert settings.bench_iterations == 1000
    assert settings.bench_doc_size == 4096


def test_values_from_env_file(clean_env):
    env_file = clean_env / ".env"
    env_file.write_text(
        "CRYPTODOC_SAVE_DIR=/tmp/docs\n"
        "CRYPTODOC_LOG_LEVEL=debug\n"
        "CRYPTODOC_BENCH_ITERATIONS=10\n"
    )

    settings = load_settings(env_file)

    assert settings.save_dir == Path("/tmp/docs")
    assert settings.log_level == logging.DEBUG
    assert settings.bench_iterations == 10


def test_environment_wins_over_env_file(clean_env, monkeypatch):
    env_file = clean_env / ".env"
    env_file.write_text("CRYPTODOC_BENCH_DOC_SIZE=10\n")
    monkeypatch.setenv("CRYPTODOC_BENCH_DOC_SIZE", "20")

    assert load_settings(env_file).bench_doc_size == 20


@pytest.mark.parametrize("value", ["many", "0", "-5"])
def test_invalid_integer(clean_env, monkeypatch, value):
    monkeypatch.setenv("CRYPTODOC_BENCH_ITERATIONS", value)
    with pytest.raises(ConfigError, match="CRYPTODOC_BENCH_ITERATIONS"):
        load_settings(clean_env / "missing.env")


def test_invalid_log_level(clean_env, monkeypatch):
    monkeypatch.setenv("CRYPTODOC_LOG_LEVEL", "CHATTY")
    with pytest.raises(ConfigError, match="logging level"):
        load_settings(clean_env / "missing.env")


def test_resolve_save_dir_prefers_explicit_setting(clean_env, monkeypatch):
    monkeypatch.setenv("CRYPTODOC_SAVE_DIR", str(clean_env / "explicit"))
    store_save_folder(clean_env / "save_path.dat", clean_env / "remembered")

    assert load_settings(clean_env / "missing.env").resolve_save_dir() == clean_env / "explicit"


def test_resolve_save_dir_uses_remembered_folder(clean_env):
    store_save_folder(clean_env / "save_path.dat", clean_env / "remembered")

    assert load_settings(clean_env / "missing.env").resolve_save_dir() == clean_env / "remembered"


def test_resolve_save_dir_falls_back_to_cwd(clean_env):
    assert load_settings(clean_env / "missing.env").resolve_save_dir() == Path.cwd()
