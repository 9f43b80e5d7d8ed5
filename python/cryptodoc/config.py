"""
Runtime settings loaded from the environment or a ``.env`` file.

Variables:
- CRYPTODOC_SAVE_DIR: folder documents are saved to
- CRYPTODOC_SETTINGS_FILE: file remembering the chosen save folder
- CRYPTODOC_LOG_LEVEL: logging level name (default INFO)
- CRYPTODOC_BENCH_ITERATIONS / CRYPTODOC_BENCH_DOC_SIZE: benchmark parameters
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .storage import load_save_folder

DEFAULT_SETTINGS_FILE = "./save_path.dat"


@dataclass(frozen=True)
class Settings:
    """Resolved cryptodoc settings."""

    save_dir: Optional[Path]
    settings_file: Path
    log_level: int
    bench_iterations: int
    bench_doc_size: int

    def resolve_save_dir(self) -> Path:
        """Explicit save dir, else the remembered folder, else the working directory."""
        if self.save_dir is not None:
            return self.save_dir
        remembered = load_save_folder(self.settings_file)
        if remembered is not None:
            return remembered
        return Path.cwd()


def _int_setting(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _log_level_setting(name: str, default: str) -> int:
    raw = os.environ.get(name, default).strip().upper()
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        raise ConfigError(f"{name} is not a logging level: {raw!r}")
    return level


def load_settings(env_file: Optional[str | Path] = None) -> Settings:
    """
    Load settings, reading ``env_file`` (or a ``.env`` found by python-dotenv) first.

    Values already present in the environment win over the file.

    Raises:
        ConfigError: If a value is malformed
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    save_dir = os.environ.get("CRYPTODOC_SAVE_DIR")

    return Settings(
        save_dir=Path(save_dir).expanduser() if save_dir else None,
        settings_file=Path(
            os.environ.get("CRYPTODOC_SETTINGS_FILE", DEFAULT_SETTINGS_FILE)
        ).expanduser(),
        log_level=_log_level_setting("CRYPTODOC_LOG_LEVEL", "INFO"),
        bench_iterations=_int_setting("CRYPTODOC_BENCH_ITERATIONS", 1000),
        bench_doc_size=_int_setting("CRYPTODOC_BENCH_DOC_SIZE", 4096),
    )
