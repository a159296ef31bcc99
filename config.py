"""Configuration loaded from ``config.json``.

Values in the file are merged over ``DEFAULT_CONFIG``; a missing or
unreadable file leaves the defaults in place. ``BOOKSHELF_CONFIG`` may
point at a different file.
"""
import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_ENV = "BOOKSHELF_CONFIG"

DEFAULT_CONFIG: dict = {
    "db_path": "data/bookshelf.db",
    "log_level": "WARNING",
    "log_file": "",
    "seed_sample_books": True,
    "candidates": {
        "source": "builtin",
        "path": "",
        "url": "",
        "timeout": 10,
    },
}


def _config_dir() -> Path:
    return Path(os.path.dirname(os.path.abspath(__file__)))


def _merge_dict(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            merged[key] = _merge_dict(base_value, value)
        else:
            merged[key] = value
    return merged


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override)
    return _config_dir() / "config.json"


def load_config(path: Optional[Path] = None) -> dict:
    """Load configuration from config.json."""
    path = path or config_path()
    if not path.exists():
        return _merge_dict(DEFAULT_CONFIG, {})
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return _merge_dict(DEFAULT_CONFIG, {})
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: expected an object")
        return _merge_dict(DEFAULT_CONFIG, {})
    return _merge_dict(DEFAULT_CONFIG, data)
