"""
App configuration — a small JSON file merged over built-in defaults.

Missing file or missing keys fall back to DEFAULT_CONFIG, so a fresh install
runs without any setup.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("config") / "zendoggo.json"

BACKEND_SQLITE = "sqlite"
BACKEND_MEMORY = "memory"

DEFAULT_CONFIG = {
    "backend": BACKEND_SQLITE,
    "db_path": "zendoggo.db",
    "log_file": "zendoggo.log",
    "log_level": "INFO",
    "worker_threads": 2,
}


def load_config(path: Optional[Path] = None) -> dict:
    path = path or CONFIG_PATH
    merged = DEFAULT_CONFIG.copy()
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                cfg = json.load(f)
            if not isinstance(cfg, dict):
                raise ValueError("top-level JSON value must be an object")
            merged.update(cfg)
        except (json.JSONDecodeError, ValueError):
            logger.warning("Bad config at %s, using defaults.", path)
            return DEFAULT_CONFIG.copy()
    if merged["backend"] not in (BACKEND_SQLITE, BACKEND_MEMORY):
        logger.warning("Unknown backend %r, falling back to %s",
                       merged["backend"], BACKEND_SQLITE)
        merged["backend"] = BACKEND_SQLITE
    return merged


def save_config(config: dict, path: Optional[Path] = None) -> None:
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
