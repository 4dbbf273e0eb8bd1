from __future__ import annotations

import logging
from typing import Union


def setup_logging(log_file: str = "zendoggo.log",
                  level: Union[int, str] = logging.INFO) -> None:
    """Console + file logging. Call once, before the first logger.info()."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
        force=True,
    )
