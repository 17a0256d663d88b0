from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# journald stamps every line itself
JOURNAL_FORMAT = "%(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "info", timestamps: bool = True) -> None:
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT if timestamps else JOURNAL_FORMAT,
        stream=sys.stdout,
    )
