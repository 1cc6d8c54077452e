from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CLI_LOG_FORMAT = "%(levelname)s: %(message)s"


def configure_logging(debug: bool = False, *, stream: TextIO | None = None, fmt: str = LOG_FORMAT) -> None:
    level = logging.DEBUG if debug else logging.INFO
    root_logger = logging.getLogger()

    # When served by uvicorn the root logger already has handlers; only adjust levels then.
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=fmt, stream=stream or sys.stderr)

    root_logger.setLevel(level)
    logging.getLogger("backend").setLevel(level)
