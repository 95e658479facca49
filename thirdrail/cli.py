"""Command entry points: the API server and database initialisation."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Sequence
from datetime import datetime, timezone

from thirdrail.app import App
from thirdrail.options import parse_options

logger = logging.getLogger(__name__)

VERSION = "0.1"


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": record.levelname.lower(),
            "msg": record.getMessage(),
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    logging.basicConfig(level=logging.INFO, handlers=[handler])


def main(argv: Sequence[str] | None = None) -> int:
    """Start the API server; return a non-zero status if it cannot start."""
    options = parse_options(argv)
    _configure_logging()
    logger.info("third_rail %s", VERSION)
    app = App(options=options)
    try:
        app.initialize()
        app.start()
    except Exception as err:
        logger.critical("%s", err)
        return 1
    return 0


def dbinit(argv: Sequence[str] | None = None) -> int:
    """Create the schema and seed the database; return a non-zero status on failure."""
    options = parse_options(argv)
    _configure_logging()
    app = App(options=options)
    try:
        app.initialize()
        app.initialize_schema()
    except Exception as err:
        logger.critical("%s", err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())