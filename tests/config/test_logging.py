from __future__ import annotations

import logging

from reftidy.config import configure_logging


def test_configure_logging_sets_level_and_quietens_httpx() -> None:
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = list(root.handlers)
    try:
        configure_logging(level=logging.DEBUG, force=True)

        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").getEffectiveLevel() >= logging.WARNING
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
