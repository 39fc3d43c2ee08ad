"""Root logger setup shared by the API process and the CLI."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_HANDLER_NAME = "bloodwork"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install one stream handler on the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if any(getattr(handler, "name", None) == _HANDLER_NAME for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
