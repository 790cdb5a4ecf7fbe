from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the cover image modules.

    Inside the reader the host hands the plugin its own `api.logger` and
    installs the handlers. The CLI and the tests fall back to standard
    Python logging at INFO.
    """

    logger = logging.getLogger(name)
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO)
    return logger
