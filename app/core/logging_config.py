import logging
import os
import sys

LOGGER_NAME = "hr_masterdata"

# Libraries that log every statement or request at INFO
_NOISY_LOGGERS = ("sqlalchemy.engine", "multipart", "openpyxl")


def setup_logging(level=None):
    """
    Configure logging once for the API process and the mapping scripts.

    The level comes from LOG_LEVEL (default INFO); records go to stdout.
    """
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(module)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger(LOGGER_NAME)


logger = setup_logging()
