# shopcart/utils/logging.py
import logging
import sys

from shopcart.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_ROOT = "shopcart"


def _configure_package_logger() -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(LOG_LEVEL.upper())
    return root


def get_logger(name: str) -> logging.Logger:
    _configure_package_logger()
    return logging.getLogger(name)
