# acaishop/utils/logging.py
import logging

from acaishop.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_configured = False


def _configure_root():
    global _configured
    if _configured:
        return

    root = logging.getLogger("acaishop")
    root.setLevel(LOG_LEVEL.upper())

    # no duplicate handlers on reload
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    _configure_root()
    if not name.startswith("acaishop"):
        name = f"acaishop.{name}"
    return logging.getLogger(name)
