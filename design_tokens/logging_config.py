import logging
import os

PACKAGE_LOGGER = "design_tokens"

# Library default: stay silent unless the host application configures logging.
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def setup_logging(level: str = None) -> None:
    """Minimal logging setup for scripts using the token engine.

    - Sets root logger level (DESIGN_TOKENS_LOG_LEVEL, default WARNING)
    - Ensures a basic StreamHandler is attached once
    """
    if level is None:
        level = os.getenv("DESIGN_TOKENS_LOG_LEVEL", "WARNING")
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; handlers and levels are left to the caller."""
    return logging.getLogger(name)
