"""Logging setup for the valuation service."""

import logging
import sys

_HANDLER_NAME = "portfolio-valuation-stdout"


def setup_logging(level: int = logging.INFO) -> None:
    """Send records to stdout in the service format; safe to call more than once."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if any(handler.get_name() == _HANDLER_NAME for handler in root_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    )
    root_logger.addHandler(handler)

    # Quieter third-party loggers
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("opentelemetry").setLevel(logging.WARNING)
