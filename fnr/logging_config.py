import logging.config
import sys

from rich.console import Console


def setup_logging(debug: bool = False) -> None:
    """Route log records to stderr through rich; stdout stays reserved for the report."""
    log_level = logging.DEBUG if debug else logging.WARNING

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(message)s",
            },
        },
        "handlers": {
            "rich": {
                "class": "rich.logging.RichHandler",
                "rich_tracebacks": True,
                "show_path": debug,
                "formatter": "default",
                "console": Console(file=sys.stderr),
                "level": log_level,
            },
        },
        "loggers": {
            "fnr": {
                "handlers": ["rich"],
                "level": log_level,
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)
