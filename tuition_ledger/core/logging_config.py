"""Logging setup for the API process. Modules log through ``logging.getLogger(__name__)``."""

import logging.config
from typing import Optional

from tuition_ledger.core.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                },
            },
            "loggers": {
                "tuition_ledger": {
                    "handlers": ["console"],
                    "level": (level or settings.log_level).upper(),
                    "propagate": False,
                },
                "sqlalchemy.engine": {
                    "handlers": ["console"],
                    "level": "WARNING",
                    "propagate": False,
                },
            },
        }
    )
