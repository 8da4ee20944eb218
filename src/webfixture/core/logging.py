# webfixture/core/logging.py
from __future__ import annotations

import logging
import sys

from pythonjsonlogger import jsonlogger

from webfixture.core.config import settings


def configure_logging(level: str | None = None, json: bool | None = None) -> None:
    level = level or settings.log_level
    json = settings.log_json if json is None else json

    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    if json:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
        )
    handler.setFormatter(formatter)

    # Avoid duplicate handlers when called from several test sessions
    root.handlers = [handler]
