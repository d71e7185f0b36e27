from __future__ import annotations

import logging
import sys

import uvicorn
from loguru import logger

from user_gateway.app import create_app
from user_gateway.config import load_config


class _InterceptHandler(logging.Handler):
    """Route all stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.patch(
            lambda r: r.update(
                name=record.name,
                function=record.funcName,
                line=record.lineno,
            )
        ).opt(exception=record.exc_info).log(level, record.getMessage())


def _make_log_filter(log_level: str):
    """Build a loguru filter that keeps httpx quiet unless debugging."""
    level_no = logger.level(log_level).no
    httpx_no = logger.level("DEBUG").no if log_level == "DEBUG" else logger.level("WARNING").no

    def _filter(record):
        name = record["name"] or ""
        if name.startswith(("httpx", "httpcore")):
            return record["level"].no >= httpx_no
        return record["level"].no >= level_no

    return _filter


def configure_logging(log_level: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        filter=_make_log_filter(log_level),
        level=0,
    )

    # Intercept all stdlib logging -> loguru
    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)


def main() -> None:
    config = load_config()
    log_level = config.logging.level.upper()
    configure_logging(log_level)

    app = create_app(config)
    uvicorn.run(
        app,
        host=config.listen.host,
        port=config.listen.port,
        log_level=log_level.lower(),
        log_config=None,
        access_log=not config.logging.quiet,
    )


if __name__ == "__main__":
    main()
