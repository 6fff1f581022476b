"""Logging configuration using Loguru."""

import sys

from loguru import logger

from spellwatch.utils.config import Settings, get_project_root, settings as default_settings


def setup_logging(settings: Settings = None) -> None:
    settings = settings or default_settings
    logger.remove()

    # Console
    logger.add(
        sys.stderr,
        format=settings.logging.format,
        level=settings.logging.level,
        colorize=True,
    )

    if settings.logging.to_file:
        log_dir = get_project_root() / "logs"
        log_dir.mkdir(exist_ok=True)

        # File
        logger.add(
            log_dir / "spellwatch.log",
            format=settings.logging.format,
            level=settings.logging.level,
            rotation=settings.logging.rotation,
            retention=settings.logging.retention,
            compression="zip",
        )

        # Errors only
        logger.add(
            log_dir / "errors.log",
            format=settings.logging.format,
            level="ERROR",
            rotation=settings.logging.rotation,
            retention=settings.logging.retention,
            compression="zip",
        )

    logger.info(f"Logging initialized - Level: {settings.logging.level}")
