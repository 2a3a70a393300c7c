"""Logging configuration using Loguru.

Call sites pass structured context as ``extra={...}``. Serialized sinks keep
it under ``record["extra"]["extra"]``; text sinks render it as key=value
pairs after the message.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def render_context(context) -> str:
    """Render call-site context as ' | key=value key=value'."""
    if not context:
        return ""
    if isinstance(context, dict):
        return " | " + " ".join(f"{key}={value}" for key, value in context.items())
    return f" | {context}"


def console_format(record) -> str:
    record["extra"]["context"] = render_context(record["extra"].get("extra"))
    return CONSOLE_FORMAT + "<dim>{extra[context]}</dim>\n{exception}"


def file_format(record) -> str:
    record["extra"]["context"] = render_context(record["extra"].get("extra"))
    return FILE_FORMAT + "{extra[context]}\n{exception}"


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = True,
    log_dir: str = "logs",
    file_rotation: str = "10 MB",
    file_retention: str = "7 days",
    compression: str = "zip",
    serialize: bool = True,
) -> None:
    """Configure Loguru logger with a console sink and a rotating file sink."""
    logger.remove()

    logger.add(
        sys.stderr,
        level=level,
        format=console_format,
        colorize=True,
        serialize=False,
    )

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # JSON lines when serialize is on; the rendered text otherwise
        logger.add(
            log_path / "graphloom_{time:YYYY-MM-DD}.log",
            level=level,
            format=file_format,
            rotation=file_rotation,
            retention=file_retention,
            compression=compression,
            serialize=serialize,
            enqueue=True,
        )


def get_logger(name: str):
    """Get a logger instance for a module."""
    return logger.bind(module=name)
