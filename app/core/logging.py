"""
Loguru setup shared by the API process and the notification worker.

Records are written to stdout. Production additionally keeps a rotating
file, and every request id bound with ``logger.bind(request_id=...)``
shows up in the line prefix.
"""
import sys
from loguru import logger
from app.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} - {message}"

logger.remove()
logger.configure(extra={"request_id": "-"})

logger.add(
    sys.stdout,
    format=CONSOLE_FORMAT,
    level=settings.log_level,
    colorize=settings.ENVIRONMENT != "test",
)

if settings.is_production:
    logger.add(
        settings.LOG_FILE,
        rotation="500 MB",
        retention="10 days",
        compression="zip",
        format=FILE_FORMAT,
        level=settings.log_level,
        enqueue=True,
    )

__all__ = ["logger"]
