"""
Logging configuration

Everything in the process logs through loguru. Library code (the
estimation modules, uvicorn) keeps using ``logging.getLogger(__name__)``
and is routed into loguru by ``InterceptHandler``.
"""
import functools
import logging
import reprlib
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from gse.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")

_arg_repr = reprlib.Repr()
_arg_repr.maxstring = 60
_arg_repr.maxother = 60


class InterceptHandler(logging.Handler):
    """
    Forward stdlib log records to loguru, keeping the original call site
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: Optional[str] = None, environment: Optional[str] = None):
    """
    Install the loguru sinks and route every stdlib logger through them.

    Sinks are enqueued so that writing a log line never blocks the
    keystroke callback thread. Production additionally writes a rotated
    file under ``logs/``.
    """
    level = level or settings.LOG_LEVEL
    environment = environment or settings.ENVIRONMENT

    logger.remove()
    logger.add(sys.stdout, enqueue=True, colorize=True, format=CONSOLE_FORMAT, level=level)

    if environment == "production":
        log_path = Path("logs")
        log_path.mkdir(exist_ok=True)
        logger.add(
            log_path / "gse_{time:YYYY-MM-DD}.log",
            rotation="50 MB",
            retention="14 days",
            enqueue=True,
            format=FILE_FORMAT,
            level=level,
        )

    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(level)

    for name in list(logging.root.manager.loggerDict):
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = []
        stdlib_logger.propagate = True

    for name in _UVICORN_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]

    logger.info(f"Logging configured - Level: {level}, Environment: {environment}")


def log_function_call(func):
    """
    Log a call's arguments at DEBUG, and failures at ERROR before re-raising.

    Used on control operations (pause, composition) whose arguments are
    worth seeing when reconstructing why the engine froze or resumed.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        rendered = [_arg_repr.repr(a) for a in args]
        rendered += [f"{k}={_arg_repr.repr(v)}" for k, v in kwargs.items()]
        logger.debug(f"Calling {func.__qualname__}({', '.join(rendered)})")
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__qualname__} failed with error: {e}")
            raise
    return wrapper
