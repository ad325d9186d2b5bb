import logging
import pathlib
import sys

import pendulum
import seqlog

from core.config import settings

_root_logger = logging.getLogger()

SEQLOG_CONFIG_PATH = "./config/seqlog.yml"


def get_log_path(filename: str) -> pathlib.Path:
    if sys.platform == "linux":
        path = f"/app-logs/{filename}.log"
    else:
        path = f"~/logs/{filename}.log"

    log_path = pathlib.Path(path).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return log_path


def setup_logging_to_file(
    app: str,
    level: int = logging.INFO,
    *,
    logger: logging.Logger = _root_logger,
    timestamp: bool = True,
) -> pathlib.Path:
    formatter = logging.Formatter(
        "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s.%(funcName)s:%(lineno)d %(message)s"
    )
    if timestamp:
        filename = f"{app}.{pendulum.now():%Y%m%d.%H%M%S.%f}"
    else:
        filename = app
    log_path = get_log_path(filename)
    file_handler = logging.FileHandler(log_path)
    file_handler.formatter = formatter
    logger.setLevel(level)
    logger.addHandler(file_handler)
    return log_path


def setup_logging_to_console(level=logging.INFO, *, logger: logging.Logger = _root_logger):
    if not sys.stdout.isatty():
        return

    from rich.logging import RichHandler
    from rich.traceback import install

    install(show_locals=True)
    logger.setLevel(level)
    handler = RichHandler(rich_tracebacks=True, level=level, show_time=True)
    logger.addHandler(handler)


def setup_job_logging(app: str, level: int = logging.INFO, *, logger: logging.Logger = _root_logger):
    """Console, file and (when configured) Seq logging for a background job."""
    setup_logging_to_console(level=level, logger=logger)
    log_path = setup_logging_to_file(app=app, level=level, logger=logger)

    if settings.SEQ_SERVER_URL:
        seqlog.configure_from_file(SEQLOG_CONFIG_PATH)
        seqlog.set_global_log_properties(Application=app, Environment=settings.ENVIRONMENT_NAME)

    logger.info("Logging %s to %s", app, log_path)
