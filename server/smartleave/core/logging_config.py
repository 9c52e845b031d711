import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

from smartleave.core.config import settings

MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=BACKUP_COUNT)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_dir: str = None):
    """Configure application logging.

    Console plus four rotating files under ``LOG_DIR``:
    app.log, error.log, access.log (HTTP middleware) and consistency.log,
    where failed approvals that may need manual reconciliation are recorded.
    """
    log_path = Path(log_dir or settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt=DATE_FORMAT
    ))
    root_logger.addHandler(console_handler)

    file_formatter = logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)
    root_logger.addHandler(_rotating_handler(log_path / "app.log", level, file_formatter))
    root_logger.addHandler(_rotating_handler(log_path / "error.log", logging.ERROR, file_formatter))

    # Access logger (API requests), kept out of the app log
    access_logger = logging.getLogger("access")
    access_logger.setLevel(logging.INFO)
    access_logger.handlers.clear()
    access_logger.addHandler(_rotating_handler(
        log_path / "access.log",
        logging.INFO,
        logging.Formatter('%(asctime)s - %(message)s', datefmt=DATE_FORMAT),
    ))
    access_logger.propagate = False

    # Consistency logger: also propagates so errors reach error.log and the console
    consistency_logger = logging.getLogger("consistency")
    consistency_logger.setLevel(logging.WARNING)
    consistency_logger.handlers.clear()
    consistency_logger.addHandler(_rotating_handler(
        log_path / "consistency.log",
        logging.WARNING,
        logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s - request_id=%(request_id)s user_id=%(user_id)s days=%(days)s',
            datefmt=DATE_FORMAT,
        ),
    ))

    # SQLAlchemy logger (optional - can be verbose)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return root_logger
