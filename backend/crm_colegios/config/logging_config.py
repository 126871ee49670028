import logging
from logging.handlers import RotatingFileHandler
import os
from crm_colegios.config import settings

LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s'


def setup_logging(level=None, log_dir=None):
    """Configura el logger raíz: consola siempre, archivo rotativo si hay LOG_DIR."""
    level = level or settings.LOG_LEVEL
    log_dir = settings.LOG_DIR if log_dir is None else log_dir

    formatter = logging.Formatter(LOG_FORMAT)
    logger = logging.getLogger()
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'crm_colegios.log'),
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8',
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # pymongo es muy verboso en DEBUG
    logging.getLogger('pymongo').setLevel(logging.WARNING)
    return logger
