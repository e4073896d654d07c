"""
Root logging setup. Imported once by the application for its side effect.
"""
import logging

from oncosafe.services.interactions.config import get_config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None):
    level_name = (level or get_config().log_level or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
    logging.getLogger("httpx").setLevel(logging.WARNING)


configure_logging()
