# admissions/config/logger.py
import logging
import sys

from admissions.config.config import settings

LOG_LEVEL = logging.DEBUG if settings.env == "dev" else logging.INFO

logger = logging.getLogger("admissions")
logger.setLevel(LOG_LEVEL)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(LOG_LEVEL)
    # transfers log from worker threads named transfer_N, requests from MainThread
    handler.setFormatter(logging.Formatter(
        f"%(asctime)s %(levelname)-5s [admissions:{settings.env}] [%(threadName)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)
