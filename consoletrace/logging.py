import logging

logger = logging.getLogger("consoletrace")
logger.setLevel(logging.INFO)
