"""
Logging configuration
"""
import logging
import sys

from inhouse.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)

logger = logging.getLogger("inhouse")
logger.setLevel(settings.LOG_LEVEL.upper())
