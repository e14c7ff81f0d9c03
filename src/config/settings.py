"""
Configuration settings for the Users Service
"""

import os
import logging
from dotenv import load_dotenv

load_dotenv()

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Environment configuration
DATABASE_URL = os.getenv("DATABASE_URL")
PORT = int(os.getenv("PORT", 8080))
APP_LOCALE = os.getenv("APP_LOCALE", "ru")

# Pagination defaults (Spring Data REST conventions)
DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", 20))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", 1000))

SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "true").lower() in ("1", "true", "yes")

SUPPORTED_LOCALES = ("ru", "en")

# Validate environment variables
if APP_LOCALE not in SUPPORTED_LOCALES:
    raise ValueError(f"APP_LOCALE must be one of {SUPPORTED_LOCALES}, got: {APP_LOCALE}")
if DEFAULT_PAGE_SIZE < 1 or MAX_PAGE_SIZE < DEFAULT_PAGE_SIZE:
    raise ValueError("DEFAULT_PAGE_SIZE must be >= 1 and <= MAX_PAGE_SIZE")
if not DATABASE_URL:
    logger.warning("DATABASE_URL not set - using in-memory user store")

# CORS settings
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")]
