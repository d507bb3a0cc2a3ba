"""
Configuration settings for School Contact Scraper.

Loads environment variables and provides configuration constants
with sensible defaults and validation.
"""

import os
from pathlib import Path
from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env file
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_FILE = BASE_DIR / '.env'

if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
    logger.info(f"Loaded configuration from {ENV_FILE}")
else:
    logger.debug(f".env file not found at {ENV_FILE}. Using defaults.")

# =============================================================================
# Directory Paths
# =============================================================================

MODULES_DIR = BASE_DIR / 'modules'
CONFIG_DIR = BASE_DIR / 'config'
OUTPUT_DIR = Path(os.getenv('OUTPUT_DIR', '').strip() or BASE_DIR / 'output')
LOGS_DIR = Path(os.getenv('LOGS_DIR', '').strip() or BASE_DIR / 'logs')

# Create directories if they don't exist
for directory in [OUTPUT_DIR, LOGS_DIR]:
    directory.mkdir(parents=True, exist_ok=True)

# =============================================================================
# Helpers
# =============================================================================

def _get_float(key: str, default: float) -> float:
    """Get float value from environment variable."""
    try:
        return float(os.getenv(key, default))
    except ValueError:
        logger.warning(f"Invalid value for {key}, using default: {default}")
        return default

def _get_int(key: str, default: int) -> int:
    """Get integer value from environment variable."""
    try:
        return int(os.getenv(key, default))
    except ValueError:
        logger.warning(f"Invalid value for {key}, using default: {default}")
        return default

def _get_bool(key: str, default: bool) -> bool:
    """Get boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on')

# =============================================================================
# Population Selection
# =============================================================================

# Which seed population to crawl (see config/populations.py)
POPULATION = os.getenv('POPULATION', 'catholic').strip().lower() or 'catholic'

# Optional seed file (one institution name per line) replacing the built-in list
SEED_FILE = os.getenv('SEED_FILE', '').strip() or None

# =============================================================================
# Crawl Configuration
# =============================================================================

# Politeness interval: hard floor between consecutive page fetches (seconds)
PACING_DELAY = _get_float('PACING_DELAY', 3.0)
MAX_DELAY = _get_float('MAX_DELAY', 10.0)
BACKOFF_FACTOR = _get_float('BACKOFF_FACTOR', 1.5)

# Navigation retries after a failed fetch (0 = no retry)
NAVIGATION_RETRIES = _get_int('NAVIGATION_RETRIES', 1)

# User agent rotation
USE_RANDOM_USER_AGENT = _get_bool('USE_RANDOM_USER_AGENT', True)

# Browser settings
HEADLESS_BROWSER = _get_bool('HEADLESS_BROWSER', True)
NAVIGATION_TIMEOUT = _get_int('NAVIGATION_TIMEOUT', 30000)  # milliseconds
SETTLE_DELAY = _get_int('SETTLE_DELAY', 2000)  # milliseconds, for dynamic content
WAIT_UNTIL = os.getenv('WAIT_UNTIL', 'domcontentloaded').strip() or 'domcontentloaded'

# =============================================================================
# Dataset Files
# =============================================================================

OUTPUT_BASENAME = os.getenv('OUTPUT_BASENAME', '').strip() or f"{POPULATION}-schools"
EXCEL_OUTPUT = OUTPUT_DIR / f"{OUTPUT_BASENAME}.xlsx"
JSON_OUTPUT = OUTPUT_DIR / f"{OUTPUT_BASENAME}.json"

# The previous run's JSON output is the default merge baseline
PRIOR_DATASET = Path(os.getenv('PRIOR_DATASET', '').strip() or JSON_OUTPUT)

# =============================================================================
# Logging Configuration
# =============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
LOG_MAX_SIZE = _get_int('LOG_MAX_SIZE', 10) * 1024 * 1024  # Convert MB to bytes
LOG_BACKUP_COUNT = _get_int('LOG_BACKUP_COUNT', 5)

# =============================================================================
# Validation & Reporting
# =============================================================================

def validate_config():
    """Validate configuration and log status."""
    logger.info("=" * 70)
    logger.info("School Contact Scraper - Configuration Status")
    logger.info("=" * 70)

    logger.info(f"Population:          {POPULATION}")
    logger.info(f"Seed File:           {SEED_FILE or '(built-in list)'}")

    logger.info("Crawl Settings:")
    logger.info(f"  Pacing Delay:      {PACING_DELAY}s (max {MAX_DELAY}s, backoff x{BACKOFF_FACTOR})")
    logger.info(f"  Navigation Timeout:{NAVIGATION_TIMEOUT}ms")
    logger.info(f"  Settle Delay:      {SETTLE_DELAY}ms")
    logger.info(f"  Retries:           {NAVIGATION_RETRIES}")
    logger.info(f"  Headless Browser:  {HEADLESS_BROWSER}")

    logger.info("Datasets:")
    logger.info(f"  Prior:  {PRIOR_DATASET}")
    logger.info(f"  Excel:  {EXCEL_OUTPUT}")
    logger.info(f"  JSON:   {JSON_OUTPUT}")
    logger.info(f"  Logs:   {LOGS_DIR}")

    logger.info("=" * 70)

    if PACING_DELAY <= 0:
        logger.warning("PACING_DELAY is not positive; requests will not be paced")
    if MAX_DELAY < PACING_DELAY:
        logger.warning("MAX_DELAY is below PACING_DELAY; backoff is disabled")

    return True

# =============================================================================
# Export configuration
# =============================================================================

__all__ = [
    'BASE_DIR',
    'OUTPUT_DIR',
    'LOGS_DIR',
    'POPULATION',
    'SEED_FILE',
    'PACING_DELAY',
    'MAX_DELAY',
    'BACKOFF_FACTOR',
    'NAVIGATION_RETRIES',
    'USE_RANDOM_USER_AGENT',
    'HEADLESS_BROWSER',
    'NAVIGATION_TIMEOUT',
    'SETTLE_DELAY',
    'WAIT_UNTIL',
    'OUTPUT_BASENAME',
    'EXCEL_OUTPUT',
    'JSON_OUTPUT',
    'PRIOR_DATASET',
    'LOG_LEVEL',
    'LOG_MAX_SIZE',
    'LOG_BACKUP_COUNT',
    'validate_config',
]
