"""
Utility functions for School Contact Scraper.

Provides logging setup, URL helpers and common text helpers.
"""

import re
import sys
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from loguru import logger

from config.settings import (
    LOGS_DIR,
    LOG_LEVEL,
    LOG_MAX_SIZE,
    LOG_BACKUP_COUNT,
)


# =============================================================================
# Logging Setup
# =============================================================================

def setup_logger(run_name: str = "scrape", log_file: Optional[str] = None) -> logger:
    """
    Route loguru output to the console and to a rotating file in LOGS_DIR.

    Args:
        run_name: Label for this run, written to the first log line
        log_file: File name inside LOGS_DIR (default: school_contacts_YYYYMMDD.log)

    Returns:
        The configured loguru logger
    """
    logger.remove()

    # Colors only on a terminal; piped output stays plain
    logger.add(
        sink=lambda msg: print(msg, end=''),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=LOG_LEVEL,
        colorize=sys.stdout.isatty(),
    )

    log_path = LOGS_DIR / (log_file or f"school_contacts_{datetime.now():%Y%m%d}.log")
    logger.add(
        sink=log_path,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
        level=LOG_LEVEL,
        rotation=LOG_MAX_SIZE,
        retention=LOG_BACKUP_COUNT,
        compression="zip",
    )

    logger.info(f"Starting {run_name} run (level {LOG_LEVEL}), logging to {log_path}")
    return logger


# =============================================================================
# URL Utilities
# =============================================================================

def validate_url(url: str) -> bool:
    """
    Validate that a URL is well-formed.

    Args:
        url: URL to validate

    Returns:
        True if valid, False otherwise
    """
    try:
        result = urlparse(url)
        return all([result.scheme in ('http', 'https'), result.netloc])
    except ValueError:
        return False


def normalize_url(url: str) -> str:
    """
    Normalize URL by ensuring scheme and removing trailing slashes.

    Args:
        url: URL to normalize

    Returns:
        Normalized URL
    """
    url = url.strip()

    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    return url.rstrip('/')


def extract_domain(url: str) -> str:
    """Lowercased host of url, e.g. 'www.gscs.ca' (scheme optional)."""
    parsed = urlparse(normalize_url(url))
    return parsed.netloc.lower()


# =============================================================================
# Text Processing
# =============================================================================

EMAIL_PATTERN = r'[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}'

# North American numbers: (306) 659-7000, 306-659-7000, 306.659.7000, +1 306 659 7000
PHONE_PATTERN = r'(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}'

# Street address ending in a Canadian postal code, e.g. "411 Avenue M South Saskatoon, SK S7M 2K7"
ADDRESS_PATTERN = r'\d{1,5}[^\n]{3,80}?\b[A-Z]{2},?\s+[A-Z]\d[A-Z]\s?\d[A-Z]\d\b'


def clean_text(text: Optional[str]) -> str:
    """
    Clean and normalize text.

    Trims the value, replaces non-breaking spaces, drops zero-width
    spaces and collapses every whitespace run into a single space.

    Args:
        text: Text to clean

    Returns:
        Cleaned text ('' for None)
    """
    if not text:
        return ''

    text = text.replace('\xa0', ' ')
    text = text.replace('\u200b', '')  # Zero-width space

    return ' '.join(text.split())


def extract_email(text: str) -> Optional[str]:
    """First email address in text, or None."""
    match = re.search(rf'\b{EMAIL_PATTERN}\b', text or '')
    return match.group(0) if match else None


def extract_phone(text: str) -> Optional[str]:
    """First North American phone number in text, or None."""
    match = re.search(PHONE_PATTERN, text or '')
    return match.group(0).strip() if match else None


# =============================================================================
# Export public API
# =============================================================================

__all__ = [
    'setup_logger',
    'validate_url',
    'normalize_url',
    'extract_domain',
    'clean_text',
    'extract_email',
    'extract_phone',
    'EMAIL_PATTERN',
    'PHONE_PATTERN',
    'ADDRESS_PATTERN',
]
