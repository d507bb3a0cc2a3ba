"""
Name Normalization Module

Turns an institution's display name into the URL-safe slug used to build
its contact-page URL, and strips seed decoration for display.

Slug steps run in a fixed order, each one relying on the shape left by
the previous step:
    1. Drop a leading "École"/"Ecole"
    2. Drop generic institution words (school, community, high, ...)
    3. Drop whitespace
    4. Drop accents (NFD decomposition, combining marks removed)
    5. Drop anything that is not an ASCII letter or digit
    6. Lowercase
"""

import re
import unicodedata

# ============================================================================
# Patterns
# ============================================================================

# Anchored at the start only. Both accent encodings of "É" are accepted so the
# result does not depend on how the seed text was normalized.
LANGUAGE_PREFIX_PATTERN = re.compile('^(?:\u00e9cole|e\u0301cole|ecole)', re.IGNORECASE)

# Substring removal, no word boundaries ("Highland" loses "High" too)
GENERIC_WORDS = ('school', 'community', 'collegiate', 'elementary', 'high', 'centre', 'center')
GENERIC_WORDS_PATTERN = re.compile('|'.join(GENERIC_WORDS), re.IGNORECASE)

WHITESPACE_PATTERN = re.compile(r'\s+')
COMBINING_MARKS_PATTERN = re.compile('[\u0300-\u036f]')
NON_ALPHANUMERIC_PATTERN = re.compile(r'[^a-zA-Z0-9]')

# Trailing asterisks encode language-program status in some seed lists
DECORATION_PATTERN = re.compile(r'\s*(\*+)\s*$')


# ============================================================================
# Slugs
# ============================================================================

def slugify(name: str) -> str:
    """
    Convert an institution name into its URL slug.

    Args:
        name: Display name, e.g. "École St. Gerard School"

    Returns:
        Slug, e.g. "stgerard"
    """
    slug = LANGUAGE_PREFIX_PATTERN.sub('', name or '')
    slug = GENERIC_WORDS_PATTERN.sub('', slug)
    slug = WHITESPACE_PATTERN.sub('', slug)
    slug = COMBINING_MARKS_PATTERN.sub('', unicodedata.normalize('NFD', slug))
    slug = NON_ALPHANUMERIC_PATTERN.sub('', slug)
    return slug.lower()


# ============================================================================
# Display Names
# ============================================================================

def clean_name(raw: str) -> str:
    """Strip trailing asterisks and surrounding whitespace from a seed name."""
    return DECORATION_PATTERN.sub('', raw or '').strip()


def count_markers(raw: str) -> int:
    """Number of trailing asterisks on a seed name."""
    match = DECORATION_PATTERN.search(raw or '')
    return len(match.group(1)) if match else 0


__all__ = [
    'slugify',
    'clean_name',
    'count_markers',
    'GENERIC_WORDS',
]
