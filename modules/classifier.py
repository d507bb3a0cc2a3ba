"""
Classification Module

Derives categorical attributes of an institution from its raw name:
    - Institution type (High School / Online / Special Program / Elementary)
    - Language-program status, by one of two schemes:
        * name scheme: keywords in the name ("french", "bilingual")
        * marker scheme: number of trailing asterisks in the seed list

Rules are ordered tables evaluated first-match-wins with
case-insensitive substring tests. A population uses exactly one
language scheme for a whole run.
"""

from typing import List, Tuple

from modules.models import Target

# ============================================================================
# Rule Tables
# ============================================================================

HIGH_SCHOOL = 'High School'
ONLINE = 'Online'
SPECIAL_PROGRAM = 'Special Program'
ELEMENTARY = 'Elementary'

# Precedence matters: "International High" is a High School
TYPE_RULES: List[Tuple[str, str]] = [
    ('high', HIGH_SCHOOL),
    ('cyber', ONLINE),
    ('international', SPECIAL_PROGRAM),
]

FRENCH_IMMERSION = 'French Immersion'
BILINGUAL = 'Bilingual'
ENGLISH = 'English'

LANGUAGE_RULES: List[Tuple[str, str]] = [
    ('french', FRENCH_IMMERSION),
    ('bilingual', BILINGUAL),
]

ENGLISH_ONLY = 'English only'
ENGLISH_AND_FRENCH = 'English and French available'
FRENCH_IMMERSION_ONLY = 'French Immersion only'

# Language schemes
NAME_SCHEME = 'name'
MARKER_SCHEME = 'markers'
LANGUAGE_SCHEMES = (NAME_SCHEME, MARKER_SCHEME)


def _first_match(name: str, rules: List[Tuple[str, str]], default: str) -> str:
    lowered = (name or '').lower()
    for keyword, label in rules:
        if keyword in lowered:
            return label
    return default


# ============================================================================
# Classifiers
# ============================================================================

def classify_type(name: str) -> str:
    """Institution type from its name."""
    return _first_match(name, TYPE_RULES, ELEMENTARY)


def classify_language_status(name: str) -> str:
    """Language program from keywords in the name (name scheme)."""
    return _first_match(name, LANGUAGE_RULES, ENGLISH)


def classify_language_by_markers(markers: int) -> str:
    """Language program from the trailing asterisk count (marker scheme)."""
    if markers <= 0:
        return ENGLISH_ONLY
    if markers == 1:
        return ENGLISH_AND_FRENCH
    return FRENCH_IMMERSION_ONLY


def classify_language(target: Target, scheme: str) -> str:
    """
    Language program for a target under the population's scheme.

    Args:
        target: Target from the seed list
        scheme: 'name' or 'markers'

    Returns:
        Language-program label

    Raises:
        ValueError: unknown scheme
    """
    if scheme == NAME_SCHEME:
        return classify_language_status(target.display_name)
    if scheme == MARKER_SCHEME:
        return classify_language_by_markers(target.decoration_markers)
    raise ValueError(f"Unknown language scheme: {scheme!r} (expected one of {LANGUAGE_SCHEMES})")


__all__ = [
    'classify_type',
    'classify_language_status',
    'classify_language_by_markers',
    'classify_language',
    'NAME_SCHEME',
    'MARKER_SCHEME',
    'LANGUAGE_SCHEMES',
]
