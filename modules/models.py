"""
Data Model for School Contact Scraper

Plain dataclasses shared by every stage of the pipeline:
    - Target: one institution from the seed population
    - ResolvedUrl: the single contact-page URL derived for a Target
    - ExtractedFields: address / phone / email pulled from a page
    - Record: the persisted unit written to the output dataset
    - OutputSchema: ordered (column header, field key) pairs
    - PopulationConfig: seed list and site tuning for one population

Empty string always means "not found"; no field is ever None.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple


# ============================================================================
# Seed Input
# ============================================================================

@dataclass(frozen=True)
class Target:
    """
    One institution to resolve contact data for.

    Attributes:
        target_id: Stable identifier (display name without decoration markers)
        display_name: Name exactly as it appears in the seed list
        decoration_markers: Number of trailing asterisks in the seed name
        url_override: Site-specific URL code or absolute URL, if configured
    """
    target_id: str
    display_name: str
    decoration_markers: int = 0
    url_override: Optional[str] = None


@dataclass(frozen=True)
class ResolvedUrl:
    """Contact-page URL for a Target, and where it came from ('override' or 'slug')."""
    target_id: str
    url: str
    source: str


# ============================================================================
# Extraction Output
# ============================================================================

FIELD_NAMES = ('address', 'phone', 'email')


@dataclass(frozen=True)
class ExtractedFields:
    address: str = ''
    phone: str = ''
    email: str = ''

    @classmethod
    def empty(cls) -> 'ExtractedFields':
        """All-empty result used when a page could not be fetched."""
        return cls()

    def is_empty(self) -> bool:
        return not (self.address or self.phone or self.email)

    def missing(self) -> List[str]:
        """Names of the fields that are still empty."""
        return [name for name in FIELD_NAMES if not getattr(self, name)]

    def fill_from(self, other: 'ExtractedFields') -> 'ExtractedFields':
        """Return a copy where empty fields take the value from other."""
        return ExtractedFields(
            address=self.address or other.address,
            phone=self.phone or other.phone,
            email=self.email or other.email,
        )


# ============================================================================
# Persisted Record
# ============================================================================

# Fields reserved for manual enrichment: a non-empty value is never overwritten
PROTECTED_FIELDS = ('principal', 'superintendent')


@dataclass(frozen=True)
class Record:
    name: str
    type: str = ''
    category: str = ''
    french_status: str = ''
    address: str = ''
    phone: str = ''
    email: str = ''
    url: str = ''
    principal: str = ''
    superintendent: str = ''

    @property
    def key(self) -> str:
        """Dataset uniqueness key (case-insensitive name)."""
        return normalize_key(self.name)

    def to_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> 'Record':
        """
        Build a Record from a loosely-typed mapping.

        Unknown keys are ignored, missing keys and None/NaN values become ''.
        """
        values = {}
        for f in fields(cls):
            values[f.name] = _as_text(data.get(f.name))
        return cls(**values)

    def with_fields(self, **changes: str) -> 'Record':
        return replace(self, **changes)


RECORD_FIELDS = tuple(f.name for f in fields(Record))


def normalize_key(name: str) -> str:
    """Case-insensitive, whitespace-trimmed identity used for dataset membership."""
    return ' '.join(_as_text(name).split()).casefold()


def _as_text(value: object) -> str:
    if value is None:
        return ''
    # NaN is the only value not equal to itself (pandas fills blanks with it)
    if isinstance(value, float) and value != value:
        return ''
    return str(value).strip()


# ============================================================================
# Output Schema
# ============================================================================

@dataclass(frozen=True)
class OutputSchema:
    """Fixed ordered list of (column header, field key) pairs."""
    columns: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def __post_init__(self):
        unknown = [key for _, key in self.columns if key not in RECORD_FIELDS]
        if unknown:
            raise ValueError(f"Unknown record fields in schema: {unknown}")

    @property
    def headers(self) -> List[str]:
        return [header for header, _ in self.columns]

    @property
    def keys(self) -> List[str]:
        return [key for _, key in self.columns]

    def header_to_key(self) -> Dict[str, str]:
        return {header: key for header, key in self.columns}

    def row(self, record: Record) -> List[str]:
        """Record values in column order."""
        return [getattr(record, key) for key in self.keys]

    def rows(self, records: Iterable[Record]) -> List[List[str]]:
        return [self.row(record) for record in records]


DEFAULT_SCHEMA = OutputSchema(columns=(
    ('Type', 'type'),
    ('Category', 'category'),
    ('French Status', 'french_status'),
    ('Name', 'name'),
    ('Address', 'address'),
    ('URL', 'url'),
    ('Phone', 'phone'),
    ('Email', 'email'),
    ('Principal', 'principal'),
    ('Superintendent', 'superintendent'),
))


# ============================================================================
# Population Configuration
# ============================================================================

@dataclass(frozen=True)
class PopulationConfig:
    """
    Everything a run needs to know about one seed population.

    Attributes:
        key: Short identifier ('catholic', 'public')
        category: Value written to every record's category column
        url_template: Contact-page URL with a '{code}' placeholder
        seed_names: Institution names as listed, decoration included
        url_overrides: URL code (or absolute URL) per target id
        language_scheme: 'name' or 'markers'
        field_strategies: Extraction chain per field; empty uses the defaults
        contact_link_texts: Anchor texts of a "Contact Us" sub-page to follow
        schema: Output columns
    """
    key: str
    category: str
    url_template: str
    seed_names: Tuple[str, ...] = ()
    url_overrides: Dict[str, str] = field(default_factory=dict)
    language_scheme: str = 'name'
    field_strategies: Dict[str, Sequence[object]] = field(default_factory=dict)
    contact_link_texts: Tuple[str, ...] = ()
    schema: OutputSchema = DEFAULT_SCHEMA


__all__ = [
    'Target',
    'ResolvedUrl',
    'ExtractedFields',
    'Record',
    'OutputSchema',
    'PopulationConfig',
    'DEFAULT_SCHEMA',
    'FIELD_NAMES',
    'RECORD_FIELDS',
    'PROTECTED_FIELDS',
    'normalize_key',
]
