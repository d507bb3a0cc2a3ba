"""
Field Extraction Module for School Contact Scraper.

Pulls a single contact field (address, phone, email) out of a loaded page
by trying an ordered chain of extraction strategies. Every strategy shares
one contract, extract(document) -> Optional[str], so selector lookups,
attribute lookups, page-text regex scans and label scans can be mixed in
one priority list:

    SelectorLookup    text of the first element matching a CSS selector
    AttributeLookup   attribute value (href, content) of a matching element
    RegexScan         first regex match in the visible page text
    LabeledTextScan   text that follows a literal label such as "Phone:"

The chain is always tried to the end: a strategy that raises (malformed
selector, unexpected markup) counts as "no match" for that strategy only.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction, Tag
from loguru import logger

from modules.models import ExtractedFields, FIELD_NAMES
from modules.utils import (
    clean_text,
    extract_email,
    extract_phone,
    EMAIL_PATTERN,
    PHONE_PATTERN,
    ADDRESS_PATTERN,
)

PostProcess = Callable[[str], Optional[str]]

# Text inside these tags is never shown to a reader
INVISIBLE_TAGS = {'script', 'style', 'noscript', 'template', 'head', 'title', 'meta'}


# =============================================================================
# Document Helpers
# =============================================================================

def parse_document(html: str) -> BeautifulSoup:
    """Parse page HTML into the document the strategies operate on."""
    return BeautifulSoup(html or '', 'html.parser')


def element_text(element: Tag) -> str:
    """Whitespace-collapsed text content of an element."""
    return clean_text(element.get_text(separator=' '))


def page_lines(document: BeautifulSoup) -> List[str]:
    """Visible text nodes of the page, cleaned, in document order."""
    lines = []
    for node in document.find_all(string=True):
        if isinstance(node, (Comment, Declaration, Doctype, ProcessingInstruction)):
            continue
        if node.parent is not None and node.parent.name in INVISIBLE_TAGS:
            continue
        text = clean_text(str(node))
        if text:
            lines.append(text)
    return lines


def page_text(document: BeautifulSoup) -> str:
    return '\n'.join(page_lines(document))


# =============================================================================
# Post-processing
# =============================================================================

def strip_mailto(value: str) -> str:
    """'mailto:office@gscs.ca?subject=Hi' -> 'office@gscs.ca'"""
    value = re.sub(r'^mailto:', '', value.strip(), flags=re.IGNORECASE)
    return value.split('?', 1)[0]


def strip_tel(value: str) -> str:
    return re.sub(r'^tel:', '', value.strip(), flags=re.IGNORECASE)


def phone_only(value: str) -> str:
    return extract_phone(value) or ''


def email_only(value: str) -> str:
    return extract_email(value) or ''


# =============================================================================
# Strategies
# =============================================================================

class ExtractionStrategy:
    """
    Base class for one way of reading a field from a page.

    Subclasses implement _find(); the optional post_process callable is
    applied to whatever _find() returns. LabeledTextScan overrides extract()
    to post-process each of its candidates in turn.
    """

    post_process: Optional[PostProcess] = None

    def extract(self, document: BeautifulSoup) -> Optional[str]:
        value = self._find(document)
        if value is None:
            return None
        if self.post_process is not None:
            value = self.post_process(value)
        return clean_text(value) or None

    def _find(self, document: BeautifulSoup) -> Optional[str]:
        raise NotImplementedError


@dataclass(frozen=True)
class SelectorLookup(ExtractionStrategy):
    selector: str
    post_process: Optional[PostProcess] = None

    def _find(self, document: BeautifulSoup) -> Optional[str]:
        element = document.select_one(self.selector)
        return element_text(element) if element is not None else None


@dataclass(frozen=True)
class AttributeLookup(ExtractionStrategy):
    """Attribute of the first element matching selector; element text if the attribute is blank."""
    selector: str
    attribute: str
    post_process: Optional[PostProcess] = None

    def _find(self, document: BeautifulSoup) -> Optional[str]:
        element = document.select_one(self.selector)
        if element is None:
            return None
        value = element.get(self.attribute)
        if isinstance(value, list):
            value = ' '.join(value)
        return value if value and value.strip() else element_text(element)


@dataclass(frozen=True)
class RegexScan(ExtractionStrategy):
    """First match of a pattern in the visible page text (for pages without semantic markup)."""
    pattern: str
    group: int = 0
    flags: int = 0
    post_process: Optional[PostProcess] = None

    def _find(self, document: BeautifulSoup) -> Optional[str]:
        match = re.search(self.pattern, page_text(document), self.flags)
        return match.group(self.group) if match else None


@dataclass(frozen=True)
class LabeledTextScan(ExtractionStrategy):
    """
    Text that follows a literal label at the start of a line.

    "Phone: 306-659-7000" yields the remainder of the same line; a label
    standing alone ("Phone:" followed by a separate element) yields the
    next non-empty line. A label inside other words ("Email Address:")
    does not count, and a value the post-process rejects moves the scan on
    to the next occurrence.
    """
    labels: Tuple[str, ...]
    post_process: Optional[PostProcess] = None

    def extract(self, document: BeautifulSoup) -> Optional[str]:
        for candidate in self._candidates(document):
            if self.post_process is not None:
                candidate = self.post_process(candidate)
            value = clean_text(candidate)
            if value:
                return value
        return None

    def _candidates(self, document: BeautifulSoup) -> Iterator[str]:
        lines = page_lines(document)
        for label in self.labels:
            # Only bullets or icons may precede the label
            pattern = re.compile(r'^[^A-Za-z0-9]*' + re.escape(label) + r'\s*(.*)', re.IGNORECASE)
            for index, line in enumerate(lines):
                match = pattern.search(line)
                if not match:
                    continue
                remainder = match.group(1).strip()
                if remainder:
                    yield remainder
                elif index + 1 < len(lines):
                    yield lines[index + 1]


Strategy = Union[SelectorLookup, AttributeLookup, RegexScan, LabeledTextScan]


# =============================================================================
# Extraction
# =============================================================================

def extract_field(document: BeautifulSoup, strategies: Sequence[ExtractionStrategy]) -> str:
    """
    Return the first non-empty value produced by strategies, in order.

    Args:
        document: Parsed page
        strategies: Extraction strategies, highest priority first

    Returns:
        Trimmed, whitespace-collapsed value, or '' when nothing matched
    """
    for strategy in strategies:
        try:
            value = strategy.extract(document)
        except Exception as e:
            logger.debug(f"Strategy {strategy!r} failed: {e}")
            continue

        value = clean_text(value)
        if value:
            return value

    return ''


def extract_fields(
    document: BeautifulSoup,
    field_strategies: Dict[str, Sequence[ExtractionStrategy]]
) -> ExtractedFields:
    """
    Extract every contact field with its own strategy chain.

    Fields without a configured chain come back empty.
    """
    values = {}
    for field_name in FIELD_NAMES:
        values[field_name] = extract_field(document, field_strategies.get(field_name, ()))
    return ExtractedFields(**values)


# =============================================================================
# Default Strategy Chains
# =============================================================================

def selector_chain(selectors: Iterable[str]) -> List[ExtractionStrategy]:
    return [SelectorLookup(selector) for selector in selectors]


def microdata(itemprop: str) -> List[ExtractionStrategy]:
    """Element text of an itemprop, then its content attribute (<meta itemprop=... content=...>)."""
    selector = f"[itemprop='{itemprop}']"
    return [SelectorLookup(selector), AttributeLookup(selector, 'content')]


ADDRESS_STRATEGIES: List[ExtractionStrategy] = (
    selector_chain(['.address'])
    + microdata('address')
    + selector_chain([
        '.contact-address',
        '.school-address',
        '.school-info .address',
    ])
    + [
        LabeledTextScan(('Address:', 'Location:')),
        RegexScan(ADDRESS_PATTERN),
    ]
)

PHONE_STRATEGIES: List[ExtractionStrategy] = (
    selector_chain(['.phone'])
    + microdata('telephone')
    + selector_chain([
        '.contact-phone',
        '.school-phone',
        '.school-info .phone',
    ])
    + [
        AttributeLookup("a[href^='tel:']", 'href', post_process=strip_tel),
        LabeledTextScan(('Phone:', 'Telephone:', 'Tel:'), post_process=phone_only),
        RegexScan(PHONE_PATTERN),
    ]
)

EMAIL_STRATEGIES: List[ExtractionStrategy] = (
    selector_chain(['.email'])
    + microdata('email')
    + selector_chain([
        '.contact-email',
        '.school-email',
        '.school-info .email',
    ])
    + [
        AttributeLookup("a[href^='mailto:']", 'href', post_process=strip_mailto),
        LabeledTextScan(('Email:', 'E-mail:'), post_process=email_only),
        RegexScan(EMAIL_PATTERN),
    ]
)

DEFAULT_FIELD_STRATEGIES: Dict[str, List[ExtractionStrategy]] = {
    'address': ADDRESS_STRATEGIES,
    'phone': PHONE_STRATEGIES,
    'email': EMAIL_STRATEGIES,
}


__all__ = [
    'ExtractionStrategy',
    'SelectorLookup',
    'AttributeLookup',
    'RegexScan',
    'LabeledTextScan',
    'extract_field',
    'extract_fields',
    'parse_document',
    'page_text',
    'strip_mailto',
    'strip_tel',
    'phone_only',
    'email_only',
    'DEFAULT_FIELD_STRATEGIES',
]
