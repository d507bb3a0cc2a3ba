"""
Link Extraction Module

Finds the "Contact Us" sub-page linked from an institution's landing page,
so that fields missing on the landing page can be read from it.
"""

import re
from typing import Optional, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from loguru import logger

from modules.utils import clean_text, extract_domain

# Links that never lead to a contact page
EXCLUDE_PATTERNS = [
    r'\.pdf$',
    r'\.docx?$',
    r'\.jpe?g$',
    r'\.png$',
    r'^mailto:',
    r'^tel:',
    r'^#',
    r'^javascript:',
]


def _same_site(url: str, page_url: str) -> bool:
    return extract_domain(url) == extract_domain(page_url)


def _excluded(href: str) -> bool:
    return any(re.search(pattern, href, re.IGNORECASE) for pattern in EXCLUDE_PATTERNS)


def find_contact_link(
    document: BeautifulSoup,
    page_url: str,
    link_texts: Sequence[str],
) -> Optional[str]:
    """
    Find the contact sub-page linked from a page.

    Link texts are tried in priority order; the first same-site anchor whose
    text contains one of them (case-insensitive) wins.

    Args:
        document: Parsed landing page
        page_url: URL of the landing page (for resolving relative links)
        link_texts: Anchor texts to look for, e.g. ("Contact Us", "Contact")

    Returns:
        Absolute URL of the contact page, or None
    """
    anchors = []
    for anchor in document.find_all('a', href=True):
        href = anchor['href'].strip()
        if not href or _excluded(href):
            continue
        anchors.append((clean_text(anchor.get_text(separator=' ')).lower(), href))

    for wanted in link_texts:
        wanted = wanted.lower()
        for text, href in anchors:
            if wanted not in text:
                continue
            url = urljoin(page_url, href)
            if url.rstrip('/') == page_url.rstrip('/'):
                continue
            if not _same_site(url, page_url):
                logger.debug(f"Ignoring off-site contact link: {url}")
                continue
            return url

    return None


__all__ = ['find_contact_link', 'EXCLUDE_PATTERNS']
