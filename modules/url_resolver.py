"""
URL Resolution Module

Maps every Target to exactly one contact-page URL:
    1. An explicit override for the target (URL code or absolute URL) wins
    2. Otherwise the slugified name is substituted into the site template

A target without an override is never dropped; it always falls back to
its generated slug.
"""

from typing import Mapping, Optional

from loguru import logger

from modules.models import ResolvedUrl, Target
from modules.name_normalizer import slugify
from modules.utils import validate_url

OVERRIDE = 'override'
SLUG = 'slug'


class UrlResolver:
    """
    Resolves targets against a URL template and an override table.

    The template must contain a "{code}" placeholder, which receives either
    the override code or the slug. Overrides that are already absolute URLs
    are used as-is.
    """

    def __init__(self, url_template: str, overrides: Optional[Mapping[str, str]] = None):
        if '{code}' not in url_template:
            raise ValueError(f"URL template must contain '{{code}}': {url_template!r}")
        self.url_template = url_template
        self.overrides = dict(overrides or {})

    def _override_for(self, target: Target) -> Optional[str]:
        if target.url_override:
            return target.url_override
        return self.overrides.get(target.target_id)

    def resolve(self, target: Target) -> ResolvedUrl:
        """
        Resolve the contact-page URL for a target.

        Args:
            target: Target from the seed list

        Returns:
            ResolvedUrl with source 'override' or 'slug'
        """
        override = self._override_for(target)

        if override:
            if validate_url(override):
                url = override
            else:
                url = self.url_template.format(code=override.strip('/'))
            return ResolvedUrl(target_id=target.target_id, url=url, source=OVERRIDE)

        slug = slugify(target.target_id)
        if not slug:
            logger.warning(f"Empty slug for '{target.display_name}', URL will point at the site root")
        url = self.url_template.format(code=slug)
        return ResolvedUrl(target_id=target.target_id, url=url, source=SLUG)


__all__ = ['UrlResolver', 'OVERRIDE', 'SLUG']
