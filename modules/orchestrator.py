"""
Crawl Orchestrator for School Contact Scraper.

Drives one browser page across the population's targets, strictly one at
a time and in seed order. Each target moves through

    PENDING -> RESOLVING -> FETCHING -> EXTRACTING -> DONE
    PENDING -> RESOLVING -> FETCHING (failed) -> SKIPPED

A skipped target still produces a Record, with empty contact fields. Only
a FatalError (dead browser) stops the run.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup
from loguru import logger

from config.settings import (
    BACKOFF_FACTOR,
    MAX_DELAY,
    NAVIGATION_RETRIES,
    PACING_DELAY,
)
from modules.classifier import classify_language, classify_type
from modules.field_extractor import DEFAULT_FIELD_STRATEGIES, extract_fields, parse_document
from modules.link_extractor import find_contact_link
from modules.models import ExtractedFields, PopulationConfig, Record, Target
from modules.page_results import EvaluationError, NavigationError, PageResult, is_failure
from modules.rate_limiter import PacedTaskQueue
from modules.statistics import CrawlStats
from modules.url_resolver import UrlResolver


class TargetState:
    """Lifecycle states of a target within one run."""
    PENDING = 'pending'
    RESOLVING = 'resolving'
    FETCHING = 'fetching'
    EXTRACTING = 'extracting'
    DONE = 'done'
    SKIPPED = 'skipped'


def build_record(target: Target, url: str, fields: ExtractedFields, population: PopulationConfig) -> Record:
    """
    Assemble the output Record for a target.

    Args:
        target: Target from the seed list
        url: Page the contact fields were read from
        fields: Extracted contact fields (all empty for a skipped target)
        population: Population supplying category and language scheme

    Returns:
        Record with empty principal/superintendent placeholders
    """
    return Record(
        name=target.target_id,
        type=classify_type(target.display_name),
        category=population.category,
        french_status=classify_language(target, population.language_scheme),
        address=fields.address,
        phone=fields.phone,
        email=fields.email,
        url=url,
    )


class CrawlOrchestrator:
    """
    Sequential crawl of a population's targets.

    Usage:
        async with BrowserSession() as session:
            orchestrator = CrawlOrchestrator(session, population)
            records = await orchestrator.run(targets)
    """

    def __init__(
        self,
        session,
        population: PopulationConfig,
        queue: Optional[PacedTaskQueue] = None,
        retries: int = NAVIGATION_RETRIES,
    ):
        """
        Initialize orchestrator.

        Args:
            session: Navigation capability (goto/content), normally a BrowserSession
            population: Population being crawled
            queue: Paced task queue for navigations (built from settings if omitted)
            retries: Extra navigation attempts after a NavigationError
        """
        self.session = session
        self.population = population
        self.queue = queue or PacedTaskQueue(
            min_delay=PACING_DELAY,
            max_delay=MAX_DELAY,
            backoff_factor=BACKOFF_FACTOR,
        )
        self.retries = max(0, retries)
        self.resolver = UrlResolver(population.url_template, population.url_overrides)
        self.field_strategies = population.field_strategies or DEFAULT_FIELD_STRATEGIES

        self.stats = CrawlStats()
        self.states: Dict[str, str] = {}
        self._total = 0

    def _set_state(self, target: Target, state: str):
        self.states[target.target_id] = state

    async def run(self, targets: Sequence[Target]) -> List[Record]:
        """
        Crawl every target and return one Record per target, in input order.

        Raises:
            FatalError: The browser session died
        """
        targets = list(targets)
        self._total = len(targets)
        for target in targets:
            self._set_state(target, TargetState.PENDING)

        logger.info("=" * 70)
        logger.info(f"Crawling {self._total} '{self.population.key}' targets")
        logger.info("=" * 70)

        records = await self.queue.run(targets, self.process_target)

        self.stats.log_summary()
        queue_stats = self.queue.get_stats()
        logger.info(f"Pacing: {queue_stats['total_tasks']} fetches, {queue_stats['total_waited']}s waited")
        return records

    async def process_target(self, target: Target) -> Record:
        """Resolve, fetch and extract one target."""
        self.stats.attempted += 1
        position = f"[{self.stats.attempted}/{self._total or '?'}]"

        self._set_state(target, TargetState.RESOLVING)
        resolved = self.resolver.resolve(target)
        logger.info(f"{position} {target.target_id} -> {resolved.url} ({resolved.source})")

        self._set_state(target, TargetState.FETCHING)
        result = await self._load(resolved.url)
        if is_failure(result):
            return self._skip(target, resolved.url, result)

        self._set_state(target, TargetState.EXTRACTING)
        document = parse_document(result.value)
        fields = extract_fields(document, self.field_strategies)
        url = resolved.url

        if self.population.contact_link_texts and fields.missing():
            fields, url = await self._fill_from_contact_page(target, document, resolved.url, fields)

        self._set_state(target, TargetState.DONE)
        self.stats.record_done(fields)

        if fields.is_empty():
            logger.warning(f"{position} {target.target_id}: no contact fields found at {url}")
        else:
            found = ', '.join(name for name in ('address', 'phone', 'email') if getattr(fields, name))
            logger.success(f"{position} {target.target_id}: found {found}")

        return build_record(target, url, fields, self.population)

    def _skip(self, target: Target, url: str, failure: PageResult) -> Record:
        self._set_state(target, TargetState.SKIPPED)
        self.stats.record_skipped(target.target_id)

        if isinstance(failure, NavigationError):
            kind = 'Navigation timed out' if failure.timed_out else 'Navigation failed'
        else:
            kind = 'Page evaluation failed'
        logger.error(f"{kind} for {target.target_id} ({url}): {failure.message}")

        return build_record(target, url, ExtractedFields.empty(), self.population)

    async def _navigate(self, url: str) -> PageResult:
        """Paced navigation with retry and backoff on NavigationError."""
        attempts = self.retries + 1
        result = None

        for attempt in range(1, attempts + 1):
            result = await self.queue.submit(lambda: self.session.goto(url))

            if not isinstance(result, NavigationError):
                self.queue.record_success()
                return result

            self.queue.record_error()
            if attempt < attempts:
                self.stats.retries += 1
                logger.warning(f"Retrying {url} ({attempt}/{self.retries}): {result.message}")

        return result

    async def _load(self, url: str) -> PageResult:
        """Navigate to url and return Ok(html) or the failure."""
        result = await self._navigate(url)
        if is_failure(result):
            return result

        content = await self.session.content()
        if isinstance(content, EvaluationError):
            return content
        if not isinstance(content.value, str):
            return EvaluationError(url=url, message=f"Unexpected page content: {type(content.value).__name__}")
        return content

    async def _fill_from_contact_page(
        self,
        target: Target,
        document: BeautifulSoup,
        page_url: str,
        fields: ExtractedFields,
    ) -> Tuple[ExtractedFields, str]:
        """
        Follow the "Contact Us" link and fill the fields still empty.

        Returns:
            (fields, url of the page the fields came from)
        """
        contact_url = find_contact_link(document, page_url, self.population.contact_link_texts)
        if not contact_url:
            logger.debug(f"No contact link on {page_url}")
            return fields, page_url

        logger.info(f"Missing {', '.join(fields.missing())} for {target.target_id}, trying {contact_url}")
        result = await self._load(contact_url)
        if is_failure(result):
            logger.warning(f"Contact page failed for {target.target_id} ({contact_url}): {result.message}")
            return fields, page_url

        contact_fields = extract_fields(parse_document(result.value), self.field_strategies)
        filled = fields.fill_from(contact_fields)
        if filled == fields:
            return fields, page_url

        self.stats.contact_pages += 1
        return filled, contact_url


__all__ = ['CrawlOrchestrator', 'TargetState', 'build_record']
