"""
Statistics Module for School Contact Scraper
Tracks crawl progress and summarizes the finished dataset.

Contents:
    - CrawlStats: counters kept by the orchestrator during a run
    - get_field_coverage: how many records have each contact field
    - get_type_breakdown: record counts by institution type
    - get_language_breakdown: record counts by language-program status
    - calculate_dataset_statistics: all of the above in one dictionary
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from loguru import logger

from modules.models import ExtractedFields, FIELD_NAMES, Record


@dataclass
class CrawlStats:
    """Counters for one orchestrator run."""
    attempted: int = 0
    done: int = 0
    skipped: int = 0
    retries: int = 0
    contact_pages: int = 0
    field_hits: Dict[str, int] = field(default_factory=lambda: {name: 0 for name in FIELD_NAMES})
    skipped_targets: List[str] = field(default_factory=list)

    def record_done(self, fields: ExtractedFields):
        self.done += 1
        for name in FIELD_NAMES:
            if getattr(fields, name):
                self.field_hits[name] += 1

    def record_skipped(self, name: str):
        self.skipped += 1
        self.skipped_targets.append(name)

    @property
    def success_rate(self) -> float:
        return round(self.done / self.attempted * 100, 1) if self.attempted else 0.0

    def summary(self) -> Dict[str, Any]:
        """
        Snapshot of the counters.

        Returns:
            Dictionary with stats
            Example: {
                'attempted': 53, 'done': 51, 'skipped': 2, 'retries': 3,
                'contact_pages': 0, 'success_rate_pct': 96.2,
                'field_hits': {'address': 48, 'phone': 51, 'email': 50}
            }
        """
        return {
            'attempted': self.attempted,
            'done': self.done,
            'skipped': self.skipped,
            'retries': self.retries,
            'contact_pages': self.contact_pages,
            'success_rate_pct': self.success_rate,
            'field_hits': dict(self.field_hits),
        }

    def log_summary(self):
        logger.info("=" * 70)
        logger.info("CRAWL SUMMARY")
        logger.info("=" * 70)
        logger.info(f"Targets attempted:   {self.attempted}")
        logger.info(f"Pages extracted:     {self.done} ({self.success_rate}%)")
        logger.info(f"Targets skipped:     {self.skipped}")
        logger.info(f"Navigation retries:  {self.retries}")
        logger.info(f"Contact pages used:  {self.contact_pages}")
        for name in FIELD_NAMES:
            logger.info(f"  {name.capitalize():<8} found: {self.field_hits[name]}/{self.attempted}")
        if self.skipped_targets:
            logger.warning(f"Skipped: {', '.join(self.skipped_targets)}")
        logger.info("=" * 70)


def get_field_coverage(records: Sequence[Record]) -> Dict[str, int]:
    """
    Count records with a non-empty value for each contact field.

    Returns:
        Example: {'address': 40, 'phone': 52, 'email': 49}
    """
    return {name: sum(1 for record in records if getattr(record, name)) for name in FIELD_NAMES}


def get_type_breakdown(records: Sequence[Record]) -> Dict[str, int]:
    """Record counts by institution type, most common first."""
    return dict(Counter(record.type for record in records).most_common())


def get_language_breakdown(records: Sequence[Record]) -> Dict[str, int]:
    """Record counts by language-program status, most common first."""
    return dict(Counter(record.french_status for record in records).most_common())


def calculate_dataset_statistics(records: Sequence[Record]) -> Dict[str, Any]:
    """
    Summarize a finished dataset.

    Args:
        records: Output dataset

    Returns:
        {'total_records': n, 'field_coverage': {...}, 'by_type': {...}, 'by_language': {...}}
    """
    if not records:
        logger.warning("Empty dataset provided")
        return {'total_records': 0, 'field_coverage': {}, 'by_type': {}, 'by_language': {}}

    statistics = {
        'total_records': len(records),
        'field_coverage': get_field_coverage(records),
        'by_type': get_type_breakdown(records),
        'by_language': get_language_breakdown(records),
    }

    logger.info(f"Dataset statistics: {len(records)} records, coverage {statistics['field_coverage']}")
    return statistics


__all__ = [
    'CrawlStats',
    'get_field_coverage',
    'get_type_breakdown',
    'get_language_breakdown',
    'calculate_dataset_statistics',
]
