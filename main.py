#!/usr/bin/env python3
"""
School Contact Scraper - Main CLI Interface

Complete workflow: Seed Targets + Crawl + Reconcile + Export
Crawls each school's contact page, merges the results into the previous
dataset and writes the Excel and JSON outputs.

Usage:
    python main.py

Everything is configured through .env (see config/settings.py).
Exits 0 when the run completes, 1 on an unrecoverable failure.
"""

import asyncio
import sys

from loguru import logger

from config.settings import (
    EXCEL_OUTPUT,
    JSON_OUTPUT,
    POPULATION,
    PRIOR_DATASET,
    SEED_FILE,
    validate_config,
)
from config.populations import get_population
from modules.browser_session import BrowserSession
from modules.dataset_writer import DatasetWriter
from modules.orchestrator import CrawlOrchestrator
from modules.reconciler import compare_with_prior, load_prior_dataset, merge
from modules.statistics import calculate_dataset_statistics
from modules.target_loader import build_targets
from modules.utils import setup_logger


def print_banner():
    """Print application banner."""
    print("=" * 70)
    print(" " * 22 + "SCHOOL CONTACT SCRAPER")
    print(" " * 17 + "Crawl + Reconcile + Excel/JSON Export")
    print("=" * 70)
    print()


async def run() -> int:
    """
    Run one complete scrape.

    Returns:
        Number of records written

    Raises:
        FatalError: Browser died, prior dataset unreadable or output not writable
    """
    population = get_population(POPULATION, seed_file=SEED_FILE)
    targets = build_targets(population)

    # An unreadable prior dataset aborts the run before any fetch
    prior = load_prior_dataset(PRIOR_DATASET, population.schema)

    if not targets:
        logger.warning("No targets to crawl")

    # Phase 1: Crawl
    async with BrowserSession() as session:
        orchestrator = CrawlOrchestrator(session, population)
        fresh = await orchestrator.run(targets)

    # Phase 2: Reconcile
    compare_with_prior(prior, fresh)
    records = merge(prior, fresh)

    # Phase 3: Export
    writer = DatasetWriter(EXCEL_OUTPUT, JSON_OUTPUT)
    writer.write(records, population.schema)
    calculate_dataset_statistics(records)

    return len(records)


def main():
    """Main entry point for the scraper."""
    setup_logger(POPULATION)
    print_banner()

    logger.info("Validating configuration...")
    validate_config()

    try:
        count = asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user (KeyboardInterrupt)")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.success(f"Run complete: {count} records in {EXCEL_OUTPUT.name} and {JSON_OUTPUT.name}")
    sys.exit(0)


if __name__ == '__main__':
    main()
