"""
Exception hierarchy for School Contact Scraper.

Only unrecoverable failures are raised as exceptions. Per-target page
failures are returned as values (see modules.page_results) and never
escape the orchestrator.
"""


class ScraperError(Exception):
    """Base class for scraper exceptions."""


class FatalError(ScraperError):
    """
    Unrecoverable failure that terminates the run with a non-zero exit.

    Raised for a dead browser session, an unreadable prior dataset and
    output files that cannot be written.
    """


__all__ = ['ScraperError', 'FatalError']
