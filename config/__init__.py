"""
Configuration package for School Contact Scraper.
"""

from config.settings import *

__all__ = ['settings']
