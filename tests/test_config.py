"""
Tests for configuration system.
"""

import pytest

from modules.classifier import LANGUAGE_SCHEMES
from modules.models import DEFAULT_SCHEMA


def test_config_loads_without_error():
    """Test that configuration loads without errors."""
    from config import settings
    assert settings.BASE_DIR.exists()
    assert settings.OUTPUT_DIR.exists()
    assert settings.LOGS_DIR.exists()


def test_crawl_config_values():
    """Test that crawl configuration has valid values."""
    from config.settings import (
        BACKOFF_FACTOR,
        MAX_DELAY,
        NAVIGATION_RETRIES,
        NAVIGATION_TIMEOUT,
        PACING_DELAY,
    )
    assert PACING_DELAY > 0
    assert MAX_DELAY >= PACING_DELAY
    assert BACKOFF_FACTOR >= 1.0
    assert NAVIGATION_RETRIES >= 0
    assert NAVIGATION_TIMEOUT > 0


def test_output_paths_follow_basename():
    """Test that both outputs share one basename."""
    from config.settings import EXCEL_OUTPUT, JSON_OUTPUT, OUTPUT_BASENAME
    assert EXCEL_OUTPUT.name == f"{OUTPUT_BASENAME}.xlsx"
    assert JSON_OUTPUT.name == f"{OUTPUT_BASENAME}.json"


def test_validate_config():
    """Test that validation runs."""
    from config.settings import validate_config
    assert validate_config() is True


class TestPopulations:
    """Test the built-in seed populations."""

    def test_catholic_population(self):
        """Test the Catholic list and its override table."""
        from config.populations import CATHOLIC_SCHOOLS, CATHOLIC_URL_OVERRIDES, get_population
        population = get_population('catholic')
        assert population.category == 'Catholic'
        assert population.language_scheme == 'name'
        assert len(population.seed_names) == len(CATHOLIC_SCHOOLS) == 53
        assert set(CATHOLIC_URL_OVERRIDES) == set(CATHOLIC_SCHOOLS)
        assert population.schema == DEFAULT_SCHEMA

    def test_public_population(self):
        """Test the marker-scheme population."""
        from config.populations import get_population
        population = get_population('PUBLIC')
        assert population.language_scheme == 'markers'
        assert '{code}' in population.url_template
        assert population.contact_link_texts

    def test_schemes_are_known(self):
        """Test that every population uses a supported scheme."""
        from config.populations import POPULATIONS
        assert all(p.language_scheme in LANGUAGE_SCHEMES for p in POPULATIONS.values())

    def test_seed_file_replaces_names(self, tmp_path):
        """Test SEED_FILE handling."""
        from config.populations import get_population
        seed_file = tmp_path / 'public.txt'
        seed_file.write_text("Brunskill School **\nLakeview School\n", encoding='utf-8')
        population = get_population('public', seed_file=seed_file)
        assert population.seed_names == ("Brunskill School **", "Lakeview School")

    def test_unknown_population(self):
        """Test that an unknown key is rejected."""
        from config.populations import get_population
        with pytest.raises(ValueError):
            get_population('private')
