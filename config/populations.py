"""
Seed populations for School Contact Scraper.

Each population is one list of institution names plus the site tuning
needed to crawl it. The active population is chosen with POPULATION in
.env; SEED_FILE replaces the built-in name list.
"""

import os
from dataclasses import replace
from pathlib import Path
from typing import Dict, Optional, Union

from loguru import logger

from modules.classifier import MARKER_SCHEME, NAME_SCHEME
from modules.field_extractor import DEFAULT_FIELD_STRATEGIES
from modules.models import DEFAULT_SCHEMA, PopulationConfig
from modules.target_loader import load_seed_file

# =============================================================================
# Catholic Schools
# =============================================================================

CATHOLIC_SCHOOLS = (
    "Bethlehem Catholic High School",
    "Bishop Filevich Ukrainian Bilingual School",
    "Bishop James Mahoney High School",
    "Bishop Klein Community School",
    "Bishop Murray High School",
    "Bishop Pocock School",
    "Bishop Roborecki Community School",
    "Cyber School",
    "E. D. Feehan Catholic High School",
    "École Cardinal Leger School",
    "École Father Robinson School",
    "École française de Saskatoon",
    "École Holy Mary Catholic School",
    "École Sister O'Brien School",
    "École St. Gerard School",
    "École St. Luke School",
    "École St. Matthew School",
    "École St. Mother Teresa School",
    "École St. Paul School",
    "École St. Peter School",
    "Father Vachon School",
    "Georges Vanier Catholic Fine Arts School",
    "Holy Cross High School",
    "Holy Family Catholic School",
    "Holy Trinity Catholic School",
    "International Student Program",
    "Oskāyak High School",
    "Pope John Paul II School",
    "St. Angela School",
    "St. Anne School",
    "St. Augustine School",
    "St. Augustine School - Humboldt",
    "St. Bernard School",
    "St. Dominic School",
    "St. Dominic School - Humboldt",
    "St. Edward School",
    "St. Frances Cree Bilingual School – Bateman",
    "St. Frances Cree Bilingual School - McPherson",
    "St. Gabriel Biggar",
    "St. George School",
    "St. John Community School",
    "St. Joseph High School",
    "St. Kateri Tekakwitha Catholic School",
    "St. Lorenzo Ruiz Catholic School",
    "St. Marguerite School",
    "St. Maria Goretti Community School",
    "St. Mark Community School",
    "St. Mary's Wellness and Education Centre",
    "St. Michael Community School",
    "St. Nicholas Catholic School",
    "St. Philip School",
    "St. Thérèse of Lisieux Catholic School",
    "St. Volodymyr School",
)

# Division site codes (https://www.gscs.ca/<code>); slugs do not match these
CATHOLIC_URL_OVERRIDES = {
    "Bethlehem Catholic High School": "BET",
    "Bishop Filevich Ukrainian Bilingual School": "FIL",
    "Bishop James Mahoney High School": "BJM",
    "Bishop Klein Community School": "KLE",
    "Bishop Murray High School": "BMH",
    "Bishop Pocock School": "POC",
    "Bishop Roborecki Community School": "ROB",
    "Cyber School": "cyb",
    "E. D. Feehan Catholic High School": "EDF",
    "École Cardinal Leger School": "LEG",
    "École Father Robinson School": "RBI",
    "École française de Saskatoon": "FRE",
    "École Holy Mary Catholic School": "HMA",
    "École Sister O'Brien School": "OBR",
    "École St. Gerard School": "GER",
    "École St. Luke School": "LUK",
    "École St. Matthew School": "MAT",
    "École St. Mother Teresa School": "TER",
    "École St. Paul School": "PAU",
    "École St. Peter School": "PET",
    "Father Vachon School": "VAC",
    "Georges Vanier Catholic Fine Arts School": "VAN",
    "Holy Cross High School": "HCH",
    "Holy Family Catholic School": "FAM",
    "Holy Trinity Catholic School": "HTR",
    "International Student Program": "ISP",
    "Oskāyak High School": "OSK",
    "Pope John Paul II School": "JP2",
    "St. Angela School": "ANG",
    "St. Anne School": "ANN",
    "St. Augustine School": "AUG",
    "St. Augustine School - Humboldt": "HAU",
    "St. Bernard School": "BER",
    "St. Dominic School": "DOM",
    "St. Dominic School - Humboldt": "HDO",
    "St. Edward School": "EDW",
    "St. Frances Cree Bilingual School – Bateman": "frb",
    "St. Frances Cree Bilingual School - McPherson": "fra",
    "St. Gabriel Biggar": "BGA",
    "St. George School": "GEO",
    "St. John Community School": "JOH",
    "St. Joseph High School": "JOS",
    "St. Kateri Tekakwitha Catholic School": "kat",
    "St. Lorenzo Ruiz Catholic School": "lor",
    "St. Marguerite School": "MAG",
    "St. Maria Goretti Community School": "GOR",
    "St. Mark Community School": "MAK",
    "St. Mary's Wellness and Education Centre": "MRY",
    "St. Michael Community School": "MIC",
    "St. Nicholas Catholic School": "nic",
    "St. Philip School": "PHI",
    "St. Thérèse of Lisieux Catholic School": "the",
    "St. Volodymyr School": "VOL",
}

CATHOLIC = PopulationConfig(
    key='catholic',
    category='Catholic',
    url_template=os.getenv('CATHOLIC_URL_TEMPLATE', 'https://www.gscs.ca/{code}'),
    seed_names=CATHOLIC_SCHOOLS,
    url_overrides=CATHOLIC_URL_OVERRIDES,
    language_scheme=NAME_SCHEME,
    field_strategies=DEFAULT_FIELD_STRATEGIES,
    schema=DEFAULT_SCHEMA,
)

# =============================================================================
# Public Schools
# =============================================================================

# Public names carry their program status as trailing asterisks
# (* = English and French available, ** = French Immersion only).
# There is no bundled list: supply one through SEED_FILE.
PUBLIC = PopulationConfig(
    key='public',
    category='Public',
    url_template=os.getenv('PUBLIC_URL_TEMPLATE', 'https://{code}.spsd.sk.ca'),
    language_scheme=MARKER_SCHEME,
    field_strategies=DEFAULT_FIELD_STRATEGIES,
    contact_link_texts=('Contact Us', 'Contact'),
    schema=DEFAULT_SCHEMA,
)

POPULATIONS: Dict[str, PopulationConfig] = {
    CATHOLIC.key: CATHOLIC,
    PUBLIC.key: PUBLIC,
}


def get_population(key: str, seed_file: Optional[Union[str, Path]] = None) -> PopulationConfig:
    """
    Look up a population, optionally replacing its names with a seed file.

    Args:
        key: Population key ('catholic' or 'public')
        seed_file: Text file with one institution name per line

    Returns:
        PopulationConfig ready to hand to the orchestrator

    Raises:
        ValueError: Unknown population key
    """
    normalized = (key or '').strip().lower()
    if normalized not in POPULATIONS:
        raise ValueError(
            f"Unknown population '{key}'. Available: {', '.join(sorted(POPULATIONS))}"
        )

    population = POPULATIONS[normalized]

    if seed_file:
        names = load_seed_file(seed_file)
        logger.info(f"Using {len(names)} seed names from {seed_file}")
        population = replace(population, seed_names=tuple(names))

    if not population.seed_names:
        logger.warning(f"Population '{population.key}' has no seed names; set SEED_FILE")

    return population


__all__ = [
    'CATHOLIC_SCHOOLS',
    'CATHOLIC_URL_OVERRIDES',
    'CATHOLIC',
    'PUBLIC',
    'POPULATIONS',
    'get_population',
]
