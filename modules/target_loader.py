"""
Target Loading Module for School Contact Scraper.

Turns a population's seed names into Targets: decoration markers are
counted and stripped, and any URL override is attached by target id.
"""

from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Union

from loguru import logger

from modules.errors import FatalError
from modules.models import PopulationConfig, Target
from modules.name_normalizer import clean_name, count_markers


def parse_seed_name(raw: str, overrides: Optional[Mapping[str, str]] = None) -> Target:
    """
    Build a Target from one seed name.

    Args:
        raw: Name as listed, e.g. "Brunskill School **"
        overrides: URL code per target id

    Returns:
        Target with markers counted and override attached
    """
    target_id = clean_name(raw)
    overrides = overrides or {}
    return Target(
        target_id=target_id,
        display_name=raw.strip(),
        decoration_markers=count_markers(raw),
        url_override=overrides.get(target_id) or None,
    )


def load_seed_file(path: Union[str, Path]) -> List[str]:
    """
    Read seed names from a text file, one per line.

    Blank lines and lines starting with '#' are ignored.

    Raises:
        FatalError: File missing or unreadable
    """
    seed_path = Path(path)
    try:
        lines = seed_path.read_text(encoding='utf-8').splitlines()
    except OSError as e:
        raise FatalError(f"Cannot read seed file {seed_path}: {e}") from e

    names = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        names.append(line)

    logger.debug(f"Read {len(names)} names from {seed_path}")
    return names


def build_targets(population: PopulationConfig, seed_names: Optional[Sequence[str]] = None) -> List[Target]:
    """
    Build the ordered target list for a population.

    Names that collapse to the same target id after cleaning are kept once
    (first occurrence wins).

    Args:
        population: Population being crawled
        seed_names: Names to use instead of population.seed_names

    Returns:
        Targets in seed order
    """
    names = population.seed_names if seed_names is None else seed_names

    targets = []
    seen = set()
    for raw in names:
        target = parse_seed_name(raw, population.url_overrides)
        if not target.target_id:
            logger.warning(f"Skipping blank seed name: {raw!r}")
            continue
        if target.target_id.casefold() in seen:
            logger.warning(f"Duplicate seed name: {target.target_id}")
            continue
        seen.add(target.target_id.casefold())
        targets.append(target)

    overridden = sum(1 for t in targets if t.url_override)
    logger.info(f"Loaded {len(targets)} targets for '{population.key}' ({overridden} with URL overrides)")
    return targets


__all__ = ['parse_seed_name', 'load_seed_file', 'build_targets']
