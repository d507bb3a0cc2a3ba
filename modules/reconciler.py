"""
Reconciliation Module for School Contact Scraper
Merges freshly scraped records into the previous run's dataset.

Matching:
    Records are the same institution when their names match
    case-insensitively after whitespace trimming.

Merge Strategy (per field of a matched pair):
    - The prior spelling of the name is kept
    - Fresh non-empty value wins
    - Fresh empty value keeps the prior value
    - Protected fields (principal, superintendent) keep any non-empty
      prior value, since they are filled in by hand

Dataset Strategy:
    - Prior records keep their order, merged in place
    - Fresh records without a prior match are appended in seed order
    - Prior records missing from the fresh set are kept unchanged
    - Neither input is modified

Functions:
    - merge: Main reconciliation function
    - merge_records: Field-level merge of one matched pair
    - deduplicate_records: Collapse duplicate names within one dataset
    - compare_with_prior: Classify fresh records as new/updated/unchanged
    - load_prior_dataset: Load the previous JSON or Excel output
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd
from loguru import logger

from modules.errors import FatalError
from modules.models import DEFAULT_SCHEMA, OutputSchema, PROTECTED_FIELDS, RECORD_FIELDS, Record

# Keys written by older JSON exports of the public list
LEGACY_KEYS = {
    'contactPageUrl': 'url',
    'language': 'french_status',
}


def merge_records(prior: Record, fresh: Record) -> Record:
    """
    Merge a fresh record into its prior counterpart.

    Args:
        prior: Record from the previous dataset
        fresh: Record from this run

    Returns:
        New merged Record (inputs untouched)
    """
    changes = {}
    for field_name in RECORD_FIELDS:
        # The name is the match key; the prior spelling is kept
        if field_name == 'name':
            continue

        prior_value = getattr(prior, field_name)
        fresh_value = getattr(fresh, field_name)

        if field_name in PROTECTED_FIELDS and prior_value:
            continue
        if fresh_value and fresh_value != prior_value:
            changes[field_name] = fresh_value

    return prior.with_fields(**changes) if changes else prior


def deduplicate_records(records: Sequence[Record]) -> List[Record]:
    """
    Collapse records sharing a name into the first occurrence.

    Later duplicates are merged into the first one with the same field
    policy as merge_records, so their non-empty values are not lost.
    """
    merged: Dict[str, Record] = {}
    order: List[str] = []

    for record in records:
        key = record.key
        if not key:
            logger.warning("Dropping record without a name")
            continue
        if key in merged:
            merged[key] = merge_records(merged[key], record)
        else:
            merged[key] = record
            order.append(key)

    removed = len(records) - len(order)
    if removed:
        logger.info(f"Collapsed {removed} duplicate records")

    return [merged[key] for key in order]


def merge(prior: Sequence[Record], fresh: Sequence[Record]) -> List[Record]:
    """
    Reconcile this run's records against the prior dataset.

    Args:
        prior: Previous dataset (may be empty)
        fresh: Records from this run, in seed order

    Returns:
        Output dataset: prior order first, then new records
    """
    prior_records = deduplicate_records(prior)
    fresh_records = deduplicate_records(fresh)
    fresh_by_key = {record.key: record for record in fresh_records}
    prior_keys = {record.key for record in prior_records}

    output = []
    for record in prior_records:
        match = fresh_by_key.get(record.key)
        output.append(merge_records(record, match) if match is not None else record)

    added = [record for record in fresh_records if record.key not in prior_keys]
    output.extend(added)

    logger.info(
        f"Reconciled {len(fresh_records)} fresh with {len(prior_records)} prior records: "
        f"{len(added)} added, {len(output)} total"
    )
    return output


def compare_with_prior(
    prior: Sequence[Record],
    fresh: Sequence[Record]
) -> Tuple[List[str], List[str], List[str]]:
    """
    Classify fresh records against the prior dataset.

    Returns:
        Tuple of (new, updated, unchanged) record names
            - new: not in the prior dataset
            - updated: merging changes at least one field
            - unchanged: merging changes nothing
    """
    prior_by_key = {record.key: record for record in deduplicate_records(prior)}

    new, updated, unchanged = [], [], []
    for record in deduplicate_records(fresh):
        match = prior_by_key.get(record.key)
        if match is None:
            new.append(record.name)
        elif merge_records(match, record) != match:
            updated.append(record.name)
        else:
            unchanged.append(record.name)

    logger.info(f"Classification complete: {len(new)} new, {len(updated)} updated, {len(unchanged)} unchanged")
    return new, updated, unchanged


# =============================================================================
# Loading
# =============================================================================

def _row_to_record(row: Dict[str, object], header_map: Dict[str, str]) -> Record:
    data = {}
    for column, value in row.items():
        column = str(column).strip()
        key = header_map.get(column) or LEGACY_KEYS.get(column) or column
        if key in RECORD_FIELDS and key not in data:
            data[key] = value
    return Record.from_dict(data)


def _read_rows(path: Path) -> List[Dict[str, object]]:
    suffix = path.suffix.lower()

    if suffix == '.json':
        with open(path, encoding='utf-8') as f:
            rows = json.load(f)
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise ValueError("expected a JSON array of objects")
        return rows

    if suffix in ('.xlsx', '.xlsm'):
        df = pd.read_excel(path, sheet_name=0, dtype=str)
        return df.to_dict(orient='records')

    raise ValueError(f"unsupported file format {suffix!r}, use .json or .xlsx")


def load_prior_dataset(
    file_path: Optional[Union[str, Path]],
    schema: OutputSchema = DEFAULT_SCHEMA
) -> List[Record]:
    """
    Load the previous dataset from JSON or Excel.

    Columns may be field keys ('phone') or schema headers ('Phone').

    Args:
        file_path: Path to prior dataset (.json or .xlsx); None means no prior
        schema: Schema used to map column headers to field keys

    Returns:
        Records in file order; empty list if the file does not exist

    Raises:
        FatalError: File exists but cannot be read or parsed
    """
    if not file_path:
        return []

    path = Path(file_path)
    if not path.exists():
        logger.info(f"No prior dataset at {path}, starting fresh")
        return []

    try:
        rows = _read_rows(path)
    except Exception as e:
        raise FatalError(f"Cannot read prior dataset {path}: {e}") from e

    header_map = schema.header_to_key()
    records = []
    for row in rows:
        record = _row_to_record(row, header_map)
        if record.key:
            records.append(record)

    skipped = len(rows) - len(records)
    if skipped:
        logger.warning(f"Ignored {skipped} prior rows without a name")

    logger.info(f"Loaded prior dataset from {path}: {len(records)} records")
    return records


__all__ = [
    'merge',
    'merge_records',
    'deduplicate_records',
    'compare_with_prior',
    'load_prior_dataset',
    'LEGACY_KEYS',
]
