"""
Dataset Output Module for School Contact Scraper
Writes the reconciled dataset as a formatted Excel workbook and as JSON.

Outputs:
    - Excel: one "Schools" sheet, columns and headers exactly as the schema
    - JSON: array of objects keyed by field key, in schema order

Formatting Features:
    - Styled header row
    - Frozen header row
    - Auto-fit column widths
    - Data filters on headers

Functions:
    - DatasetWriter.write: Write both files
    - write_excel: Excel workbook only
    - write_json: JSON file only
    - apply_header_formatting / freeze_header_row / auto_fit_columns /
      apply_data_filters: worksheet formatting helpers
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd
from loguru import logger
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows
from openpyxl.worksheet.worksheet import Worksheet

from config.settings import EXCEL_OUTPUT, JSON_OUTPUT
from modules.errors import FatalError
from modules.models import DEFAULT_SCHEMA, OutputSchema, Record

SHEET_NAME = 'Schools'

COLORS = {
    'header': '4472C4',      # Blue
    'header_text': 'FFFFFF'  # White
}


# =============================================================================
# Worksheet Formatting
# =============================================================================

def apply_header_formatting(ws: Worksheet) -> None:
    """
    Apply formatting to header row (row 1).

    Args:
        ws: Worksheet to format
    """
    header_fill = PatternFill(start_color=COLORS['header'], end_color=COLORS['header'], fill_type='solid')
    header_font = Font(bold=True, color=COLORS['header_text'], size=11)
    header_alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)

    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_alignment


def auto_fit_columns(ws: Worksheet, min_width: int = 12, max_width: int = 50) -> None:
    """
    Auto-fit column widths based on content.

    Args:
        ws: Worksheet to adjust
        min_width: Minimum column width
        max_width: Maximum column width
    """
    for column in ws.columns:
        column_letter = get_column_letter(column[0].column)
        max_length = max((len(str(cell.value)) for cell in column if cell.value), default=0)
        ws.column_dimensions[column_letter].width = max(min_width, min(max_length + 2, max_width))


def apply_data_filters(ws: Worksheet) -> None:
    """Add filter dropdowns to header row."""
    if ws.max_row > 1:  # Only add filters if there's data
        ws.auto_filter.ref = ws.dimensions


def freeze_header_row(ws: Worksheet) -> None:
    ws.freeze_panes = 'A2'


# =============================================================================
# Writers
# =============================================================================

def records_to_dataframe(records: Sequence[Record], schema: OutputSchema = DEFAULT_SCHEMA) -> pd.DataFrame:
    """Records as a DataFrame with the schema's headers as columns."""
    return pd.DataFrame(schema.rows(records), columns=schema.headers, dtype=object)


def build_workbook(records: Sequence[Record], schema: OutputSchema = DEFAULT_SCHEMA) -> Workbook:
    """
    Build the dataset workbook in memory.

    An empty record sequence gives a sheet with the header row only.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME

    if records:
        for row in dataframe_to_rows(records_to_dataframe(records, schema), index=False, header=True):
            ws.append(row)
    else:
        ws.append(schema.headers)
        logger.warning("No records to write, sheet has headers only")

    apply_header_formatting(ws)
    freeze_header_row(ws)
    auto_fit_columns(ws)
    apply_data_filters(ws)

    return wb


def write_excel(
    records: Sequence[Record],
    output_path: Union[str, Path],
    schema: OutputSchema = DEFAULT_SCHEMA
) -> Path:
    """
    Write records to an Excel workbook.

    Raises:
        FatalError: File cannot be written
    """
    path = Path(output_path)
    wb = build_workbook(records, schema)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
    except OSError as e:
        raise FatalError(f"Failed to write Excel dataset {path}: {e}") from e

    logger.info(f"Excel dataset written: {path} ({len(records)} rows)")
    return path


def records_to_json(records: Sequence[Record], schema: OutputSchema = DEFAULT_SCHEMA) -> List[Dict[str, str]]:
    """Records as plain dictionaries keyed by field key, in schema order."""
    return [{key: getattr(record, key) for key in schema.keys} for record in records]


def write_json(
    records: Sequence[Record],
    output_path: Union[str, Path],
    schema: OutputSchema = DEFAULT_SCHEMA
) -> Path:
    """
    Write records to a JSON file (UTF-8, indent 2).

    Raises:
        FatalError: File cannot be written
    """
    path = Path(output_path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(records_to_json(records, schema), f, indent=2, ensure_ascii=False)
            f.write('\n')
    except OSError as e:
        raise FatalError(f"Failed to write JSON dataset {path}: {e}") from e

    logger.info(f"JSON dataset written: {path} ({len(records)} records)")
    return path


@dataclass(frozen=True)
class WrittenDataset:
    excel_path: Path
    json_path: Path


class DatasetWriter:
    """
    Writes the output dataset to its Excel and JSON locations.

    Usage:
        writer = DatasetWriter()
        written = writer.write(records, population.schema)
    """

    def __init__(
        self,
        excel_path: Optional[Union[str, Path]] = None,
        json_path: Optional[Union[str, Path]] = None,
    ):
        self.excel_path = Path(excel_path or EXCEL_OUTPUT)
        self.json_path = Path(json_path or JSON_OUTPUT)

    def write(self, records: Sequence[Record], schema: OutputSchema = DEFAULT_SCHEMA) -> WrittenDataset:
        """
        Write the dataset to both files.

        Args:
            records: Output dataset, in order
            schema: Column order and headers

        Returns:
            WrittenDataset with both paths

        Raises:
            FatalError: Either file cannot be written
        """
        records = list(records)
        excel_path = write_excel(records, self.excel_path, schema)
        json_path = write_json(records, self.json_path, schema)
        logger.success(f"Dataset saved: {len(records)} records")
        return WrittenDataset(excel_path=excel_path, json_path=json_path)


__all__ = [
    'DatasetWriter',
    'WrittenDataset',
    'write_excel',
    'write_json',
    'build_workbook',
    'records_to_dataframe',
    'records_to_json',
    'SHEET_NAME',
]
