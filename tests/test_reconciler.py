"""
Unit tests for reconciliation module.

Tests field merging, dataset ordering and prior dataset loading.
"""

import json

import pandas as pd
import pytest

from modules.errors import FatalError
from modules.models import DEFAULT_SCHEMA, Record
from modules.reconciler import (
    compare_with_prior,
    deduplicate_records,
    load_prior_dataset,
    merge,
    merge_records,
)


@pytest.fixture
def prior():
    """Previous dataset with one hand-enriched record."""
    return [
        Record(name='St. Anne School', phone='306-111-1111', email='anne@gscs.ca', principal='Jane Doe'),
        Record(name='St. Philip School', address='1 Main St', superintendent='John Roe'),
        Record(name='Closed School', phone='306-000-0000'),
    ]


class TestMergeRecords:
    """Test the per-field merge policy."""

    def test_fresh_non_empty_wins(self):
        """Test that a new value replaces the old one."""
        merged = merge_records(Record(name='A', phone='1'), Record(name='A', phone='2'))
        assert merged.phone == '2'

    def test_fresh_empty_keeps_prior(self):
        """Test that a failed scrape never erases data."""
        merged = merge_records(Record(name='A', phone='1', email='a@b.ca'), Record(name='A'))
        assert merged.phone == '1'
        assert merged.email == 'a@b.ca'

    def test_protected_fields_keep_prior(self):
        """Test that manual enrichment survives a re-scrape."""
        merged = merge_records(
            Record(name='A', principal='Jane Doe', superintendent=''),
            Record(name='A', principal='Someone Else', superintendent='John Roe'),
        )
        assert merged.principal == 'Jane Doe'
        assert merged.superintendent == 'John Roe'

    def test_inputs_not_mutated(self):
        """Test that merging builds a new record."""
        prior_record = Record(name='A', phone='1')
        fresh_record = Record(name='a', phone='2')
        merge_records(prior_record, fresh_record)
        assert prior_record.phone == '1'
        assert fresh_record.phone == '2'


class TestMerge:
    """Test dataset-level reconciliation."""

    def test_prior_order_then_new_records(self, prior):
        """Test output order."""
        fresh = [
            Record(name='New School', phone='306-222-2222'),
            Record(name='st. philip school', phone='306-333-3333'),
        ]
        output = merge(prior, fresh)
        assert [r.name for r in output] == ['St. Anne School', 'St. Philip School', 'Closed School', 'New School']

    def test_match_is_case_insensitive(self, prior):
        """Test that a name differing in case updates the prior record."""
        output = merge(prior, [Record(name='  ST. PHILIP SCHOOL ', phone='306-333-3333')])
        philip = output[1]
        assert philip.name == 'St. Philip School'
        assert philip.phone == '306-333-3333'
        assert philip.address == '1 Main St'
        assert philip.superintendent == 'John Roe'

    def test_absent_prior_records_retained(self, prior):
        """Test that records missing from this run are kept unchanged."""
        output = merge(prior, [Record(name='St. Anne School')])
        assert output[2] == prior[2]
        assert len(output) == 3

    def test_additive(self, prior):
        """Test that every prior record is still present."""
        fresh = [Record(name='New School'), Record(name='St. Anne School', email='new@gscs.ca')]
        output = merge(prior, fresh)
        output_keys = {r.key for r in output}
        assert all(r.key in output_keys for r in prior)

    def test_preservation_after_failed_scrape(self, prior):
        """Test that all-empty fresh fields keep prior values."""
        output = merge(prior, [Record(name='St. Anne School', type='Elementary', category='Catholic')])
        anne = output[0]
        assert anne.phone == '306-111-1111'
        assert anne.email == 'anne@gscs.ca'
        assert anne.principal == 'Jane Doe'
        assert anne.type == 'Elementary'

    def test_empty_prior(self):
        """Test first run with no prior dataset."""
        fresh = [Record(name='B'), Record(name='A')]
        assert merge([], fresh) == fresh

    def test_inputs_not_mutated(self, prior):
        """Test that neither input list changes."""
        prior_copy = list(prior)
        fresh = [Record(name='New School')]
        merge(prior, fresh)
        assert prior == prior_copy
        assert fresh == [Record(name='New School')]


class TestDeduplicate:
    """Test duplicate collapsing within one dataset."""

    def test_first_occurrence_kept(self):
        """Test position and value merging of duplicates."""
        records = [
            Record(name='A', phone='1'),
            Record(name='B'),
            Record(name='a', email='a@b.ca'),
        ]
        result = deduplicate_records(records)
        assert [r.name for r in result] == ['A', 'B']
        assert result[0].phone == '1'
        assert result[0].email == 'a@b.ca'

    def test_nameless_records_dropped(self):
        """Test records without a key."""
        assert deduplicate_records([Record(name='  ')]) == []


class TestCompareWithPrior:
    """Test new/updated/unchanged classification."""

    def test_classification(self, prior):
        """Test each category."""
        fresh = [
            Record(name='St. Anne School', phone='306-111-1111'),
            Record(name='St. Philip School', phone='306-333-3333'),
            Record(name='New School'),
        ]
        new, updated, unchanged = compare_with_prior(prior, fresh)
        assert new == ['New School']
        assert updated == ['St. Philip School']
        assert unchanged == ['St. Anne School']


class TestLoadPriorDataset:
    """Test loading the previous output."""

    def test_missing_file_is_empty(self, tmp_path):
        """Test first run without prior output."""
        assert load_prior_dataset(tmp_path / 'missing.json') == []
        assert load_prior_dataset(None) == []

    def test_json_with_field_keys(self, tmp_path):
        """Test the JSON written by the dataset writer."""
        path = tmp_path / 'catholic-schools.json'
        path.write_text(json.dumps([
            {'type': 'Elementary', 'name': 'St. Anne School', 'phone': '306-111-1111', 'principal': 'Jane Doe'},
        ]), encoding='utf-8')
        records = load_prior_dataset(path)
        assert records == [Record(name='St. Anne School', type='Elementary', phone='306-111-1111', principal='Jane Doe')]

    def test_json_with_headers_and_legacy_keys(self, tmp_path):
        """Test header-keyed and older public-list exports."""
        path = tmp_path / 'public-schools.json'
        path.write_text(json.dumps([
            {'Name': 'Brunskill School', 'French Status': 'French Immersion only'},
            {'name': 'Lakeview School', 'contactPageUrl': 'https://lakeview.spsd.sk.ca', 'language': 'English only'},
        ]), encoding='utf-8')
        records = load_prior_dataset(path, DEFAULT_SCHEMA)
        assert records[0].french_status == 'French Immersion only'
        assert records[1].url == 'https://lakeview.spsd.sk.ca'
        assert records[1].french_status == 'English only'

    def test_excel_with_blank_cells(self, tmp_path):
        """Test the first sheet of a workbook with empty cells."""
        path = tmp_path / 'catholic-schools.xlsx'
        pd.DataFrame([
            {'Name': 'St. Anne School', 'Phone': '306-111-1111', 'Principal': None},
            {'Name': None, 'Phone': '306-999-9999', 'Principal': None},
        ]).to_excel(path, sheet_name='Schools', index=False)

        records = load_prior_dataset(path)
        assert records == [Record(name='St. Anne School', phone='306-111-1111')]

    def test_corrupt_file_is_fatal(self, tmp_path):
        """Test unreadable prior dataset."""
        path = tmp_path / 'broken.json'
        path.write_text('{not json', encoding='utf-8')
        with pytest.raises(FatalError):
            load_prior_dataset(path)

    def test_corrupt_excel_is_fatal(self, tmp_path):
        """Test a file that is not a workbook."""
        path = tmp_path / 'broken.xlsx'
        path.write_bytes(b'not a zip file')
        with pytest.raises(FatalError):
            load_prior_dataset(path)

    def test_wrong_json_shape_is_fatal(self, tmp_path):
        """Test a JSON object instead of an array."""
        path = tmp_path / 'object.json'
        path.write_text('{"name": "A"}', encoding='utf-8')
        with pytest.raises(FatalError):
            load_prior_dataset(path)
