"""
Unit tests for field extraction module.

Tests strategy variants, fallback ordering and the default chains.
"""

import pytest

from modules.field_extractor import (
    AttributeLookup,
    DEFAULT_FIELD_STRATEGIES,
    extract_field,
    extract_fields,
    LabeledTextScan,
    page_text,
    parse_document,
    phone_only,
    RegexScan,
    SelectorLookup,
    strip_mailto,
)
from modules.models import ExtractedFields
from modules.utils import ADDRESS_PATTERN, PHONE_PATTERN


@pytest.fixture
def microdata_page():
    """School page that only marks up its phone with microdata."""
    return parse_document("""
        <html><head><title>St. Anne School</title></head>
        <body>
            <div class="school-info">
                <span itemprop="telephone">(306) 659-7000</span>
            </div>
        </body></html>
    """)


@pytest.fixture
def contact_page():
    """School page with class-based contact markup."""
    return parse_document("""
        <html><body>
            <div class="contact-block">
                <p class="address">411 Avenue M South
                    Saskatoon, SK S7M 2K7</p>
                <p class="phone">306-659-7000</p>
                <p class="email">stanne@gscs.ca</p>
            </div>
        </body></html>
    """)


class TestExtractField:
    """Test the strategy chain contract."""

    def test_first_non_empty_wins(self, contact_page):
        """Test priority order."""
        strategies = [SelectorLookup('.missing'), SelectorLookup('.phone'), SelectorLookup('.email')]
        assert extract_field(contact_page, strategies) == "306-659-7000"

    def test_blank_match_falls_through(self):
        """Test that whitespace-only text counts as no match."""
        document = parse_document('<p class="phone">   </p><p class="tel">306-555-0101</p>')
        strategies = [SelectorLookup('.phone'), SelectorLookup('.tel')]
        assert extract_field(document, strategies) == "306-555-0101"

    def test_whitespace_collapsed(self, contact_page):
        """Test trimming and whitespace collapsing."""
        assert extract_field(contact_page, [SelectorLookup('.address')]) == "411 Avenue M South Saskatoon, SK S7M 2K7"

    def test_all_strategies_fail(self, contact_page):
        """Test the empty-string result."""
        assert extract_field(contact_page, [SelectorLookup('.fax'), SelectorLookup('#nothing')]) == ""
        assert extract_field(contact_page, []) == ""

    def test_malformed_selector_does_not_stop_chain(self, contact_page):
        """Test that a raising strategy is skipped, not fatal."""
        strategies = [SelectorLookup('div[[['), SelectorLookup('.email')]
        assert extract_field(contact_page, strategies) == "stanne@gscs.ca"

    def test_failing_post_process_does_not_stop_chain(self, contact_page):
        """Test that an exception from a post-process is contained."""
        def explode(value):
            raise RuntimeError("boom")

        strategies = [SelectorLookup('.phone', post_process=explode), SelectorLookup('.phone')]
        assert extract_field(contact_page, strategies) == "306-659-7000"

    def test_document_not_modified(self, contact_page):
        """Test that extraction has no side effects on the document."""
        before = str(contact_page)
        extract_fields(contact_page, DEFAULT_FIELD_STRATEGIES)
        assert str(contact_page) == before


class TestStrategies:
    """Test each strategy variant."""

    def test_attribute_lookup_mailto(self):
        """Test mailto: href with query string."""
        document = parse_document('<a href="mailto:office@gscs.ca?subject=Hello">Email the office</a>')
        strategy = AttributeLookup("a[href^='mailto:']", 'href', post_process=strip_mailto)
        assert strategy.extract(document) == "office@gscs.ca"

    def test_attribute_lookup_microdata_content(self):
        """Test microdata content attribute."""
        document = parse_document('<meta itemprop="telephone" content="306-555-1234">')
        assert AttributeLookup("[itemprop='telephone']", 'content').extract(document) == "306-555-1234"

    def test_attribute_lookup_falls_back_to_text(self):
        """Test element text when the attribute is missing."""
        document = parse_document('<span itemprop="email">info@gscs.ca</span>')
        assert AttributeLookup("[itemprop='email']", 'content').extract(document) == "info@gscs.ca"

    def test_regex_scan(self):
        """Test a pattern match against page text."""
        document = parse_document('<p>Call us at 306.659.7000 during office hours.</p>')
        assert RegexScan(PHONE_PATTERN).extract(document) == "306.659.7000"

    def test_regex_scan_ignores_scripts(self):
        """Test that invisible text is not scanned."""
        document = parse_document(
            "<script>var fax = '306-111-2222';</script><p>Main office 306-659-7000</p>"
        )
        assert RegexScan(PHONE_PATTERN).extract(document) == "306-659-7000"
        assert '306-111-2222' not in page_text(document)

    def test_regex_scan_address(self):
        """Test the postal address pattern."""
        document = parse_document('<footer><p>411 Avenue M South, Saskatoon, SK S7M 2K7</p></footer>')
        assert RegexScan(ADDRESS_PATTERN).extract(document) == "411 Avenue M South, Saskatoon, SK S7M 2K7"

    def test_labeled_text_same_line(self):
        """Test a value following its label in the same node."""
        document = parse_document('<p>Phone: (306) 659-7000</p>')
        assert LabeledTextScan(('Phone:',)).extract(document) == "(306) 659-7000"

    def test_labeled_text_next_node(self):
        """Test a value in the node after a standalone label."""
        document = parse_document('<dl><dt>Email:</dt><dd>stanne@gscs.ca</dd></dl>')
        assert LabeledTextScan(('Email:',)).extract(document) == "stanne@gscs.ca"

    def test_labeled_text_requires_label_start(self):
        """Test that 'Telephone:' does not match the label 'Phone:'."""
        document = parse_document('<p>Telephone: 306-659-7000</p>')
        assert LabeledTextScan(('Phone:',)).extract(document) is None
        assert LabeledTextScan(('Telephone:',)).extract(document) == "306-659-7000"

    def test_labeled_text_ignores_label_inside_words(self):
        """Test that 'Email Address:' is not read as an 'Address:' label."""
        document = parse_document('<p>Email Address: stanne@gscs.ca</p><p>Address: 411 Avenue M South</p>')
        assert LabeledTextScan(('Address:',)).extract(document) == "411 Avenue M South"

    def test_labeled_text_allows_leading_bullet(self):
        """Test a label preceded by a bullet character."""
        document = parse_document('<li>• Phone: 306-659-7000</li>')
        assert LabeledTextScan(('Phone:',)).extract(document) == "306-659-7000"

    def test_labeled_text_skips_rejected_value(self):
        """Test that a value the post-process empties moves on to the next occurrence."""
        document = parse_document('<p>Phone: see below</p><p>Phone: 306-659-7000</p>')
        assert LabeledTextScan(('Phone:',), post_process=phone_only).extract(document) == "306-659-7000"

    def test_labeled_text_skips_to_next_label(self):
        """Test falling through to a later label when the first one has no usable value."""
        document = parse_document('<p>Phone: call the office</p><p>Tel: 306.659.7000</p>')
        strategy = LabeledTextScan(('Phone:', 'Tel:'), post_process=phone_only)
        assert strategy.extract(document) == "306.659.7000"


class TestDefaultChains:
    """Test the default per-field chains."""

    def test_class_markup(self, contact_page):
        """Test the first-tier class selectors."""
        fields = extract_fields(contact_page, DEFAULT_FIELD_STRATEGIES)
        assert fields == ExtractedFields(
            address="411 Avenue M South Saskatoon, SK S7M 2K7",
            phone="306-659-7000",
            email="stanne@gscs.ca",
        )

    def test_microdata_only_phone(self, microdata_page):
        """Test a page where only the microdata strategy matches."""
        fields = extract_fields(microdata_page, DEFAULT_FIELD_STRATEGIES)
        assert fields.phone == "(306) 659-7000"
        assert fields.address == ""
        assert fields.email == ""

    def test_microdata_content_attributes(self):
        """Test <meta> microdata that carries values only in content attributes."""
        document = parse_document("""
            <div itemscope itemtype="https://schema.org/School">
                <meta itemprop="telephone" content="306-659-7000">
                <meta itemprop="email" content="stanne@gscs.ca">
                <meta itemprop="address" content="411 Avenue M South, Saskatoon, SK S7M 2K7">
            </div>
        """)
        fields = extract_fields(document, DEFAULT_FIELD_STRATEGIES)
        assert fields == ExtractedFields(
            address="411 Avenue M South, Saskatoon, SK S7M 2K7",
            phone="306-659-7000",
            email="stanne@gscs.ca",
        )

    def test_email_address_label_not_taken_as_address(self):
        """Test that an 'Email Address:' line does not fill the address."""
        document = parse_document(
            '<p>Email Address: stanne@gscs.ca</p>'
            '<p>411 Avenue M South, Saskatoon, SK S7M 2K7</p>'
        )
        fields = extract_fields(document, DEFAULT_FIELD_STRATEGIES)
        assert fields.address == "411 Avenue M South, Saskatoon, SK S7M 2K7"
        assert fields.email == "stanne@gscs.ca"

    def test_link_and_label_fallbacks(self):
        """Test tel:/mailto: links and labels on an unstructured page."""
        document = parse_document("""
            <div id="footer">
                <a href="tel:+13066597000">Call</a>
                <a href="mailto:office@gscs.ca">Email</a>
                <p>Address: 411 Avenue M South</p>
            </div>
        """)
        fields = extract_fields(document, DEFAULT_FIELD_STRATEGIES)
        assert fields.phone == "+13066597000"
        assert fields.email == "office@gscs.ca"
        assert fields.address == "411 Avenue M South"

    def test_missing_chain_gives_empty_field(self, contact_page):
        """Test fields without a configured chain."""
        fields = extract_fields(contact_page, {'phone': [SelectorLookup('.phone')]})
        assert fields == ExtractedFields(phone="306-659-7000")
        assert fields.missing() == ['address', 'email']
