"""
Tests for the Record Extractor (Layer 1: XML → ExtractedRecords).

These tests verify:
    - Scalar capture with last-write-wins
    - Label series creation, reopening and ordering
    - Attribute order handling on a single tag
    - Malformed input and I/O failures
    - The event state machine on its own, with synthetic events
"""

import io

import pytest
from ecucsv.errors import ConversionIOError, MalformedXmlError
from ecucsv.extractor import (
    RecordExtractor,
    StartTag,
    Text,
    extract,
    extract_events,
    extract_string,
    iter_xml_events,
)
from ecucsv.model import LabelSeries


SAMPLE_XML = (
    b'<root><temp>98.6</temp>'
    b'<sample name="ch1" value="1"/>'
    b'<sample name="ch1" value="2"/>'
    b'<sample name="ch2" value="9"/></root>'
)


class TestEndToEndExtraction:
    """The canonical small document."""

    def test_scalars(self):
        records = extract(SAMPLE_XML)
        assert records.scalars == {"temp": "98.6"}

    def test_series(self):
        records = extract(SAMPLE_XML)
        assert records.series == [
            LabelSeries("ch1", ["1", "2"]),
            LabelSeries("ch2", ["9"]),
        ]

    def test_extraction_is_deterministic(self):
        """Same bytes in, same records and ordering out."""
        first = extract(SAMPLE_XML)
        second = extract(SAMPLE_XML)
        assert first == second
        assert list(first.scalars) == list(second.scalars)
        assert first.series_names() == second.series_names()

    def test_from_file_path(self, tmp_path):
        path = tmp_path / "log.ecu"
        path.write_bytes(SAMPLE_XML)
        assert extract(str(path)) == extract(SAMPLE_XML)
        assert extract(path) == extract(SAMPLE_XML)

    def test_from_file_object(self):
        assert extract(io.BytesIO(SAMPLE_XML)) == extract(SAMPLE_XML)

    def test_tiny_chunks_give_same_result(self):
        """Text split across parser reads is still one value."""
        xml = b"<root><serial>ABCDEFGHIJKLMNOP</serial></root>"
        records = extract(xml, chunk_size=3)
        assert records.scalars == {"serial": "ABCDEFGHIJKLMNOP"}
        assert extract(SAMPLE_XML, chunk_size=5) == extract(SAMPLE_XML)


class TestScalars:
    """Element text becomes key/value pairs."""

    def test_last_write_wins(self):
        records = extract_string("<root><mode>A</mode><mode>B</mode></root>")
        assert records.scalars == {"mode": "B"}

    def test_overwrite_keeps_first_insertion_position(self):
        records = extract_string("<root><a>1</a><b>2</b><a>3</a></root>")
        assert list(records.scalars.items()) == [("a", "3"), ("b", "2")]

    def test_empty_element_does_not_overwrite(self):
        records = extract_string("<root><a>x</a><a></a><a/></root>")
        assert records.scalars == {"a": "x"}

    def test_whitespace_only_text_is_skipped(self):
        records = extract_string("<root>\n  <a>x</a>\n  <a>   </a>\n</root>")
        assert records.scalars == {"a": "x"}

    def test_text_keeps_inner_whitespace(self):
        records = extract_string("<root><note> hot engine </note></root>")
        assert records.scalars == {"note": " hot engine "}

    def test_text_goes_to_most_recent_start_tag(self):
        """Trailing text after a child belongs to the last opened element name."""
        records = extract_string("<root><a>1</a>tail</root>")
        assert records.scalars == {"a": "tail"}

    def test_comment_splits_text(self):
        records = extract_string("<root><a>1<!-- gap -->2</a></root>")
        assert records.scalars == {"a": "2"}

    def test_cdata_is_not_text(self):
        """CDATA sections are skipped and split surrounding text."""
        xml = "<root><a>1</a><a><![CDATA[raw]]></a><b>x<![CDATA[y]]>z</b><c><![CDATA[only]]></c></root>"
        records = extract_string(xml)
        assert records.scalars == {"a": "1", "b": "z"}

    def test_entities_are_decoded(self):
        records = extract_string("<root><vin>A&amp;B</vin></root>")
        assert records.scalars == {"vin": "A&B"}

    def test_nested_elements(self):
        xml = "<root><ecu><info><id>7</id></info><fw>1.2</fw></ecu></root>"
        records = extract_string(xml)
        assert records.scalars == {"id": "7", "fw": "1.2"}


class TestLabelSeries:
    """`name`/`value` attributes build named series."""

    def test_series_continuity(self):
        """A, B, A gives two series; A keeps both values in order."""
        xml = (
            '<root>'
            '<s name="A" value="1"/>'
            '<s name="B" value="2"/>'
            '<s name="A" value="3"/>'
            '</root>'
        )
        records = extract_string(xml)
        assert records.series_names() == ["A", "B"]
        assert records.get_series("A").values == ["1", "3"]
        assert records.get_series("B").values == ["2"]

    def test_name_without_value_creates_empty_series(self):
        records = extract_string('<root><label name="rpm"/></root>')
        assert records.series == [LabelSeries("rpm", [])]

    def test_name_without_value_reopens_existing_series(self):
        xml = '<root><s name="A" value="1"/><s name="A"/><s name="A" value="2"/></root>'
        records = extract_string(xml)
        assert records.series == [LabelSeries("A", ["1", "2"])]

    def test_unknown_attributes_are_ignored(self):
        xml = '<root><s id="4" name="oil" unit="C" value="90" flag="x"/></root>'
        records = extract_string(xml)
        assert records.series == [LabelSeries("oil", ["90"])]
        assert records.scalars == {}

    def test_series_name_not_carried_to_next_tag(self):
        """The series key is per start tag."""
        with pytest.raises(MalformedXmlError):
            extract_string('<root><s name="A"/><t value="5"/></root>')

    def test_value_before_name_is_malformed(self):
        with pytest.raises(MalformedXmlError, match="no preceding 'name'"):
            extract_string('<root><s value="1" name="A"/></root>')

    def test_element_with_text_and_attributes(self):
        records = extract_string('<root><s name="A" value="1">note</s></root>')
        assert records.scalars == {"s": "note"}
        assert records.series == [LabelSeries("A", ["1"])]

    def test_empty_value_is_kept(self):
        records = extract_string('<root><s name="A" value=""/></root>')
        assert records.series == [LabelSeries("A", [""])]


class TestMalformedInput:
    """Input that is not well-formed XML."""

    def test_unterminated_tag(self):
        with pytest.raises(MalformedXmlError) as excinfo:
            extract(b"<root><a>1</root>")
        assert excinfo.value.line == 1

    def test_empty_document(self):
        with pytest.raises(MalformedXmlError):
            extract(b"")

    def test_invalid_encoding(self):
        with pytest.raises(MalformedXmlError):
            extract(b'<?xml version="1.0" encoding="utf-8"?><root>\xff\xfe</root>')

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConversionIOError):
            extract(str(tmp_path / "missing.ecu"))


class TestEventStream:
    """iter_xml_events output."""

    def test_events_in_document_order(self):
        events = list(iter_xml_events(b'<r><a x="1" name="n">t</a></r>'))
        assert events == [
            StartTag("r", ()),
            StartTag("a", (("x", "1"), ("name", "n"))),
            Text("t"),
        ]

    def test_whitespace_between_tags_produces_no_events(self):
        events = list(iter_xml_events(b"<r>\n  <a/>\n</r>"))
        assert events == [StartTag("r", ()), StartTag("a", ())]


class TestRecordExtractorStateMachine:
    """Driving the state machine with synthetic events."""

    def test_synthetic_events(self):
        records = extract_events([
            StartTag("root"),
            StartTag("temp"),
            Text("98.6"),
            StartTag("sample", (("name", "ch1"), ("value", "1"))),
            StartTag("sample", (("name", "ch1"), ("value", "2"))),
        ])
        assert records.scalars == {"temp": "98.6"}
        assert records.series == [LabelSeries("ch1", ["1", "2"])]

    def test_current_element_tracks_last_start_tag(self):
        extractor = RecordExtractor()
        extractor.feed(StartTag("a"))
        extractor.feed(StartTag("b"))
        assert extractor.current_element == "b"

    def test_empty_text_event_is_ignored(self):
        extractor = RecordExtractor().feed_all([StartTag("a"), Text("1"), Text("")])
        assert extractor.records().scalars == {"a": "1"}

    def test_unknown_event_type(self):
        with pytest.raises(TypeError):
            RecordExtractor().feed("not an event")
