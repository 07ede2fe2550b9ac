"""
Record Extractor (Layer 1: Raw XML → ExtractedRecords).

Makes a single forward pass over the XML token stream of an ECU file and
keeps two kinds of flat records:

    Scalars:
        <temp>98.6</temp>              -> scalars["temp"] = "98.6"
        Later text for the same element name overwrites earlier text.

    Label series:
        <sample name="ch1" value="1"/>
        <sample name="ch1" value="2"/> -> LabelSeries("ch1", ["1", "2"])
        Series are keyed by the `name` attribute and ordered by first sight.

The pass is split in two so each half can be tested alone:
    - iter_xml_events() turns bytes into StartTag / Text events
    - RecordExtractor is a small state machine fed with those events

No DOM is built. The schema is fixed and narrow; this is not a general
XML-to-CSV mapper.
"""

import io
import os
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Iterator, List, Optional, Tuple, Union
from xml.parsers import expat

from ecucsv.errors import ConversionIOError, MalformedXmlError
from ecucsv.model import ExtractedRecords, LabelSeries


DEFAULT_CHUNK_SIZE = 64 * 1024

NAME_ATTRIBUTE = "name"
VALUE_ATTRIBUTE = "value"

XmlSource = Union[bytes, str, "os.PathLike[str]", BinaryIO]


# =========================================================================
# EVENTS
# =========================================================================

@dataclass(frozen=True)
class StartTag:
    """
    A start tag (or empty-element tag).

    attributes keeps document order, which matters: `name` has to be seen
    before `value` on the same tag.
    """
    name: str
    attributes: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Text:
    """A run of character data with at least one non-whitespace character."""
    value: str


XmlEvent = Union[StartTag, Text]


class _EventCollector:
    """Expat callbacks that queue StartTag/Text events."""

    def __init__(self, parser):
        self.events: List[XmlEvent] = []
        self._text: List[str] = []
        self._in_cdata = False

        parser.ordered_attributes = True
        parser.StartElementHandler = self.start_element
        parser.EndElementHandler = self.end_element
        parser.CharacterDataHandler = self.character_data
        # Comments, PIs and CDATA sections end a text node just like tags do
        parser.CommentHandler = self.boundary
        parser.ProcessingInstructionHandler = self.boundary
        parser.StartCdataSectionHandler = self.start_cdata
        parser.EndCdataSectionHandler = self.end_cdata

    def start_element(self, name, attributes):
        self.flush_text()
        pairs = tuple(zip(attributes[0::2], attributes[1::2]))
        self.events.append(StartTag(name, pairs))

    def end_element(self, name):
        self.flush_text()

    def character_data(self, data):
        # CDATA sections are not text nodes; their content is dropped
        if not self._in_cdata:
            self._text.append(data)

    def start_cdata(self):
        self.flush_text()
        self._in_cdata = True

    def end_cdata(self):
        self._in_cdata = False

    def boundary(self, *args):
        self.flush_text()

    def flush_text(self):
        if not self._text:
            return
        value = "".join(self._text)
        self._text = []
        # Whitespace between tags is layout, not content
        if value.strip():
            self.events.append(Text(value))

    def drain(self) -> List[XmlEvent]:
        events, self.events = self.events, []
        return events


def _read_chunks(source: XmlSource, chunk_size: int) -> Iterator[bytes]:
    if isinstance(source, (bytes, bytearray)):
        yield bytes(source)
        return

    if isinstance(source, (str, os.PathLike)):
        path = os.fspath(source)
        try:
            with open(path, "rb") as f:
                while True:
                    chunk = f.read(chunk_size)
                    if not chunk:
                        break
                    yield chunk
        except OSError as e:
            raise ConversionIOError(f"Cannot read XML file {path}: {e}", path=path) from e
        return

    try:
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            yield chunk
    except OSError as e:
        raise ConversionIOError(f"Cannot read XML stream: {e}") from e


def iter_xml_events(source: XmlSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[XmlEvent]:
    """
    Yield StartTag and Text events for an XML document, in document order.

    Args:
        source: Raw XML bytes, a file path, or a binary file object
        chunk_size: Bytes fed to the parser per read

    Yields:
        StartTag and Text events

    Raises:
        MalformedXmlError: If the document is not well-formed
        ConversionIOError: If the source cannot be read
    """
    parser = expat.ParserCreate()
    collector = _EventCollector(parser)

    try:
        for chunk in _read_chunks(source, chunk_size):
            parser.Parse(chunk, False)
            yield from collector.drain()
        parser.Parse(b"", True)
    except expat.ExpatError as e:
        raise MalformedXmlError(
            f"Malformed XML: {expat.ErrorString(e.code)}",
            line=e.lineno,
            column=e.offset,
        ) from e

    yield from collector.drain()


# =========================================================================
# STATE MACHINE
# =========================================================================

class RecordExtractor:
    """
    Builds ExtractedRecords from a stream of XML events.

    State:
        current_element: Name of the most recent start tag. Text events
            are stored under this name.
        series index: series name -> LabelSeries, so reopening a series
            appends to it instead of creating a duplicate.

    The per-tag "current series key" lives only inside _scan_attributes.
    """

    def __init__(self):
        self.current_element: str = ""
        self._records = ExtractedRecords()
        self._series_by_name = {}

    def feed(self, event: XmlEvent) -> None:
        if isinstance(event, StartTag):
            self.current_element = event.name
            if event.attributes:
                self._scan_attributes(event)
        elif isinstance(event, Text):
            if event.value != "":
                self._records.scalars[self.current_element] = event.value
        else:
            raise TypeError(f"Unsupported XML event type: {type(event)}")

    def feed_all(self, events: Iterable[XmlEvent]) -> "RecordExtractor":
        for event in events:
            self.feed(event)
        return self

    def _scan_attributes(self, tag: StartTag) -> None:
        series_key: Optional[str] = None

        for attr_name, attr_value in tag.attributes:
            if attr_name == NAME_ATTRIBUTE:
                if attr_value not in self._series_by_name:
                    series = LabelSeries(name=attr_value)
                    self._series_by_name[attr_value] = series
                    self._records.series.append(series)
                series_key = attr_value
            elif attr_name == VALUE_ATTRIBUTE:
                if series_key is None:
                    raise MalformedXmlError(
                        f"<{tag.name}> has a 'value' attribute with no preceding 'name' attribute"
                    )
                self._series_by_name[series_key].values.append(attr_value)

    def records(self) -> ExtractedRecords:
        return self._records


def extract_events(events: Iterable[XmlEvent]) -> ExtractedRecords:
    """Run the extractor state machine over an already-produced event stream."""
    return RecordExtractor().feed_all(events).records()


def extract(source: XmlSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> ExtractedRecords:
    """
    Extract scalars and label series from an ECU XML document.

    Args:
        source: Raw XML bytes, a file path, or a binary file object
        chunk_size: Bytes fed to the parser per read

    Returns:
        ExtractedRecords for this document only

    Raises:
        MalformedXmlError: If the document is not well-formed, or a
            `value` attribute appears before any `name` on its tag
        ConversionIOError: If the file cannot be read
    """
    return extract_events(iter_xml_events(source, chunk_size=chunk_size))


def extract_string(xml_text: str) -> ExtractedRecords:
    """Extract from an XML string (encoded as UTF-8 before parsing)."""
    return extract(io.BytesIO(xml_text.encode("utf-8")))


__all__ = [
    "StartTag",
    "Text",
    "RecordExtractor",
    "iter_xml_events",
    "extract",
    "extract_events",
    "extract_string",
    "DEFAULT_CHUNK_SIZE",
]
