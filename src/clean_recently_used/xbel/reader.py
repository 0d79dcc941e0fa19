"""Byte-faithful XML event reader built on pyexpat.

Expat reports the absolute byte offset at which each event starts. Every
region of the input is reported to some handler (the default handler picks
up whatever the specific ones do not), so the raw bytes of an event are the
span from its own start to the start of the event that follows it. Events
are yielded as soon as that following event has been seen, which keeps the
pass streaming with only the current chunk buffered.

Expat only checks well-formedness and locates events. Text content and
attribute values are rebuilt from the raw bytes, so bytes that are not
valid UTF-8 survive untouched and character references resolve to UTF-8.
"""

import re
from collections.abc import Iterator
from xml.parsers import expat

from clean_recently_used.exceptions import MalformedXmlError
from clean_recently_used.logger import logger
from clean_recently_used.xbel.events import (
    Attribute,
    Declaration,
    EmptyTag,
    EndOfStream,
    EndTag,
    Markup,
    ParseEvent,
    StartTag,
    Text,
)
from clean_recently_used.xbel.protocols import ByteSource

__all__ = ["DEFAULT_CHUNK_SIZE", "EventReader", "read_events", "unescape"]

DEFAULT_CHUNK_SIZE = 64 * 1024

# Latin-1 maps every byte to exactly one code point, so expat accepts any
# byte sequence regardless of the declared encoding.
_TRANSPARENT_ENCODING = "ISO-8859-1"
_UTF8_BOM = b"\xef\xbb\xbf"

_REFERENCE_PATTERN = re.compile(rb"&(#[0-9]+|#x[0-9a-fA-F]+|amp|lt|gt|quot|apos);")
_ATTRIBUTE_PATTERN = re.compile(rb"""([^\s=/<>]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")
_PREDEFINED_ENTITIES = {
    b"amp": b"&",
    b"lt": b"<",
    b"gt": b">",
    b"quot": b'"',
    b"apos": b"'",
}
# Literal whitespace in attribute values is normalized to spaces
_ATTRIBUTE_WHITESPACE = bytes.maketrans(b"\t\n\r", b"   ")

_START = "start"
_END = "end"
_TEXT = "text"
_CDATA_TEXT = "cdata-text"
_DECL = "decl"
_MARKUP = "markup"


def _resolve_reference(match: "re.Match[bytes]") -> bytes:
    reference = match.group(1)
    if reference.startswith(b"#x"):
        return chr(int(reference[2:], 16)).encode("utf-8")
    if reference.startswith(b"#"):
        return chr(int(reference[1:])).encode("utf-8")
    return _PREDEFINED_ENTITIES[reference]


def unescape(raw: bytes) -> bytes:
    """Resolve the predefined entities and character references in ``raw``.

    Character references become their UTF-8 encoding; every other byte is
    left as it was.
    """
    return _REFERENCE_PATTERN.sub(_resolve_reference, raw)


def _normalize_newlines(raw: bytes) -> bytes:
    return raw.replace(b"\r\n", b"\n").replace(b"\r", b"\n")


def _parse_attributes(tag: bytes) -> tuple[Attribute, ...]:
    """Extract ordered (key, value) pairs from the raw bytes of a start tag.

    Values are unescaped and whitespace-normalized the way an XML processor
    reports them, but invalid UTF-8 is kept byte for byte.
    """
    pairs = []
    for match in _ATTRIBUTE_PATTERN.finditer(tag):
        quoted = match.group(2) if match.group(2) is not None else match.group(3)
        value = _normalize_newlines(quoted).translate(_ATTRIBUTE_WHITESPACE)
        pairs.append((match.group(1), unescape(value)))
    return tuple(pairs)


def _decode_text(raw: bytes) -> str:
    return unescape(_normalize_newlines(raw)).decode("utf-8", errors="replace")


def _decode_name(name: str) -> str:
    # Names never contain references, so every character is one input byte
    return name.encode(_TRANSPARENT_ENCODING).decode("utf-8", errors="replace")


class _Mark:
    """Start of a reported event whose extent is not known yet."""

    __slots__ = ("kind", "name", "position")

    def __init__(self, kind: str, position: int, name: str = "") -> None:
        self.kind = kind
        self.position = position
        self.name = name


class EventReader:
    """Lazily lexes a byte stream into ParseEvents.

    Usage:
        for event in EventReader(stream):
            sink.write(event.raw)

    Writing back the ``raw`` bytes of every event reproduces the input.
    """

    def __init__(self, source: ByteSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """Initialize the reader.

        Args:
            source: Byte stream to read the document from.
            chunk_size: Number of bytes read and fed to expat at a time.

        """
        self._source = source
        self._chunk_size = chunk_size
        self._parser = self._create_parser()
        # Leading bytes (a byte order mark) that expat does not see
        self._origin = 0
        # Absolute offset of self._buffer[0]
        self._buffer_start = 0
        self._buffer = bytearray()
        self._marks: list[_Mark] = [_Mark(_MARKUP, 0)]
        self._after_empty_tag = False
        self._in_cdata = False

    def __iter__(self) -> Iterator[ParseEvent]:
        first = True
        while True:
            chunk = self._source.read(self._chunk_size)
            final = not chunk
            self._buffer += chunk
            if first and chunk.startswith(_UTF8_BOM):
                self._origin = len(_UTF8_BOM)
                chunk = chunk[self._origin :]
            first = False

            self._feed(chunk, final)
            yield from self._drain(final)
            if final:
                break

        yield EndOfStream()

    def _create_parser(self) -> "expat.XMLParserType":
        parser = expat.ParserCreate(encoding=_TRANSPARENT_ENCODING)
        parser.XmlDeclHandler = self._on_declaration
        parser.StartElementHandler = self._on_start
        parser.EndElementHandler = self._on_end
        parser.CharacterDataHandler = self._on_text
        parser.CommentHandler = self._on_markup
        parser.ProcessingInstructionHandler = self._on_markup
        parser.StartCdataSectionHandler = self._on_cdata_start
        parser.EndCdataSectionHandler = self._on_cdata_end
        parser.StartDoctypeDeclHandler = self._on_markup
        parser.EndDoctypeDeclHandler = self._on_markup
        parser.DefaultHandlerExpand = self._on_markup
        return parser

    def _feed(self, chunk: bytes, final: bool) -> None:
        try:
            self._parser.Parse(chunk, final)
        except expat.ExpatError as exc:
            offset = self._parser.ErrorByteIndex + self._origin
            logger.debug("Lexer failed at byte %d: %s", offset, exc)
            raise MalformedXmlError(
                expat.ErrorString(exc.code), exc.lineno, exc.offset, offset
            ) from exc

    # --- Expat handlers ---

    def _position(self) -> int:
        return self._parser.CurrentByteIndex + self._origin

    def _on_declaration(self, *_args: object) -> None:
        self._marks.append(_Mark(_DECL, self._position()))

    def _on_start(self, name: str, _attributes: object) -> None:
        self._marks.append(_Mark(_START, self._position(), _decode_name(name)))

    def _on_end(self, name: str) -> None:
        self._marks.append(_Mark(_END, self._position(), _decode_name(name)))

    def _on_text(self, _data: str) -> None:
        # Expat splits character data at newlines and entity references
        kind = _CDATA_TEXT if self._in_cdata else _TEXT
        if self._marks[-1].kind != kind:
            self._marks.append(_Mark(kind, self._position()))

    def _on_cdata_start(self) -> None:
        self._in_cdata = True
        self._on_markup()

    def _on_cdata_end(self) -> None:
        self._in_cdata = False
        self._on_markup()

    def _on_markup(self, *_args: object) -> None:
        self._marks.append(_Mark(_MARKUP, self._position()))

    # --- Event assembly ---

    def _drain(self, final: bool) -> Iterator[ParseEvent]:
        """Yield every mark whose end is known.

        The last mark stays pending until a later mark or the end of input
        bounds it, unless ``final`` is set.
        """
        marks = self._marks
        ready = len(marks) if final else len(marks) - 1
        if ready <= 0:
            return

        buffer_end = self._buffer_start + len(self._buffer)
        for index in range(ready):
            mark = marks[index]
            end = marks[index + 1].position if index + 1 < len(marks) else buffer_end
            raw = bytes(
                self._buffer[mark.position - self._buffer_start : end - self._buffer_start]
            )
            event = self._assemble(mark, raw)
            if event is not None:
                yield event

        keep_from = marks[ready].position if ready < len(marks) else buffer_end
        del self._buffer[: keep_from - self._buffer_start]
        self._buffer_start = keep_from
        del marks[:ready]

    def _assemble(self, mark: _Mark, raw: bytes) -> ParseEvent | None:
        after_empty_tag = self._after_empty_tag
        self._after_empty_tag = False

        if mark.kind == _START:
            if raw.endswith(b"/>"):
                self._after_empty_tag = True
                return EmptyTag(mark.name, _parse_attributes(raw), raw)
            return StartTag(mark.name, _parse_attributes(raw), raw)
        if mark.kind == _END:
            if after_empty_tag and not raw.startswith(b"</"):
                # Expat reports the end of an empty element as a zero-width
                # event just past its start tag
                return Markup(raw) if raw else None
            return EndTag(mark.name, raw)
        if mark.kind == _TEXT:
            return Text(_decode_text(raw), raw)
        if mark.kind == _CDATA_TEXT:
            return Text(_normalize_newlines(raw).decode("utf-8", errors="replace"), raw)
        if mark.kind == _DECL:
            return Declaration(raw)
        return Markup(raw) if raw else None


def read_events(
    source: ByteSource, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Iterator[ParseEvent]:
    """Iterate over the parse events of a byte stream.

    Args:
        source: Byte stream to read the document from.
        chunk_size: Number of bytes fed to the lexer at a time.

    Yields:
        ParseEvents in document order, ending with EndOfStream.

    Raises:
        MalformedXmlError: If the input cannot be tokenized.

    """
    return iter(EventReader(source, chunk_size))
