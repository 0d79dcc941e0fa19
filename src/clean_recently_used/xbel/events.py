"""Parse events produced by the XBEL event reader.

Every event keeps the exact input bytes it was lexed from in ``raw``, so a
consumer can reproduce retained structure byte for byte by writing ``raw``
back out.
"""

from dataclasses import dataclass, field

Attribute = tuple[bytes, bytes]


@dataclass(frozen=True, slots=True)
class StartTag:
    name: str
    attributes: tuple[Attribute, ...]
    raw: bytes


@dataclass(frozen=True, slots=True)
class EndTag:
    name: str
    raw: bytes


@dataclass(frozen=True, slots=True)
class EmptyTag:
    name: str
    attributes: tuple[Attribute, ...]
    raw: bytes


@dataclass(frozen=True, slots=True)
class Text:
    """Character data with entity references already resolved in ``content``."""

    content: str
    raw: bytes


@dataclass(frozen=True, slots=True)
class Declaration:
    raw: bytes


@dataclass(frozen=True, slots=True)
class Markup:
    """Comments, processing instructions, doctype and anything outside the root."""

    raw: bytes


@dataclass(frozen=True, slots=True)
class EndOfStream:
    raw: bytes = field(default=b"")


ParseEvent = StartTag | EndTag | EmptyTag | Text | Declaration | Markup | EndOfStream
