"""Bookmark href classification."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import ClassVar
from urllib.parse import unquote_to_bytes

from clean_recently_used.exceptions import (
    MissingOrAmbiguousHrefError,
    UnrecognizedSchemeError,
)
from clean_recently_used.xbel.events import Attribute

__all__ = [
    "Local",
    "NonLocal",
    "PathPrefixSet",
    "UriClassifier",
    "decode_href",
    "href_attribute",
]


@dataclass(frozen=True, slots=True)
class Local:
    """An href addressing a file on the local filesystem."""

    path: str


@dataclass(frozen=True, slots=True)
class NonLocal:
    """An href with a recognized scheme that never names a local file."""

    href: str


Classification = Local | NonLocal


class PathPrefixSet:
    """Ordered, immutable set of path prefixes selecting bookmarks to remove.

    Matching is a plain string prefix test, not path-segment aware:
    ``/home/a`` matches ``/home/abc/file.txt`` as well as ``/home/a/file.txt``.
    """

    def __init__(self, prefixes: Iterable[str] = ()) -> None:
        """Initialize the prefix set.

        Args:
            prefixes: Path prefixes, in the order they were supplied.

        """
        self._prefixes = tuple(prefixes)

    @property
    def prefixes(self) -> tuple[str, ...]:
        return self._prefixes

    def matches(self, path: str) -> bool:
        """Check whether ``path`` starts with any of the prefixes."""
        return any(path.startswith(prefix) for prefix in self._prefixes)

    def __len__(self) -> int:
        return len(self._prefixes)

    def __repr__(self) -> str:
        return f"PathPrefixSet({list(self._prefixes)!r})"


def href_attribute(attributes: Sequence[Attribute]) -> bytes:
    """Return the raw value of the single ``href`` attribute.

    Args:
        attributes: Ordered (key, value) byte pairs of a bookmark tag.

    Returns:
        The raw href bytes.

    Raises:
        MissingOrAmbiguousHrefError: If there is not exactly one href.

    """
    values = [value for key, value in attributes if key == b"href"]
    if len(values) != 1:
        msg = f"Bookmark has {len(values)} href attributes, expected exactly one"
        raise MissingOrAmbiguousHrefError(msg)
    return values[0]


def decode_href(raw: bytes) -> str:
    """Percent-decode an href, replacing invalid UTF-8 with U+FFFD."""
    return unquote_to_bytes(raw).decode("utf-8", errors="replace")


class UriClassifier:
    """Decides whether a bookmark points at a local path or a remote location."""

    LOCAL_SCHEME: ClassVar[str] = "file://"
    # Recognized schemes whose bookmarks are always kept
    NON_LOCAL_SCHEMES: ClassVar[tuple[str, ...]] = (
        "trash://",
        "mtp://",
        "ftp://",
        "sftp://",
    )

    def classify(self, attributes: Sequence[Attribute]) -> Classification:
        """Classify a bookmark by its href.

        Args:
            attributes: Ordered (key, value) byte pairs of a bookmark tag.

        Returns:
            Local with the decoded path, or NonLocal.

        Raises:
            MissingOrAmbiguousHrefError: If there is not exactly one href.
            UnrecognizedSchemeError: If the scheme is not known.

        """
        href = decode_href(href_attribute(attributes))

        if href.startswith(self.LOCAL_SCHEME):
            return Local(href[len(self.LOCAL_SCHEME) :])
        if href.startswith(self.NON_LOCAL_SCHEMES):
            return NonLocal(href)
        raise UnrecognizedSchemeError(href)
