"""Event router deciding which parse events reach the output."""

from dataclasses import dataclass

from clean_recently_used.exceptions import StructuralAssumptionViolatedError
from clean_recently_used.logger import logger
from clean_recently_used.xbel.classifier import Local, PathPrefixSet, UriClassifier
from clean_recently_used.xbel.events import EmptyTag, EndTag, ParseEvent, StartTag, Text

BOOKMARK_TAG = "bookmark"


@dataclass(slots=True)
class FilterState:
    """Mutable state of one filtering pass."""

    skipping: bool = False
    pending_whitespace_swallow: bool = False


class EventRouter:
    """Two-state machine (forwarding, skipping) over a stream of parse events.

    A ``bookmark`` whose local path matches the prefix set is dropped along
    with its whole subtree. The first text event after it is dropped too, so
    removing one bookmark per line does not leave blank lines behind.
    Bookmarks are assumed not to nest: skipping ends at the first
    ``</bookmark>``.
    """

    def __init__(
        self, prefixes: PathPrefixSet, classifier: UriClassifier | None = None
    ) -> None:
        """Initialize the router.

        Args:
            prefixes: Prefixes selecting the bookmarks to remove.
            classifier: Href classifier; a default UriClassifier when omitted.

        """
        self._prefixes = prefixes
        self._classifier = classifier or UriClassifier()
        self.state = FilterState()
        self.kept = 0
        self.removed = 0

    def route(self, event: ParseEvent) -> bool:
        """Decide whether ``event`` is forwarded.

        Args:
            event: The next parse event of the document.

        Returns:
            True if the event's raw bytes belong in the output.

        Raises:
            MissingOrAmbiguousHrefError: From classifying a bookmark.
            UnrecognizedSchemeError: From classifying a bookmark.
            StructuralAssumptionViolatedError: If the text after a removed
                bookmark is not whitespace.

        """
        if self.state.skipping:
            if isinstance(event, EndTag) and event.name == BOOKMARK_TAG:
                self.state.skipping = False
                self.state.pending_whitespace_swallow = True
            return False

        if isinstance(event, StartTag) and event.name == BOOKMARK_TAG:
            return self._route_bookmark(event)

        if isinstance(event, EmptyTag) and event.name == BOOKMARK_TAG:
            # Self-closing bookmarks carry no subtree and are kept as is
            self.kept += 1
            return True

        if isinstance(event, Text):
            return self._route_text(event)

        return True

    def _route_bookmark(self, event: StartTag) -> bool:
        classification = self._classifier.classify(event.attributes)
        if isinstance(classification, Local) and self._prefixes.matches(classification.path):
            logger.debug("Removing bookmark for %s", classification.path)
            self.state.skipping = True
            self.removed += 1
            return False

        self.kept += 1
        return True

    def _route_text(self, event: Text) -> bool:
        if not self.state.pending_whitespace_swallow:
            return True

        self.state.pending_whitespace_swallow = False
        if event.content.strip():
            msg = f"Expected whitespace after a removed bookmark, found {event.content!r}"
            raise StructuralAssumptionViolatedError(msg)
        logger.debug("Swallowed %d bytes of whitespace after removed bookmark", len(event.raw))
        return False
