"""Single-pass streaming filter for recently-used manifests."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from clean_recently_used.logger import logger
from clean_recently_used.timing import timeit
from clean_recently_used.xbel.classifier import PathPrefixSet
from clean_recently_used.xbel.events import EndOfStream
from clean_recently_used.xbel.protocols import ByteSink, ByteSource
from clean_recently_used.xbel.reader import DEFAULT_CHUNK_SIZE, read_events
from clean_recently_used.xbel.router import EventRouter


@dataclass(frozen=True, slots=True)
class FilterReport:
    """Outcome of one filtering pass."""

    kept: int
    removed: int


@timeit("Stream filtering", logging.DEBUG)
def filter_stream(
    source: ByteSource,
    sink: ByteSink,
    prefixes: Iterable[str],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> FilterReport:
    """Copy a manifest from ``source`` to ``sink`` without matching bookmarks.

    Every retained byte is written exactly as read. Nothing written to
    ``sink`` is meaningful if this raises.

    Args:
        source: Readable byte stream holding the manifest.
        sink: Writable byte stream receiving the filtered manifest.
        prefixes: Local path prefixes whose bookmarks are removed.
        chunk_size: Number of bytes read from ``source`` at a time.

    Returns:
        FilterReport with the number of bookmarks kept and removed.

    Raises:
        FilterError: If the manifest cannot be filtered safely.

    """
    prefix_set = prefixes if isinstance(prefixes, PathPrefixSet) else PathPrefixSet(prefixes)
    router = EventRouter(prefix_set)

    for event in read_events(source, chunk_size):
        if isinstance(event, EndOfStream):
            break
        if router.route(event):
            sink.write(event.raw)

    sink.flush()

    logger.debug("Kept %d bookmark(s), removed %d", router.kept, router.removed)
    return FilterReport(kept=router.kept, removed=router.removed)
