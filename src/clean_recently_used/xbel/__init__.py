"""XBEL stream filtering package.

This package lexes a recently-used manifest into parse events, classifies
bookmark hrefs and routes events to the output, dropping the bookmarks that
fall under the given path prefixes.
"""

from clean_recently_used.exceptions import FilterError
from clean_recently_used.xbel.classifier import Local, NonLocal, PathPrefixSet, UriClassifier
from clean_recently_used.xbel.reader import EventReader, read_events
from clean_recently_used.xbel.router import EventRouter, FilterState
from clean_recently_used.xbel.stream_filter import FilterReport, filter_stream

__all__ = [
    "EventReader",
    "EventRouter",
    "FilterError",
    "FilterReport",
    "FilterState",
    "Local",
    "NonLocal",
    "PathPrefixSet",
    "UriClassifier",
    "filter_stream",
    "read_events",
]
