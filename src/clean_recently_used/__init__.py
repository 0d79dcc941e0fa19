"""clean-recently-used - prune the recently used files list.

Removes bookmarks under given path prefixes from the freedesktop
recently-used.xbel manifest while keeping every other byte intact.
"""

from clean_recently_used.config import Settings, settings
from clean_recently_used.xbel.stream_filter import FilterReport, filter_stream

__version__ = "0.3.0"

__all__ = [
    "FilterReport",
    "Settings",
    "__version__",
    "filter_stream",
    "settings",
]
