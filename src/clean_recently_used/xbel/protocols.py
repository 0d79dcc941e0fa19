"""Protocol definitions for the xbel package.

Structural types for the byte streams the stream filter reads from and
writes to, so files, BytesIO buffers and sockets all qualify.
"""

from typing import Protocol


class ByteSource(Protocol):
    """Anything that can be read in chunks of bytes."""

    def read(self, size: int = -1, /) -> bytes:
        """Read up to ``size`` bytes; an empty result means end of input."""
        ...


class ByteSink(Protocol):
    """Anything bytes can be written to and flushed."""

    def write(self, data: bytes, /) -> int | None:
        """Write ``data``."""
        ...

    def flush(self) -> None:
        """Flush buffered output."""
        ...
