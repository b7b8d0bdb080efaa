"""One-shot byte buffers for the page decoder.

A decode call takes ownership of the buffer handed to it and detaches it.
Callers clone immediately before every consuming call and never keep a
reference to a buffer they have given away.
"""

import logging

from tag_extractor.exceptions import BufferDetachedError

logger = logging.getLogger(__name__)


class PageBuffer:
    """Owned document bytes that can be consumed exactly once."""

    __slots__ = ("_data",)

    def __init__(self, data: bytes | bytearray | memoryview):
        self._data: bytes | None = bytes(data)

    @property
    def is_detached(self) -> bool:
        return self._data is None

    @property
    def byte_length(self) -> int:
        return 0 if self._data is None else len(self._data)

    def clone(self) -> "PageBuffer":
        """Return an independent copy of the bytes.

        Raises:
            BufferDetachedError: if this buffer was already consumed
        """
        if self._data is None:
            raise BufferDetachedError("Cannot clone a detached buffer")
        return PageBuffer(bytearray(self._data))

    def consume(self) -> bytes:
        """Hand the bytes to a decode call and detach this buffer.

        Raises:
            BufferDetachedError: if this buffer was already consumed
        """
        if self._data is None:
            raise BufferDetachedError("Buffer was already consumed by a decode call")
        data, self._data = self._data, None
        return data

    def __repr__(self) -> str:
        state = "detached" if self._data is None else f"{len(self._data)} bytes"
        return f"PageBuffer({state})"


def clone_buffer(buffer: PageBuffer) -> PageBuffer:
    """Create an independent copy of a buffer before handing it to a decoder."""
    return buffer.clone()


def is_detached(buffer: PageBuffer) -> bool:
    """Check whether a buffer was invalidated by an earlier decode. Never raises."""
    if buffer.is_detached:
        logger.warning("Detected detached buffer")
        return True
    return False
