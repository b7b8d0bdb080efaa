"""Tests for one-shot page buffers."""

import pytest

from tag_extractor.exceptions import BufferDetachedError
from tag_extractor.services.pdf import PageBuffer, clone_buffer, is_detached


class TestPageBuffer:
    def test_copies_input(self):
        """Mutating the source after construction does not change the buffer."""
        source = bytearray(b"abc")
        buffer = PageBuffer(source)
        source[0] = ord("z")

        assert buffer.consume() == b"abc"

    def test_clone_is_independent(self):
        """Consuming a clone leaves the original usable."""
        original = PageBuffer(b"%PDF-1.7 data")
        clone = clone_buffer(original)

        assert clone is not original
        assert clone.consume() == b"%PDF-1.7 data"
        assert not original.is_detached
        assert original.byte_length == len(b"%PDF-1.7 data")

    def test_consume_detaches(self):
        buffer = PageBuffer(b"data")
        buffer.consume()

        assert buffer.is_detached
        assert buffer.byte_length == 0

    def test_consume_twice_raises(self):
        buffer = PageBuffer(b"data")
        buffer.consume()

        with pytest.raises(BufferDetachedError):
            buffer.consume()

    def test_clone_detached_raises(self):
        buffer = PageBuffer(b"data")
        buffer.consume()

        with pytest.raises(BufferDetachedError):
            clone_buffer(buffer)

    def test_repr_shows_state(self):
        buffer = PageBuffer(b"1234")
        assert repr(buffer) == "PageBuffer(4 bytes)"
        buffer.consume()
        assert repr(buffer) == "PageBuffer(detached)"


class TestIsDetached:
    def test_fresh_buffer(self):
        assert is_detached(PageBuffer(b"data")) is False

    def test_consumed_buffer_does_not_raise(self):
        buffer = PageBuffer(b"data")
        buffer.consume()

        assert is_detached(buffer) is True
