"""Exception taxonomy for extraction errors.

These never cross the batch boundary: the orchestrator turns them into
placeholder results carrying an ExtractionErrorCode.
"""


class ExtractionError(Exception):
    """Base class for extraction errors."""

    pass


class BufferDetachedError(ExtractionError):
    """A PageBuffer was used after a decode call consumed it."""

    pass


class PageDecodeError(ExtractionError):
    """The decoder could not open the document or the requested page.

    Examples: corrupt PDF bytes, page number out of range.
    """

    pass
