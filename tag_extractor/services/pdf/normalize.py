"""Whitespace cleanup for reconstructed text."""

import re

_WHITESPACE_RUN = re.compile(r"\s+")
_HORIZONTAL_WHITESPACE_RUN = re.compile(r"[^\S\n]+")
_SPACES_AROUND_NEWLINE = re.compile(r" ?\n ?")
_EXCESS_LINE_BREAKS = re.compile(r"(\n\s*){3,}")


def normalize_text(text: str, preserve_line_breaks: bool = False) -> str:
    """
    Collapse whitespace and trim.

    By default every whitespace run, line breaks included, becomes a single
    space. With preserve_line_breaks, only horizontal runs are collapsed and
    line breaks are kept, at most two in a row.

    Normalizing already-normalized text returns it unchanged.
    """
    if preserve_line_breaks:
        text = _HORIZONTAL_WHITESPACE_RUN.sub(" ", text)
        text = _SPACES_AROUND_NEWLINE.sub("\n", text)
    else:
        text = _WHITESPACE_RUN.sub(" ", text)
    text = _EXCESS_LINE_BREAKS.sub("\n\n", text)
    return text.strip()
