"""Utility functions and helpers."""

from tag_extractor.utils.helpers import (
    build_result_id,
    parse_json_field,
    preview_text,
)

__all__ = [
    "build_result_id",
    "parse_json_field",
    "preview_text",
]
