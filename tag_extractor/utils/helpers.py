"""Shared utilities used across the application."""

from __future__ import annotations

import json
from typing import Any

from fastapi import HTTPException


def build_result_id(document_id: str, page_number: int, tag_id: str) -> str:
    """Build the stable id of a (document, page, tag) extraction result."""
    return f"{document_id}-{page_number}-{tag_id}"


def preview_text(text: str, limit: int = 100) -> str:
    """Shorten text for log lines and diagnostic details."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def parse_json_field(value: str, name: str = "field") -> Any:
    """Parse a JSON form field.

    Args:
        value: Raw form value
        name: Human-readable name for error messages

    Returns:
        Decoded JSON value

    Raises:
        HTTPException: 400 if the value is not valid JSON
    """
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {e.msg}") from None
