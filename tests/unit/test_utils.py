"""Tests for the utils module."""

import pytest
from fastapi import HTTPException

from tag_extractor.utils import build_result_id, parse_json_field, preview_text


class TestBuildResultId:
    def test_joins_document_page_and_tag(self):
        assert build_result_id("doc1", 1, "tag9") == "doc1-1-tag9"


class TestPreviewText:
    def test_short_text_unchanged(self):
        assert preview_text("hello") == "hello"

    def test_long_text_truncated(self):
        result = preview_text("x" * 150)
        assert result == "x" * 100 + "..."

    def test_custom_limit(self):
        assert preview_text("abcdef", limit=3) == "abc..."


class TestParseJsonField:
    def test_valid_json(self):
        assert parse_json_field('[{"id": "t1"}]') == [{"id": "t1"}]

    def test_invalid_json_raises_400(self):
        """Should raise HTTPException 400 naming the field."""
        with pytest.raises(HTTPException) as exc_info:
            parse_json_field("{not json", "tags")
        assert exc_info.value.status_code == 400
        assert "Invalid tags" in exc_info.value.detail
