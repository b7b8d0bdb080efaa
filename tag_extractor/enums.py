"""Enums for status values used throughout the application."""

from enum import StrEnum


class ExtractionErrorCode(StrEnum):
    """Why an extraction result carries a placeholder instead of text."""

    NO_DATA = "NO_DATA"
    BUFFER_DETACHED = "BUFFER_DETACHED"
    NO_TEXT_CONTENT = "NO_TEXT_CONTENT"
    EMPTY_REGION = "EMPTY_REGION"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    BATCH_PROCESSING_ERROR = "BATCH_PROCESSING_ERROR"
