from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Extraction
    extraction_page_number: int = 1  # Only the first page is processed in a batch
    scanned_fragment_threshold: int = 5  # Fewer fragments than this means image-only
    preserve_line_breaks: bool = False  # Keep reconstructed line breaks after cleanup
    max_documents_per_batch: int = 100

    @field_validator("extraction_page_number", "scanned_fragment_threshold")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Page numbers are 1-based and the threshold must count something."""
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    # Diagnostics
    diagnostics_enabled: bool = False

    # PostHog analytics
    posthog_api_key: str = ""
    posthog_host: str = "https://us.i.posthog.com"
    posthog_enabled: bool = True

    # Logging
    log_level: str = "INFO"

    # Frontend
    cors_origins: list[str] = ["http://localhost:3000"]

    # Rate limiting
    rate_limit_enabled: bool = False
    rate_limit_storage_uri: str = "memory://"
    rate_limit_extract_per_minute: int = 20
    rate_limit_general_per_minute: int = 100

    # Request size limits (PDF uploads)
    max_request_size_bytes: int = 50 * 1024 * 1024  # 50MB

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
