"""Pydantic schemas for API request validation."""

from pydantic import BaseModel, Field, field_validator

MIN_CONTENT_LENGTH = 50
MAX_CONTENT_LENGTH = 50000


def _utf16_length(value: str) -> int:
    """Length in UTF-16 code units, the unit the extension measures text in."""
    return len(value.encode("utf-16-le", "surrogatepass")) // 2


class ImageItem(BaseModel):
    """Image reference scraped by the extension."""

    src: str = ""
    alt: str = ""
    title: str = ""

    @field_validator("src", "alt", "title", mode="before")
    @classmethod
    def normalize_text_fields(cls, value: object) -> str:
        return str(value or "")


class LinkItem(BaseModel):
    """Link reference scraped by the extension."""

    url: str = ""
    text: str = ""

    @field_validator("url", "text", mode="before")
    @classmethod
    def normalize_text_fields(cls, value: object) -> str:
        return str(value or "")


class ContentPayload(BaseModel):
    """Readable page content extracted by the extension."""

    text: str
    wordCount: int | None = None
    images: list[ImageItem] = Field(default_factory=list)
    links: list[LinkItem] = Field(default_factory=list)

    @field_validator("text", mode="before")
    @classmethod
    def validate_text(cls, value: object) -> str:
        if not value or not isinstance(value, str):
            raise ValueError("Content text is required and must be a string")
        if _utf16_length(value) < MIN_CONTENT_LENGTH:
            raise ValueError(
                f"Content text is too short for meaningful analysis (minimum {MIN_CONTENT_LENGTH} characters)"
            )
        if _utf16_length(value) > MAX_CONTENT_LENGTH:
            raise ValueError(
                f"Content text is too long for analysis (maximum {MAX_CONTENT_LENGTH:,} characters)"
            )
        return value

    @field_validator("images", "links", mode="before")
    @classmethod
    def normalize_list_fields(cls, value: object) -> list:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]


class AnalyzeRequest(BaseModel):
    """Request body for POST /api/analyze."""

    url: str
    title: str = ""
    content: ContentPayload
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, value: object) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("URL is required and must be a string")
        return value.strip()

    @field_validator("title", mode="before")
    @classmethod
    def normalize_title(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("content", mode="before")
    @classmethod
    def validate_content(cls, value: object) -> object:
        if not isinstance(value, dict):
            raise ValueError("Content is required and must be an object")
        return value

    @field_validator("metadata", mode="before")
    @classmethod
    def normalize_metadata(cls, value: object) -> dict[str, str]:
        if not isinstance(value, dict):
            return {}
        return {str(key): str(item) for key, item in value.items() if item is not None}
