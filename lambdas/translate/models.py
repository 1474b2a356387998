"""Pydantic models for translate API request/response validation."""

import re

from pydantic import BaseModel, Field, field_validator

LANGUAGE_CODE_PATTERN = r"^[a-zA-Z]{2,3}(-[a-zA-Z0-9]{2,8})?$"


class TranslateRequest(BaseModel):
    """Request body for translating text into several languages."""

    text: str = Field(..., min_length=1)
    source_lang: str = Field(..., pattern=LANGUAGE_CODE_PATTERN)
    target_languages: list[str] = Field(..., min_length=1)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Reject whitespace-only text; the text itself is kept as sent."""
        if not v.strip():
            raise ValueError("text must not be empty")
        return v

    @field_validator("target_languages")
    @classmethod
    def validate_target_languages(cls, v: list[str]) -> list[str]:
        """Validate language codes and drop duplicates, keeping order."""
        unique: list[str] = []
        for code in v:
            if not re.match(LANGUAGE_CODE_PATTERN, code):
                raise ValueError(f"invalid target language code: {code!r}")
            if code not in unique:
                unique.append(code)
        return unique


class TranslateResponse(BaseModel):
    """Response for POST /translate."""

    translations: dict[str, str]
    simulated: bool = False
