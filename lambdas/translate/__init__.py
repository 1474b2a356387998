"""Translate module: contingent-enforced machine translation."""

from .client import GoogleTranslateClient
from .models import TranslateRequest, TranslateResponse
from .service import TranslateService

__all__ = [
    "GoogleTranslateClient",
    "TranslateRequest",
    "TranslateResponse",
    "TranslateService",
]
