"""
Standardized API response models and messages.
"""

from typing import Any, Dict, Optional

from fastapi import status
from pydantic import BaseModel, Field

from app.api.i18n import SupportedLanguage, get_translated_message


class ResponseMessage:
    """Message template with placeholders and translation support."""

    def __init__(self, message_key: str, placeholders: Optional[Dict[str, str]] = None):
        self.message_key = message_key
        self.placeholders = placeholders or {}

    def translate(self, language: Optional[str] = None) -> str:
        """
        Render the message in ``language`` ("ru", "ru-RU", ...), falling back
        to the default language for unsupported codes.
        """
        lang = SupportedLanguage.get_default()
        if language:
            try:
                lang = SupportedLanguage(language)
            except ValueError:
                try:
                    lang = SupportedLanguage(language.split("-")[0])
                except ValueError:
                    lang = SupportedLanguage.get_default()

        return get_translated_message(message_key=self.message_key, placeholders=self.placeholders, language=lang)

    @property
    def message(self) -> str:
        """Return the formatted message in the default language."""
        return get_translated_message(message_key=self.message_key, placeholders=self.placeholders)

    def __str__(self) -> str:
        return self.message


class ErrorResponseModel(BaseModel):
    """Body of every error response."""

    detail: str = Field(..., description="Human readable error message")
    blockers: Optional[Dict[str, int]] = Field(
        None, description="Counts of dependent records that prevented the operation"
    )


HTTP_400_BAD_REQUEST = status.HTTP_400_BAD_REQUEST
HTTP_404_NOT_FOUND = status.HTTP_404_NOT_FOUND
HTTP_409_CONFLICT = status.HTTP_409_CONFLICT
HTTP_500_INTERNAL_SERVER_ERROR = status.HTTP_500_INTERNAL_SERVER_ERROR


class Tags:
    """API route tags for documentation grouping."""

    HEALTH = "Health"
    CATEGORIES = "Categories"
    PRODUCTS = "Products"


read_error_responses: dict[int | str, dict[str, Any]] = {
    HTTP_500_INTERNAL_SERVER_ERROR: {
        "model": ErrorResponseModel,
        "description": "Internal Error – Unexpected server failure",
    },
}

item_error_responses: dict[int | str, dict[str, Any]] = {
    HTTP_404_NOT_FOUND: {
        "model": ErrorResponseModel,
        "description": "Not Found – Unknown identifier",
    },
    **read_error_responses,
}

write_error_responses: dict[int | str, dict[str, Any]] = {
    HTTP_400_BAD_REQUEST: {
        "model": ErrorResponseModel,
        "description": "Bad Request – Invalid input or dependent records block the change",
    },
    **item_error_responses,
}
