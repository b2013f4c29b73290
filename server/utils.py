"""Shared utilities for FastAPI routes."""

from collections.abc import Mapping

from fastapi import status

from models.errors import (
    MdluexSearchError,
    NoModelSelected,
    ProviderNotConfigured,
    ResultNotFound,
    StaleResponseDiscarded,
)

SENSITIVE_HEADERS = {"x-goog-api-key", "authorization"}

_STATUS_BY_ERROR: list[tuple[type[MdluexSearchError], int]] = [
    (ProviderNotConfigured, status.HTTP_400_BAD_REQUEST),
    (NoModelSelected, status.HTTP_400_BAD_REQUEST),
    (ResultNotFound, status.HTTP_404_NOT_FOUND),
    (StaleResponseDiscarded, status.HTTP_409_CONFLICT),
]


def status_for_error(exc: MdluexSearchError) -> int:
    """
    Map a domain error to an HTTP status.
    Provider failures and unusable model output are upstream problems (502).
    """
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_502_BAD_GATEWAY


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """
    Redact auth-bearing headers before logging.
    """
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS and value:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted
