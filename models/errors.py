"""
Error taxonomy shared by the providers, the core components and the HTTP layer.

Every error carries a stable ``code`` so the API can map it to a status and
the front end can show the message as-is.
"""

from typing import Any


class MdluexSearchError(Exception):
    """Base class for all errors raised by the search simulator."""

    code = "internal_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class MalformedModelOutput(MdluexSearchError):
    """The model text could not be turned into a JSON value."""

    code = "malformed_model_output"

    def __init__(self, message: str, *, original: Any = None, cleaned: str | None = None):
        super().__init__(message)
        self.original = original
        self.cleaned = cleaned


class InvalidResultSetFormat(MdluexSearchError):
    code = "invalid_result_set_format"


class ContentGenerationFailed(MdluexSearchError):
    code = "content_generation_failed"


class MalformedHtmlDocument(ContentGenerationFailed):
    code = "malformed_html_document"


class ProviderUnreachable(MdluexSearchError):
    """Connection failure or timeout talking to a model backend."""

    code = "provider_unreachable"


class ProviderResponseError(MdluexSearchError):
    """The backend answered, but with an error status."""

    code = "provider_response_error"

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProviderNotConfigured(MdluexSearchError):
    code = "provider_not_configured"


class NoModelSelected(MdluexSearchError):
    code = "no_model_selected"


class StaleResponseDiscarded(MdluexSearchError):
    """A newer request was issued while this one was in flight."""

    code = "stale_response"


class ResultNotFound(MdluexSearchError):
    code = "result_not_found"
