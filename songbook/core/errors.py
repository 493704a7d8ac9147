"""Fetch errors and their classification for logging."""

from enum import Enum

import httpx


class ErrorCategory(Enum):
    """Categories of errors that can occur while talking to the catalog server."""

    NETWORK_ERROR = "network_error"
    HTTP_STATUS = "http_status"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    UNKNOWN_CONTENT_TYPE = "unknown_content_type"
    DECODE_ERROR = "decode_error"
    UNKNOWN = "unknown"


HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404


class FetchError(Exception):
    """Base class for failures fetching data from the catalog server."""


class FetchNetworkError(FetchError):
    """The request never produced a response."""

    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(f"request to {url} failed: {cause}")
        self.url = url
        self.cause = cause


class FetchStatusError(FetchError):
    """The server responded with a non-2XX status code."""

    def __init__(self, code: int, text: str) -> None:
        super().__init__(f"server responded with {code} {text}")
        self.code = code
        self.text = text


class UnknownContentTypeError(FetchError):
    """The response carried a missing or unrecognised content type."""

    def __init__(self, content_type: str | None) -> None:
        super().__init__(f"unknown content type {content_type!r}")
        self.content_type = content_type


class PayloadDecodeError(FetchError):
    """The response body could not be decoded into the expected shape."""


def classify_fetch_error(exception: Exception) -> ErrorCategory:
    """Classify a fetch failure into an ErrorCategory.

    Args:
        exception: The exception raised while fetching

    Returns:
        The matching ErrorCategory
    """
    if isinstance(exception, FetchStatusError):
        if exception.code in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            return ErrorCategory.UNAUTHORIZED
        if exception.code == HTTP_NOT_FOUND:
            return ErrorCategory.NOT_FOUND
        return ErrorCategory.HTTP_STATUS

    if isinstance(exception, UnknownContentTypeError):
        return ErrorCategory.UNKNOWN_CONTENT_TYPE

    if isinstance(exception, PayloadDecodeError):
        return ErrorCategory.DECODE_ERROR

    if isinstance(exception, FetchNetworkError | httpx.TransportError | ConnectionError | TimeoutError):
        return ErrorCategory.NETWORK_ERROR

    return ErrorCategory.UNKNOWN
