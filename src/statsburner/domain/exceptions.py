"""Exception hierarchy for statistics retrieval failures."""

from __future__ import annotations

from typing import Any, Mapping

from .models import ErrorDetail, ErrorKind

API_ERROR_MESSAGES: Mapping[int, str] = {
    0: "Unsupported date type.",
    1: "Feed not found.",
    2: "This feed does not permit Awareness API access.",
    3: "Item not found In feed.",
    4: "Data restricted; this feed does not have FeedBurner Stats PRO item view tracking enabled.",
    5: "Missing required parameter (URI).",
    6: "Malformed parameter (DATES).",
}


class StatsburnerError(Exception):
    """Base class for all statsburner errors."""

    default_message = "Statsburner error occurred"
    kind = ErrorKind.REPORT

    def __init__(
        self, message: str | None = None, *, context: Mapping[str, Any] | None = None
    ):
        self.message = message or self.default_message
        self.context: Mapping[str, Any] = dict(context or {})
        formatted = self._format_message()
        super().__init__(formatted)

    def _format_message(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail(kind=self.kind, message=self.message)


class MalformedDateError(StatsburnerError):
    """A date spec is not a real YYYY-MM-DD calendar date."""

    default_message = "Malformed date"
    kind = ErrorKind.MALFORMED_DATE


class DuplicateRangeError(StatsburnerError):
    """Two or more resolved date ranges overlap."""

    default_message = "Duplicate date range detected."
    kind = ErrorKind.DUPLICATE_RANGE


class TransportError(StatsburnerError):
    """The report could not be fetched from the remote API."""

    default_message = "Transport error"
    kind = ErrorKind.TRANSPORT


class ReportError(StatsburnerError):
    """The report carries a failure status and an API error code."""

    default_message = "Report signalled failure"
    kind = ErrorKind.REPORT

    def __init__(
        self,
        code: int | None = None,
        message: str | None = None,
        *,
        context: Mapping[str, Any] | None = None,
    ):
        self.code = code
        if message is None and code is not None:
            message = API_ERROR_MESSAGES.get(code, f"Unknown API error code {code}.")
        super().__init__(message, context=context)

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail(kind=self.kind, message=self.message, code=self.code)


class ReportParseError(ReportError):
    """The report body is not well-formed markup."""

    default_message = "Malformed report body"


class CacheError(StatsburnerError):
    """Reading or writing a cache record failed."""

    default_message = "Cache error"
    kind = ErrorKind.CACHE


class InvalidTTLError(CacheError):
    """A cache duration does not resolve to a future instant."""

    default_message = "Cache duration must resolve to a future instant"


class ConfigurationError(StatsburnerError, ValueError):
    """Raised when client configuration values are invalid."""

    default_message = "Invalid configuration"
