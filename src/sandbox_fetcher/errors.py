"""
Error taxonomy for the artifact fetcher.

Every failure raised by the fetcher is a ``FetcherError`` carrying a
message, an optional detail and free-form context fields.
"""

import json
from typing import Any, Dict, Optional


class FetcherError(Exception):
    """Base error with message, detail and extra context."""

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        **kwargs: Any
    ):
        self.message = message
        self.detail = detail
        self.extra = kwargs
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        error_dict = {
            "error": type(self).__name__,
            "message": self.message,
            "detail": self.detail,
        }
        error_dict.update(self.extra)
        return {k: v for k, v in error_dict.items() if v is not None}

    def to_json(self) -> str:
        """Convert error to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __str__(self) -> str:
        parts = [self.message]
        if self.detail:
            parts.append(f"Detail: {self.detail}")
        if self.extra:
            parts.append(f"Extra: {self.extra}")
        return "\n".join(parts)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message='{self.message}', "
            f"detail='{self.detail}', extra={self.extra})"
        )


class ConfigurationError(FetcherError):
    """Missing or malformed fetcher environment."""
    pass


class FetchError(FetcherError):
    """A resource could not be copied into the work directory.

    ``reason`` tells the failure modes apart: ``missing_source``,
    ``network``, ``http_status``, ``client_unavailable``,
    ``client_failed``, ``destination`` or ``malformed``.
    """

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        reason: str = "unknown",
        **kwargs: Any
    ):
        super().__init__(message, detail, reason=reason, **kwargs)
        self.reason = reason


class ExtractionError(FetcherError):
    """Corrupt archive or an entry escaping the work directory."""
    pass


class PermissionSetError(FetcherError):
    """Unable to change mode or ownership of a fetched artifact."""
    pass


class SpawnError(FetcherError):
    """The fetcher process could not be started at all."""
    pass


__all__ = [
    "FetcherError",
    "ConfigurationError",
    "FetchError",
    "ExtractionError",
    "PermissionSetError",
    "SpawnError",
]
