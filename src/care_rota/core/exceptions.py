from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DataFetchError(DomainError):
    """Raised when the rota data provider cannot deliver a snapshot."""


class DataverseError(DataFetchError):
    """Error response returned by the Dataverse Web API."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: Optional[str] = None,
        inner_error: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.inner_error = inner_error

    @classmethod
    def from_response(cls, status_code: int, reason: str, body: Any = None) -> "DataverseError":
        error = body.get("error") if isinstance(body, dict) else None
        error = error if isinstance(error, dict) else {}
        return cls(
            error.get("message") or f"HTTP {status_code}: {reason}",
            status_code,
            error.get("code"),
            error.get("innererror"),
        )
