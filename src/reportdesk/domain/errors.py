"""Typed domain errors. The HTTP layer maps ``kind`` to a status code."""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INSUFFICIENT_STORAGE = "insufficient_storage"
    NOT_IMPLEMENTED = "not_implemented"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"


class DomainError(Exception):
    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def __init__(self, detail: str, *, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.context = context or {}


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class BadRequestError(DomainError):
    kind = ErrorKind.BAD_REQUEST


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT


class InsufficientStorageError(DomainError):
    kind = ErrorKind.INSUFFICIENT_STORAGE


class FeatureNotImplementedError(DomainError):
    kind = ErrorKind.NOT_IMPLEMENTED


class UpstreamUnavailableError(DomainError):
    kind = ErrorKind.UPSTREAM_UNAVAILABLE
