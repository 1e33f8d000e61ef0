"""
Domain errors raised by the exam/attempt services.

Services raise these and never swallow them; the DRF layer maps ``kind`` to a
response status in ``apps.api.common.exceptions``.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorKind:
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    STATE_CONFLICT = "STATE_CONFLICT"
    INTEGRITY = "INTEGRITY"


class DomainError(Exception):
    """Base of every typed failure the core raises."""

    kind: str = ErrorKind.VALIDATION
    default_code: str = "error"

    def __init__(
        self,
        detail: str,
        *,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.code = code or self.default_code
        self.context = dict(context or {})

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "detail": self.detail,
            "code": self.code,
            "kind": self.kind,
        }
        payload.update(self.context)
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, detail={self.detail!r})"


class ValidationFailed(DomainError):
    """Malformed input that slipped past the serializer layer."""

    kind = ErrorKind.VALIDATION
    default_code = "VALIDATION"


class NotFoundError(DomainError):
    """Referenced row does not exist, or the caller may not know it exists."""

    kind = ErrorKind.NOT_FOUND
    default_code = "NOT_FOUND"


class ForbiddenError(DomainError):
    kind = ErrorKind.FORBIDDEN
    default_code = "FORBIDDEN"


class StateConflictError(DomainError):
    """Transition is not valid for the current lifecycle state."""

    kind = ErrorKind.STATE_CONFLICT
    default_code = "STATE_CONFLICT"


class InvariantViolation(DomainError):
    """A write would break a cross-entity invariant."""

    kind = ErrorKind.INTEGRITY
    default_code = "INTEGRITY"
