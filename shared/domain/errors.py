"""
Domain Errors

Every failure the engine reports to a caller is one of the kinds below.
Each kind has a stable machine-readable code and a default HTTP status
used by the API exception handler.
"""

from typing import Any, Optional


class ErrorKind:
    """Stable error codes exposed in API responses"""
    VALIDATION = 'validation_error'
    NOT_FOUND = 'not_found'
    FORBIDDEN = 'forbidden'
    UNAUTHORIZED = 'unauthorized'
    CONFLICT = 'conflict'
    INVALID_TRANSITION = 'invalid_transition'
    INTERNAL = 'internal_error'
    TIMEOUT = 'timeout'


class DomainError(Exception):
    """
    Base class for all expected business failures

    Carries a kind, a human readable message and optional structured
    details (field errors, conflicting ids, reason codes).
    """
    kind = ErrorKind.INTERNAL
    status_code = 500

    def __init__(self, message: str = '', details: Optional[Any] = None):
        super().__init__(message)
        self.message = message or self.__class__.__name__
        self.details = details

    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'message': self.message,
            'details': self.details,
        }


class ValidationError(DomainError):
    """Missing or malformed input"""
    kind = ErrorKind.VALIDATION
    status_code = 400


class NotFound(DomainError):
    """Referenced entity does not exist"""
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class Forbidden(DomainError):
    """Authenticated, but not allowed to perform the action"""
    kind = ErrorKind.FORBIDDEN
    status_code = 403


class Conflict(DomainError):
    """Overlap, duplicate payment, duplicate block or state conflict"""
    kind = ErrorKind.CONFLICT
    status_code = 409


class InvalidTransition(DomainError):
    """Illegal status change for a state machine"""
    kind = ErrorKind.INVALID_TRANSITION
    status_code = 400


class InternalError(DomainError):
    """Datastore or transport failure"""
    kind = ErrorKind.INTERNAL
    status_code = 500


class TransactionTimeout(DomainError):
    """Transactional operation exceeded its deadline and was rolled back"""
    kind = ErrorKind.TIMEOUT
    status_code = 504
