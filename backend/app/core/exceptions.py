# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the trade negotiation platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
The same classes are raised by the outbound API client so callers
handle a remote failure exactly like a local one.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    default_code = "DOMAIN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def _detail(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=self._detail(),
        )


class ValidationException(DomainException):
    """Raised when a required field is blank or a value is out of range."""

    default_code = "VALIDATION_ERROR"

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=self._detail())


class NotFoundException(DomainException):
    """Raised when a referenced post, offer or room does not exist."""

    default_code = "NOT_FOUND"

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=self._detail())


class ForbiddenException(DomainException):
    """Raised when the actor is not the owner or not a participant."""

    default_code = "FORBIDDEN"

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=self._detail())


class UnauthorizedException(DomainException):
    """Raised when the caller could not be resolved to a user."""

    default_code = "UNAUTHORIZED"

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=self._detail())


class InvalidStateException(DomainException):
    """
    Raised when an operation is attempted from a status that does not permit it.

    This includes losing the offer acceptance race. Clients should refresh
    rather than retry, so the API surfaces it as "already handled".
    """

    default_code = "INVALID_STATE"

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=self._detail())


class InvalidTransitionException(InvalidStateException):
    """Raised when a status transition is not legal from the current status."""

    default_code = "INVALID_TRANSITION"

    def __init__(
        self,
        entity: str,
        current: Optional[str],
        target: str,
        *,
        entity_id: Optional[str] = None,
    ) -> None:
        super().__init__(
            message=f"Cannot move {entity} from '{current}' to '{target}'",
            details={
                "entity": entity,
                "entity_id": entity_id,
                "current_status": current,
                "target_status": target,
            },
        )


class RoomClosedException(InvalidStateException):
    """Raised when writing to a chat room that is no longer active."""

    default_code = "ROOM_CLOSED"

    def __init__(self, room_id: str, room_status: str) -> None:
        super().__init__(
            message="This chat room is closed",
            details={"room_id": room_id, "status": room_status},
        )


class TransportException(DomainException):
    """Raised when the collaborator service is unreachable or timed out."""

    default_code = "TRANSPORT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=self._detail())


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    default_code = "SERVICE_ERROR"

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
