# localcooks/core/exceptions.py
"""
Domain-specific exceptions for the LocalCooks platform.

Services raise these with business-focused messages; routes convert them
with ``to_http_exception()`` so the error handlers can render a consistent
problem body.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details,
            },
        )


# Specific business exceptions


class CheckoutStateException(ValidationException):
    """Raised when a storage checkout is not in a state that allows the action."""

    def __init__(self, current_status: Optional[str]) -> None:
        super().__init__(
            f"Cannot process checkout in status: {current_status or 'active'}",
            code="checkout_invalid_state",
            details={"checkout_status": current_status or "active"},
        )


class StripeConnectAccountMissing(ValidationException):
    """Raised when a Stripe Connect operation needs an account that does not exist."""

    def __init__(self) -> None:
        super().__init__("No Stripe Connect account found", code="stripe_account_missing")


class RepositoryException(Exception):
    """Raised when a repository operation fails."""
