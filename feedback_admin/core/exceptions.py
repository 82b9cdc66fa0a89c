from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class HierarchyValidationError(ServiceError):
    """A proposed name (or type) failed its level validator. Carries the offending field."""

    def __init__(self, message: str, field: str = "name", level: Optional[str] = None) -> None:
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.field = field
        self.level = level


class InvalidSelectionError(ServiceError):
    """The index path of an operation does not point at existing nodes."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class CascadeDeleteError(ServiceError):
    """A year or department still has children and cannot be deleted."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class PersistenceError(ServiceError):
    """The configuration store rejected or failed a write."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)
