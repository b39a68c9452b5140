from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BadRequestError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConflictError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class InvalidStatusError(BadRequestError):
    """Attendance status outside present/absent/late."""


class InvalidDateError(BadRequestError):
    """Value cannot be read as a calendar day."""


class StoreUnavailableError(ServiceError):
    """Transient database failure. Not retried here; callers may retry."""

    def __init__(self, message: str = "Attendance store unavailable") -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)
