from enum import Enum
from typing import Optional

from fastapi import status


class ErrorKind(Enum):
    """Error categories with their HTTP status and whether they are expected"""
    VALIDATION = (status.HTTP_400_BAD_REQUEST, True)
    AUTH = (status.HTTP_401_UNAUTHORIZED, True)
    NOT_FOUND = (status.HTTP_404_NOT_FOUND, True)
    CONFLICT = (status.HTTP_409_CONFLICT, True)
    INTERNAL = (status.HTTP_500_INTERNAL_SERVER_ERROR, False)

    def __init__(self, status_code: int, operational: bool):
        self.status_code = status_code
        self.operational = operational


class AppError(Exception):
    """
    Base error raised by services and middleware

    Operational errors carry a message that is safe to show to the client.
    Non-operational ones are logged and replaced by a generic 500 body.
    """
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    @property
    def is_operational(self) -> bool:
        return self.kind.operational

    @property
    def status(self) -> str:
        return "fail" if self.status_code < 500 else "error"


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION


class AuthError(AppError):
    kind = ErrorKind.AUTH


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


class InternalError(AppError):
    kind = ErrorKind.INTERNAL
