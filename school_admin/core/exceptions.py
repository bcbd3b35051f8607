"""Errors raised by the service layer; routers report them as HTTP errors."""

from fastapi import status


class ServiceError(Exception):
    """A refused or failed operation and the HTTP status it is reported with."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code})"


def not_found(what: str) -> ServiceError:
    return ServiceError(f"{what} not found", status.HTTP_404_NOT_FOUND)
