from __future__ import annotations

from typing import Any


class CardiologgerError(Exception):
    """Base class for failures the session controller knows how to absorb."""


class ApiError(CardiologgerError):
    """Raised by the API gateway."""


class MissingApiKeyError(ApiError):
    """No API key is stored, so no request was made."""


class TransportError(ApiError):
    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ApiResponseError(ApiError):
    """The remote service answered, but with an error marker or an unusable body."""

    def __init__(self, message: str, *, status: int | None = None, error: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.error = error


class MalformedUserError(CardiologgerError):
    pass
