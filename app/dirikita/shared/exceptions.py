from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class HttpRenderable(Exception):
    """
    Base for exceptions that carry everything needed to build an error envelope.

    Rendering itself happens in one place: `app.dirikita.shared.error_handlers`.
    """

    error_code: str = "API_ERROR"
    status_code: int = 400

    def __init__(self, message: str, *, previous: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        if previous is not None:
            self.__cause__ = previous

    @property
    def details(self) -> Any:
        return None


class ApiException(HttpRenderable):
    """Ad-hoc API failure with a caller-chosen code, status and details."""

    def __init__(
        self,
        message: str,
        error_code: str = "API_ERROR",
        details: Any = None,
        status_code: int = 400,
        previous: BaseException | None = None,
    ) -> None:
        super().__init__(message, previous=previous)
        self.error_code = error_code
        self.status_code = status_code
        self._details = details

    @property
    def details(self) -> Any:
        return self._details


class UnauthorizedException(HttpRenderable):
    error_code = "UNAUTHORIZED"
    status_code = 401

    def __init__(self, message: str = "Unauthorized access", previous: BaseException | None = None) -> None:
        super().__init__(message, previous=previous)


class ValidationException(HttpRenderable):
    """
    Field-level input errors, as a mapping of field name -> list of messages.
    """

    error_code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, errors: Mapping[str, Iterable[str]], message: str = "The given data was invalid.") -> None:
        super().__init__(message)
        self._errors = {field: list(messages) for field, messages in errors.items()}

    @classmethod
    def with_messages(cls, messages: Mapping[str, str | Iterable[str]]) -> "ValidationException":
        normalized: dict[str, list[str]] = {}
        for field, value in messages.items():
            normalized[field] = [value] if isinstance(value, str) else list(value)
        return cls(normalized)

    def errors(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self._errors.items()}

    @property
    def details(self) -> dict[str, list[str]]:
        return self.errors()
