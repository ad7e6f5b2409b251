"""Failures surfaced to the user as the error banner."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class AssignCheckError(Exception):
    """Base error. ``message`` is short and safe to show in the browser."""

    message: str

    def __str__(self) -> str:
        return self.message


class UnsupportedFileTypeError(AssignCheckError):
    pass


class FileReadError(AssignCheckError):
    pass


class DocumentParseError(AssignCheckError):
    pass


class MissingCredentialError(AssignCheckError):
    pass


@dataclass
class AIServiceError(AssignCheckError):
    status_code: int | None = None
    body: str = ""


@dataclass
class MalformedAIResponseError(AssignCheckError):
    body: str = ""


class ValidationError(AssignCheckError):
    pass


class InvalidStepError(ValidationError):
    pass
