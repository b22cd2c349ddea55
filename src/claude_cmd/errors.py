"""
Error type shared by every claude-cmd component.

A single exception carries a discriminant (``kind``) and a kind-specific
payload, so callers branch on ``error.kind`` instead of on exception classes.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator


class ErrorKind(str, Enum):
    """Discriminant for CommandError."""
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CACHE = "cache"
    FETCH = "fetch"
    COMPARISON = "comparison"


class CommandError(Exception):
    """Failure raised by the claude-cmd core.

    Attributes:
        kind: What went wrong (see ErrorKind)
        message: Human-readable description
        operation: Name of the operation that failed, once tagged
        language: Resolved language code, once tagged
        details: Kind-specific payload (e.g. ``command_name`` for NOT_FOUND,
            ``constraint``/``value`` for depth violations, ``status_code``
            for FETCH)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        operation: str | None = None,
        language: str | None = None,
        **details: Any,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.operation = operation
        self.language = language
        self.details: dict[str, Any] = details

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"CommandError(kind={self.kind.value!r}, message={self.message!r}, "
            f"operation={self.operation!r}, language={self.language!r})"
        )

    def tag(self, operation: str, language: str | None) -> "CommandError":
        """Attach operation/language context without overwriting existing tags."""
        if self.operation is None:
            self.operation = operation
        if self.language is None:
            self.language = language
        return self


def not_found(command_name: str, language: str) -> CommandError:
    return CommandError(
        ErrorKind.NOT_FOUND,
        f'Command "{command_name}" not found in language "{language}"',
        language=language,
        command_name=command_name,
    )


def validation(message: str, **details: Any) -> CommandError:
    return CommandError(ErrorKind.VALIDATION, message, **details)


def cache_error(message: str, language: str | None = None, **details: Any) -> CommandError:
    return CommandError(ErrorKind.CACHE, message, language=language, **details)


def fetch_error(message: str, language: str, reason: str, **details: Any) -> CommandError:
    return CommandError(
        ErrorKind.FETCH, message, language=language, reason=reason, **details
    )


def comparison_error(message: str, **details: Any) -> CommandError:
    return CommandError(ErrorKind.COMPARISON, message, **details)


@contextmanager
def operation_context(operation: str, language: str | None) -> Iterator[None]:
    """Tag any CommandError raised inside the block, then re-raise it unchanged in kind."""
    try:
        yield
    except CommandError as e:
        e.tag(operation, language)
        raise
