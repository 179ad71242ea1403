"""Domain exceptions for the resume-match workflow.

All domain-specific exceptions inherit from ``ResumeMatchError`` so callers
can catch the full family with a single ``except`` clause when needed.

None of these describe user mistakes: unsupported files and blank messages
are silently dropped.  They signal programming errors at component seams.
"""

from __future__ import annotations

from typing import Any


class ResumeMatchError(Exception):
    """Base exception for all resume-match domain errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class InvalidTransitionError(ResumeMatchError):
    """Raised when a stage transition is requested from the wrong stage.

    Only the ``StageController`` moves the workflow between stages, and it
    refuses edges that are not part of the state machine.
    """

    def __init__(
        self,
        message: str = "Invalid stage transition",
        current: str = "",
        target: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.current = current
        self.target = target


class UnknownFileError(ResumeMatchError):
    """Raised when an operation names a file id that is not tracked."""

    def __init__(
        self,
        message: str = "Unknown file",
        file_id: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.file_id = file_id
