"""Domain enumerations for the resume-match workflow.

These enums capture the fixed vocabularies used across the domain layer:
workflow stages, upload statuses, and transcript authors.
"""

from enum import Enum


class WorkflowStage(Enum):
    """Coarse phase of a workflow instance."""

    INTAKE = "intake"
    REVEALING = "revealing"
    CONVERSING = "conversing"


class FileStatus(Enum):
    """Lifecycle status of a tracked upload."""

    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"  # terminal, user must remove and re-submit


class TurnAuthor(Enum):
    """Who wrote a transcript turn."""

    USER = "user"
    SYSTEM = "system"
