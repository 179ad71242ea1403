"""Domain events for the resume-match workflow.

Every event is a frozen dataclass inheriting from ``DomainEvent``.  The
services emit events as the simulations progress; listeners (the event store,
the console dashboard, tests) react.

All events carry a ``timestamp`` and a ``source_id`` identifying the
originating workflow instance.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from .enums import WorkflowStage
from .values import ResultRecord, Turn

# ---------------------------------------------------------------------------
# Base event
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    timestamp: float = field(default_factory=time.time)
    source_id: str = ""


# ---------------------------------------------------------------------------
# Intake events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileAccepted(DomainEvent):
    """A candidate file passed validation and is now tracked."""

    file_id: str = ""
    name: str = ""
    media_type: str = ""


@dataclass(frozen=True)
class FileRejected(DomainEvent):
    """A candidate file was dropped for its media type.

    Diagnostic only; nothing user-visible is derived from it.
    """

    name: str = ""
    media_type: str = ""


@dataclass(frozen=True)
class UploadProgressed(DomainEvent):
    """One progress tick was applied to a file."""

    file_id: str = ""
    progress: int = 0


@dataclass(frozen=True)
class UploadCompleted(DomainEvent):
    """A file reached 100% progress."""

    file_id: str = ""


@dataclass(frozen=True)
class UploadFailed(DomainEvent):
    """A file was marked failed and will not progress further."""

    file_id: str = ""
    reason: str = ""


@dataclass(frozen=True)
class FileRemoved(DomainEvent):
    """The user cancelled a tracked file."""

    file_id: str = ""
    remaining: int = 0


# ---------------------------------------------------------------------------
# Stage events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StageChanged(DomainEvent):
    """The workflow moved between stages."""

    previous_stage: WorkflowStage = WorkflowStage.INTAKE
    new_stage: WorkflowStage = WorkflowStage.INTAKE


@dataclass(frozen=True)
class WorkflowReset(DomainEvent):
    """The tracked-file set became empty and downstream state was cleared."""

    previous_stage: WorkflowStage = WorkflowStage.INTAKE


# ---------------------------------------------------------------------------
# Reveal events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RecordRevealed(DomainEvent):
    """One result record was appended to the reveal sequence."""

    record: ResultRecord | None = None
    position: int = 0


@dataclass(frozen=True)
class StreamExhausted(DomainEvent):
    """The result source has no further records."""

    revealed_count: int = 0


# ---------------------------------------------------------------------------
# Conversation events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TurnAppended(DomainEvent):
    """A user or system turn was appended to the transcript."""

    turn: Turn | None = None
