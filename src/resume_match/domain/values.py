"""Value objects for the resume-match workflow.

All types here are frozen dataclasses -- immutable, compared by value.
They represent inputs handed to the core (``FileDescriptor``), catalog data
(``ResultRecord``), transcript entries (``Turn``) and read-only projections of
mutable state (``FileSnapshot``, ``RevealSnapshot``, ``WorkflowSnapshot``).
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field

from .enums import FileStatus, TurnAuthor, WorkflowStage


def new_id() -> str:
    """Return a short opaque identifier."""
    return uuid.uuid4().hex[:12]


# ---------------------------------------------------------------------------
# FileDescriptor
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileDescriptor:
    """A candidate file as yielded by the capture surface (browse or drop).

    Nothing is known about the file beyond what the browser would report:
    its name, its size in bytes, and its declared media type.
    """

    name: str
    size: int
    media_type: str

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"size must be >= 0, got {self.size}")


# ---------------------------------------------------------------------------
# ResultRecord
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResultRecord:
    """A matched job listing from the result catalog.

    Read-only: the core never mutates or reorders records, it only reveals
    them one by one.
    """

    record_id: str
    title: str
    company: str
    location: str
    salary: str
    employment_type: str = "Full-time"
    description: str = ""
    requirements: tuple[str, ...] = ()
    posted: str = ""


# ---------------------------------------------------------------------------
# Turn
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Turn:
    """One message in the conversation transcript."""

    author: TurnAuthor
    content: str
    turn_id: str = field(default_factory=new_id)
    created_at: float = field(default_factory=time.time)

    @property
    def is_user(self) -> bool:
        return self.author == TurnAuthor.USER


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileSnapshot:
    """Point-in-time view of a ``TrackedFile``."""

    file_id: str
    name: str
    size: int
    media_type: str
    progress: int
    status: FileStatus
    failure_reason: str = ""


@dataclass(frozen=True)
class RevealSnapshot:
    """Point-in-time view of the streamed results.

    ``pending_slots`` is the number of placeholders a presenter should draw
    while more records are still expected.
    """

    records: tuple[ResultRecord, ...] = ()
    streaming: bool = False
    expected_total: int = 0

    @property
    def revealed_count(self) -> int:
        return len(self.records)

    @property
    def pending_slots(self) -> int:
        if not self.streaming:
            return 0
        return max(0, self.expected_total - len(self.records))


@dataclass(frozen=True)
class WorkflowSnapshot:
    """Read-only projection of a whole workflow for presenters."""

    workflow_id: str
    stage: WorkflowStage
    files: tuple[FileSnapshot, ...] = ()
    reveal: RevealSnapshot = field(default_factory=RevealSnapshot)
    transcript: tuple[Turn, ...] = ()

    @property
    def all_files_completed(self) -> bool:
        return bool(self.files) and all(
            f.status == FileStatus.COMPLETED for f in self.files
        )
