"""Domain layer for the resume-match workflow.

Re-exports all public domain types so that consumers can write::

    from resume_match.domain import TrackedFile, WorkflowStage, ResultRecord
"""

# -- Enumerations -------------------------------------------------------------
from .enums import FileStatus, TurnAuthor, WorkflowStage

# -- Value Objects ------------------------------------------------------------
from .values import (
    FileDescriptor,
    FileSnapshot,
    ResultRecord,
    RevealSnapshot,
    Turn,
    WorkflowSnapshot,
    new_id,
)

# -- Entities -----------------------------------------------------------------
from .entities import MAX_PROGRESS, TrackedFile

# -- Domain Events ------------------------------------------------------------
from .events import (
    DomainEvent,
    FileAccepted,
    FileRejected,
    FileRemoved,
    RecordRevealed,
    StageChanged,
    StreamExhausted,
    TurnAppended,
    UploadCompleted,
    UploadFailed,
    UploadProgressed,
    WorkflowReset,
)

# -- Exceptions ---------------------------------------------------------------
from .exceptions import (
    InvalidTransitionError,
    ResumeMatchError,
    UnknownFileError,
)

__all__ = [
    # enums
    "FileStatus",
    "TurnAuthor",
    "WorkflowStage",
    # values
    "FileDescriptor",
    "FileSnapshot",
    "ResultRecord",
    "RevealSnapshot",
    "Turn",
    "WorkflowSnapshot",
    "new_id",
    # entities
    "MAX_PROGRESS",
    "TrackedFile",
    # events
    "DomainEvent",
    "FileAccepted",
    "FileRejected",
    "FileRemoved",
    "RecordRevealed",
    "StageChanged",
    "StreamExhausted",
    "TurnAppended",
    "UploadCompleted",
    "UploadFailed",
    "UploadProgressed",
    "WorkflowReset",
    # exceptions
    "InvalidTransitionError",
    "ResumeMatchError",
    "UnknownFileError",
]
