"""Domain entities for the resume-match workflow.

Entities have *identity* (a unique id that persists across mutations) and a
mutable lifecycle.  ``TrackedFile`` is the only one: an accepted upload whose
progress and status are advanced by the ``UploadSimulator``.
"""

from __future__ import annotations

from .enums import FileStatus
from .values import FileDescriptor, FileSnapshot, new_id

# ---------------------------------------------------------------------------
# TrackedFile entity
# ---------------------------------------------------------------------------

MAX_PROGRESS = 100


class TrackedFile:
    """An accepted upload being simulated.

    Invariant: ``status is COMPLETED`` exactly when ``progress == 100``.
    Once the file leaves ``UPLOADING`` it is frozen; further ``advance`` or
    ``fail`` calls are no-ops.
    """

    __slots__ = (
        "file_id",
        "name",
        "size",
        "media_type",
        "progress",
        "status",
        "failure_reason",
    )

    def __init__(
        self,
        name: str,
        size: int,
        media_type: str,
        file_id: str | None = None,
    ) -> None:
        self.file_id: str = file_id or new_id()
        self.name = name
        self.size = size
        self.media_type = media_type
        self.progress: int = 0
        self.status: FileStatus = FileStatus.UPLOADING
        self.failure_reason: str = ""

    @classmethod
    def from_descriptor(cls, descriptor: FileDescriptor) -> TrackedFile:
        return cls(
            name=descriptor.name,
            size=descriptor.size,
            media_type=descriptor.media_type,
        )

    # -- lifecycle transitions ------------------------------------------------

    def advance(self, step: int) -> bool:
        """Add *step* to progress, clamped at 100.

        Returns ``True`` only on the call that completes the file.
        """
        if self.status != FileStatus.UPLOADING:
            return False
        self.progress = min(MAX_PROGRESS, self.progress + step)
        if self.progress >= MAX_PROGRESS:
            self.status = FileStatus.COMPLETED
            return True
        return False

    def fail(self, reason: str = "") -> bool:
        """Mark an uploading file as failed.  Returns ``True`` if it changed."""
        if self.status != FileStatus.UPLOADING:
            return False
        self.status = FileStatus.FAILED
        self.failure_reason = reason
        return True

    # -- queries --------------------------------------------------------------

    @property
    def is_completed(self) -> bool:
        return self.status == FileStatus.COMPLETED

    @property
    def is_terminal(self) -> bool:
        return self.status in (FileStatus.COMPLETED, FileStatus.FAILED)

    def snapshot(self) -> FileSnapshot:
        return FileSnapshot(
            file_id=self.file_id,
            name=self.name,
            size=self.size,
            media_type=self.media_type,
            progress=self.progress,
            status=self.status,
            failure_reason=self.failure_reason,
        )

    def __repr__(self) -> str:
        return (
            f"TrackedFile(id={self.file_id!r}, name={self.name!r}, "
            f"progress={self.progress}, status={self.status.value})"
        )
