"""Upload progress simulation.

Each accepted file gets its own chain of progress ticks.  Chains are
independent: their interleaving and completion order are whatever the
scheduler produces, and nothing here assumes an order.

The simulator owns the tracked-file set.  It is the only component that
mutates a ``TrackedFile``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from resume_match.domain.entities import TrackedFile
from resume_match.domain.events import (
    DomainEvent,
    UploadCompleted,
    UploadFailed,
    UploadProgressed,
)
from resume_match.domain.exceptions import UnknownFileError
from resume_match.infrastructure.config import WorkflowConfig
from resume_match.infrastructure.event_bus import EventBus
from resume_match.infrastructure.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[TrackedFile], None]


class UploadSimulator:
    """Drives one progress timer per tracked file.

    Every ``progress_interval_ms`` a file gains ``progress_step`` points.  The
    tick that reaches 100 marks the file completed, stops its timer and
    notifies *on_completed* exactly once.

    Parameters
    ----------
    scheduler:
        Source of cancellable timers.
    config:
        Tick interval and step size.
    on_completed:
        Called with the file right after it completes.
    event_bus:
        Optional bus for progress events.
    source_id:
        Stamped on published events.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: WorkflowConfig | None = None,
        on_completed: CompletionCallback | None = None,
        event_bus: EventBus | None = None,
        source_id: str = "",
    ) -> None:
        self._scheduler = scheduler
        self._config = config or WorkflowConfig()
        self._on_completed = on_completed
        self._event_bus = event_bus
        self._source_id = source_id
        self._files: dict[str, TrackedFile] = {}
        self._timers: dict[str, TimerHandle] = {}

    # -- commands -----------------------------------------------------------

    def start(self, tracked: TrackedFile) -> None:
        """Track *tracked* and begin its progress timer."""
        if tracked.file_id in self._files:
            raise ValueError(f"File {tracked.file_id!r} is already tracked")
        self._files[tracked.file_id] = tracked
        self._schedule_tick(tracked.file_id)
        logger.debug("Upload started for %r (%s)", tracked.name, tracked.file_id)

    def cancel(self, file_id: str) -> bool:
        """Stop the timer of *file_id* and forget the file.

        Returns ``True`` if the file was tracked.  No event for *file_id* is
        emitted after this returns.
        """
        timer = self._timers.pop(file_id, None)
        if timer is not None:
            timer.cancel()
        removed = self._files.pop(file_id, None)
        if removed is not None:
            logger.debug("Upload cancelled for %s", file_id)
        return removed is not None

    def cancel_all(self) -> int:
        """Cancel every tracked file. Returns how many were dropped."""
        file_ids = list(self._files)
        for file_id in file_ids:
            self.cancel(file_id)
        return len(file_ids)

    def fail(self, file_id: str, reason: str = "") -> bool:
        """Mark an uploading file as failed and stop its timer.

        This is where a real transport would report errors.  A failed file
        stays tracked (and blocks advancement) until the user removes it.
        """
        tracked = self._files.get(file_id)
        if tracked is None:
            raise UnknownFileError(f"File {file_id!r} is not tracked", file_id=file_id)
        if not tracked.fail(reason):
            return False
        timer = self._timers.pop(file_id, None)
        if timer is not None:
            timer.cancel()
        logger.info("Upload failed for %s: %s", file_id, reason or "(no reason)")
        self._publish(UploadFailed(source_id=self._source_id, file_id=file_id, reason=reason))
        return True

    # -- queries ------------------------------------------------------------

    @property
    def files(self) -> tuple[TrackedFile, ...]:
        """Tracked files in acceptance order."""
        return tuple(self._files.values())

    def get(self, file_id: str) -> TrackedFile | None:
        return self._files.get(file_id)

    def all_completed(self) -> bool:
        """``True`` when at least one file is tracked and all are completed."""
        return bool(self._files) and all(f.is_completed for f in self._files.values())

    @property
    def active_timer_count(self) -> int:
        return len(self._timers)

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._files

    # -- internals ----------------------------------------------------------

    def _schedule_tick(self, file_id: str) -> None:
        self._timers[file_id] = self._scheduler.call_later(
            self._config.progress_interval_ms,
            lambda: self._tick(file_id),
        )

    def _tick(self, file_id: str) -> None:
        self._timers.pop(file_id, None)
        tracked = self._files.get(file_id)
        if tracked is None or tracked.is_terminal:
            return

        completed = tracked.advance(self._config.progress_step)
        if not completed:
            self._schedule_tick(file_id)
        self._publish(UploadProgressed(
            source_id=self._source_id,
            file_id=file_id,
            progress=tracked.progress,
        ))
        # Subscribers may cancel the file while its events are published.
        if not completed or file_id not in self._files:
            return

        logger.debug("Upload completed for %r (%s)", tracked.name, file_id)
        self._publish(UploadCompleted(source_id=self._source_id, file_id=file_id))
        if self._on_completed is not None and file_id in self._files:
            self._on_completed(tracked)

    def _publish(self, event: DomainEvent) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
