"""Workflow orchestrator: wires the simulations into one staged workflow.

Data flow::

    descriptors -> FileValidator -> UploadSimulator (timer per file)
        -> all files completed -> Intake -> Revealing -> ResultStreamer
        -> exhausted -> Revealing -> Conversing -> ConversationSession

Each orchestrator owns all of its state, so any number of workflows can
share one scheduler and one event bus without interfering.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from resume_match.domain.entities import TrackedFile
from resume_match.domain.enums import WorkflowStage
from resume_match.domain.events import FileAccepted, FileRemoved
from resume_match.domain.values import (
    FileDescriptor,
    FileSnapshot,
    RevealSnapshot,
    Turn,
    WorkflowSnapshot,
    new_id,
)
from resume_match.infrastructure.catalog import ResultSource, StaticResultSource
from resume_match.infrastructure.config import WorkflowConfig
from resume_match.infrastructure.event_bus import EventBus
from resume_match.infrastructure.scheduling import Scheduler
from resume_match.services.conversation import ConversationSession, ReplyGenerator
from resume_match.services.stage import StageController
from resume_match.services.streaming import ResultStreamer
from resume_match.services.upload import UploadSimulator
from resume_match.services.validation import FileValidator

logger = logging.getLogger(__name__)


class WorkflowOrchestrator:
    """One upload -> reveal -> conversation workflow.

    Presenters call :meth:`add_files`, :meth:`remove_file` and
    :meth:`submit_message`, and read state through :meth:`snapshot` or the
    events on :attr:`event_bus`.  They never mutate the components directly.

    Parameters
    ----------
    scheduler:
        Source of cancellable timers (virtual or asyncio-backed).
    result_source:
        Ordered catalog revealed on entry into ``REVEALING``.
    reply_generator:
        ``(turn_count, revealed_count) -> str`` used for system turns.
    config:
        Timings and the media-type allow-list.
    event_bus:
        Bus for domain events.  A private bus is created when omitted.
    workflow_id:
        Stamped as ``source_id`` on every event.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        result_source: ResultSource | None = None,
        reply_generator: ReplyGenerator | None = None,
        config: WorkflowConfig | None = None,
        event_bus: EventBus | None = None,
        workflow_id: str | None = None,
    ) -> None:
        self.workflow_id = workflow_id or new_id()
        self.config = config or WorkflowConfig()
        self.config.validate()
        self.event_bus = event_bus or EventBus()
        self._scheduler = scheduler
        self._source = result_source or StaticResultSource()

        self._validator = FileValidator(
            self.config.accepted_media_types,
            event_bus=self.event_bus,
            source_id=self.workflow_id,
        )
        self._stages = StageController(self.event_bus, self.workflow_id)
        self._uploads = UploadSimulator(
            scheduler,
            self.config,
            on_completed=self._on_file_completed,
            event_bus=self.event_bus,
            source_id=self.workflow_id,
        )
        self._streamer = ResultStreamer(
            scheduler,
            self.config,
            on_exhausted=self._on_stream_exhausted,
            event_bus=self.event_bus,
            source_id=self.workflow_id,
        )
        self._conversation = ConversationSession(
            scheduler,
            reply_generator,
            revealed_count=lambda: self._streamer.revealed_count,
            config=self.config,
            event_bus=self.event_bus,
            source_id=self.workflow_id,
        )

        self._stages.on_enter(WorkflowStage.REVEALING, self._start_reveal)
        self._stages.on_reset(self._clear_downstream)

    # -- commands -----------------------------------------------------------

    def add_files(self, descriptors: Iterable[FileDescriptor]) -> list[FileSnapshot]:
        """Validate a submission batch and start uploading the accepted files.

        Unsupported files are dropped silently.  Returns the accepted ones.
        """
        accepted = self._validator.validate_many(descriptors)
        for tracked in accepted:
            self._uploads.start(tracked)
            self.event_bus.publish(FileAccepted(
                source_id=self.workflow_id,
                file_id=tracked.file_id,
                name=tracked.name,
                media_type=tracked.media_type,
            ))
        if accepted:
            logger.info(
                "Workflow %s accepted %d file(s)", self.workflow_id, len(accepted)
            )
        return [tracked.snapshot() for tracked in accepted]

    def remove_file(self, file_id: str) -> bool:
        """Cancel *file_id*.  Returns ``False`` if it was not tracked.

        Emptying the tracked set resets the workflow to ``INTAKE``.
        Otherwise the advancement guard is re-checked over what remains.
        """
        if not self._uploads.cancel(file_id):
            return False
        remaining = len(self._uploads)
        self.event_bus.publish(FileRemoved(
            source_id=self.workflow_id,
            file_id=file_id,
            remaining=remaining,
        ))
        if remaining == 0:
            self._stages.reset()
        else:
            self._stages.try_begin_reveal(self._uploads.all_completed())
        return True

    def fail_file(self, file_id: str, reason: str = "") -> bool:
        """Mark an uploading file as failed (terminal until removed)."""
        return self._uploads.fail(file_id, reason)

    def submit_message(self, text: str) -> Turn | None:
        """Send a chat message.  Only routed while ``CONVERSING``."""
        if self._stages.stage != WorkflowStage.CONVERSING:
            logger.debug(
                "Ignoring message in stage %s", self._stages.stage.value
            )
            return None
        return self._conversation.submit(text)

    # -- queries ------------------------------------------------------------

    @property
    def stage(self) -> WorkflowStage:
        return self._stages.stage

    @property
    def stage_history(self) -> list[tuple[WorkflowStage, WorkflowStage]]:
        return self._stages.history

    @property
    def files(self) -> tuple[FileSnapshot, ...]:
        return tuple(tracked.snapshot() for tracked in self._uploads.files)

    @property
    def reveal(self) -> RevealSnapshot:
        return self._streamer.snapshot()

    @property
    def transcript(self) -> tuple[Turn, ...]:
        return self._conversation.transcript

    @property
    def live_timer_count(self) -> int:
        """Timers this workflow still owns across all simulations."""
        return (
            self._uploads.active_timer_count
            + int(self._streamer.has_pending_timer)
            + self._conversation.pending_replies
        )

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            workflow_id=self.workflow_id,
            stage=self.stage,
            files=self.files,
            reveal=self.reveal,
            transcript=self.transcript,
        )

    # -- wiring -------------------------------------------------------------

    def _on_file_completed(self, tracked: TrackedFile) -> None:
        self._stages.try_begin_reveal(self._uploads.all_completed())

    def _start_reveal(self) -> None:
        if self._stages.stage != WorkflowStage.REVEALING:
            return
        self._streamer.start(self._source.records())

    def _on_stream_exhausted(self) -> None:
        # Event subscribers may reset the workflow while exhaustion is published.
        if self._stages.stage != WorkflowStage.REVEALING:
            return
        self._stages.begin_conversation()

    def _clear_downstream(self) -> None:
        self._uploads.cancel_all()
        self._streamer.cancel()
        self._conversation.cancel()
