"""End-to-end tests for the WorkflowOrchestrator on a virtual clock."""

from __future__ import annotations

import pytest

from resume_match.domain.enums import FileStatus, TurnAuthor, WorkflowStage
from resume_match.domain.events import (
    FileAccepted,
    FileRejected,
    FileRemoved,
    RecordRevealed,
    StageChanged,
    StreamExhausted,
    UploadCompleted,
    UploadProgressed,
    WorkflowReset,
)
from resume_match.domain.values import FileDescriptor, ResultRecord
from resume_match.infrastructure.catalog import StaticResultSource
from resume_match.infrastructure.config import WorkflowConfig
from resume_match.infrastructure.event_bus import EventBus, EventStore
from resume_match.infrastructure.scheduling import VirtualScheduler
from resume_match.services.conversation import ChatModelReplyGenerator
from resume_match.services.orchestrator import WorkflowOrchestrator
from resume_match.testing import MockReplyChatModel

# One file, default catalog of eight records:
#   uploads complete at 10 * 200
#   last reveal 8 * 800 later
#   exhaustion 1000 after that
UPLOAD_DONE_AT = 2000
LAST_REVEAL_AT = 8400
CONVERSING_AT = 9400


def _to_conversing(workflow: WorkflowOrchestrator, clock: VirtualScheduler, pdf: FileDescriptor) -> None:
    workflow.add_files([pdf])
    clock.advance(CONVERSING_AT)
    assert workflow.stage == WorkflowStage.CONVERSING


class TestIntake:

    def test_initial_state(self, workflow: WorkflowOrchestrator) -> None:
        snap = workflow.snapshot()
        assert snap.stage == WorkflowStage.INTAKE
        assert snap.files == ()
        assert snap.reveal.records == ()
        assert snap.transcript == ()
        assert snap.workflow_id == "wf-1"

    def test_add_file_starts_at_zero(
        self, workflow: WorkflowOrchestrator, pdf: FileDescriptor, store: EventStore
    ) -> None:
        accepted = workflow.add_files([pdf])
        assert len(accepted) == 1
        assert accepted[0].progress == 0
        assert accepted[0].status == FileStatus.UPLOADING
        assert len(store.query(FileAccepted)) == 1

    def test_upload_completes_after_ten_ticks(
        self, workflow: WorkflowOrchestrator, clock: VirtualScheduler, pdf: FileDescriptor
    ) -> None:
        workflow.add_files([pdf])
        last = 0
        for _ in range(9):
            clock.advance(200)
            progress = workflow.files[0].progress
            assert progress >= last
            last = progress
            assert workflow.stage == WorkflowStage.INTAKE
        assert last == 90

        clock.advance(200)
        assert workflow.files[0].progress == 100
        assert workflow.files[0].status == FileStatus.COMPLETED
        assert workflow.stage == WorkflowStage.REVEALING

    def test_disallowed_file_dropped(
        self,
        workflow: WorkflowOrchestrator,
        pdf: FileDescriptor,
        png: FileDescriptor,
        store: EventStore,
    ) -> None:
        accepted = workflow.add_files([pdf, png])
        assert [f.name for f in accepted] == ["resume.pdf"]
        assert [f.name for f in workflow.files] == ["resume.pdf"]
        assert len(store.query(FileRejected)) == 1

    def test_only_disallowed_files_stay_in_intake(
        self, workflow: WorkflowOrchestrator, clock: VirtualScheduler, png: FileDescriptor
    ) -> None:
        assert workflow.add_files([png]) == []
        clock.advance(10_000)
        assert workflow.stage == WorkflowStage.INTAKE
        assert workflow.live_timer_count == 0

    def test_waits_for_every_file(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        pdf: FileDescriptor,
        docx: FileDescriptor,
    ) -> None:
        workflow.add_files([pdf])
        clock.advance(1000)
        workflow.add_files([docx])
        clock.advance(1000)
        assert workflow.files[0].status == FileStatus.COMPLETED
        assert workflow.stage == WorkflowStage.INTAKE
        clock.advance(1000)
        assert workflow.stage == WorkflowStage.REVEALING

    def test_revealing_entered_once(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        pdf: FileDescriptor,
        docx: FileDescriptor,
        store: EventStore,
    ) -> None:
        workflow.add_files([pdf, docx])
        clock.advance(UPLOAD_DONE_AT)
        entered = [
            e for e in store.query(StageChanged) if e.new_stage == WorkflowStage.REVEALING
        ]
        assert len(entered) == 1

    def test_failed_file_blocks_until_removed(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        pdf: FileDescriptor,
        docx: FileDescriptor,
    ) -> None:
        ok, bad = workflow.add_files([pdf, docx])
        clock.advance(400)
        assert workflow.fail_file(bad.file_id, "timeout") is True
        clock.advance(UPLOAD_DONE_AT)
        assert workflow.stage == WorkflowStage.INTAKE

        workflow.remove_file(bad.file_id)
        assert workflow.stage == WorkflowStage.REVEALING
        assert [f.file_id for f in workflow.files] == [ok.file_id]


class TestReveal:

    def test_records_revealed_in_order(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        pdf: FileDescriptor,
        store: EventStore,
    ) -> None:
        workflow.add_files([pdf])
        clock.advance(UPLOAD_DONE_AT)
        assert workflow.reveal.streaming
        assert workflow.reveal.revealed_count == 0
        assert workflow.reveal.pending_slots == 8

        for expected in range(1, 9):
            clock.advance(800)
            assert workflow.reveal.revealed_count == expected
            assert workflow.reveal.streaming
            assert workflow.stage == WorkflowStage.REVEALING
        assert clock.now == LAST_REVEAL_AT

        clock.advance(1000)
        assert not workflow.reveal.streaming
        assert workflow.stage == WorkflowStage.CONVERSING

        ids = [e.record.record_id for e in store.query(RecordRevealed)]
        assert ids == [str(i) for i in range(1, 9)]
        assert len(store.query(StreamExhausted)) == 1

    def test_custom_source(
        self,
        clock: VirtualScheduler,
        pdf: FileDescriptor,
        three_records: list[ResultRecord],
    ) -> None:
        workflow = WorkflowOrchestrator(clock, StaticResultSource(three_records))
        workflow.add_files([pdf])
        clock.advance(UPLOAD_DONE_AT + 3 * 800 + 1000)
        assert workflow.stage == WorkflowStage.CONVERSING
        assert [r.title for r in workflow.reveal.records] == ["Job 1", "Job 2", "Job 3"]

    def test_empty_source_goes_straight_to_conversation(
        self, clock: VirtualScheduler, pdf: FileDescriptor
    ) -> None:
        workflow = WorkflowOrchestrator(clock, StaticResultSource([]))
        workflow.add_files([pdf])
        clock.advance(UPLOAD_DONE_AT + 999)
        assert workflow.stage == WorkflowStage.REVEALING
        clock.advance(1)
        assert workflow.stage == WorkflowStage.CONVERSING
        assert workflow.reveal.records == ()

    def test_adding_files_after_intake_does_not_rereveal(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        pdf: FileDescriptor,
        docx: FileDescriptor,
        store: EventStore,
    ) -> None:
        workflow.add_files([pdf])
        clock.advance(UPLOAD_DONE_AT + 800)
        workflow.add_files([docx])
        clock.advance(CONVERSING_AT)
        assert workflow.stage == WorkflowStage.CONVERSING
        assert len(store.query(RecordRevealed)) == 8


class TestConversation:

    def test_submit_ignored_before_conversing(
        self, workflow: WorkflowOrchestrator, clock: VirtualScheduler, pdf: FileDescriptor
    ) -> None:
        workflow.add_files([pdf])
        clock.advance(UPLOAD_DONE_AT)
        assert workflow.submit_message("hello") is None
        assert workflow.transcript == ()

    def test_blank_message_is_noop(
        self, workflow: WorkflowOrchestrator, clock: VirtualScheduler, pdf: FileDescriptor
    ) -> None:
        _to_conversing(workflow, clock, pdf)
        assert workflow.submit_message("  ") is None
        clock.advance(5000)
        assert workflow.transcript == ()

    def test_hello_gets_reply(
        self, workflow: WorkflowOrchestrator, clock: VirtualScheduler, pdf: FileDescriptor
    ) -> None:
        _to_conversing(workflow, clock, pdf)
        workflow.submit_message("hello")
        assert [t.author for t in workflow.transcript] == [TurnAuthor.USER]

        clock.advance(1000)
        transcript = workflow.transcript
        assert [t.author for t in transcript] == [TurnAuthor.USER, TurnAuthor.SYSTEM]
        assert "I found 8 matching jobs" in transcript[1].content

    def test_chat_model_generator(self, clock: VirtualScheduler, pdf: FileDescriptor) -> None:
        model = MockReplyChatModel(replies=["Which role interests you most?"])
        workflow = WorkflowOrchestrator(clock, reply_generator=ChatModelReplyGenerator(model))
        _to_conversing(workflow, clock, pdf)
        workflow.submit_message("hi")
        clock.advance(1000)
        assert workflow.transcript[-1].content == "Which role interests you most?"


class TestRemovalAndReset:

    def test_removing_last_file_resets(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        pdf: FileDescriptor,
        store: EventStore,
    ) -> None:
        (tracked,) = workflow.add_files([pdf])
        clock.advance(UPLOAD_DONE_AT + 1600)
        assert workflow.reveal.revealed_count == 2

        assert workflow.remove_file(tracked.file_id) is True
        assert workflow.stage == WorkflowStage.INTAKE
        assert workflow.files == ()
        assert workflow.reveal.records == ()
        assert not workflow.reveal.streaming
        assert workflow.live_timer_count == 0
        assert clock.pending_count == 0
        assert store.query(FileRemoved)[0].remaining == 0
        assert store.query(WorkflowReset)[0].previous_stage == WorkflowStage.REVEALING

        before = len(store)
        clock.advance(60_000)
        assert len(store) == before
        assert workflow.snapshot().reveal.records == ()

    def test_removing_one_of_two_keeps_stage(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        pdf: FileDescriptor,
        docx: FileDescriptor,
    ) -> None:
        a, b = workflow.add_files([pdf, docx])
        clock.advance(UPLOAD_DONE_AT + 800)
        assert workflow.stage == WorkflowStage.REVEALING

        workflow.remove_file(a.file_id)
        assert workflow.stage == WorkflowStage.REVEALING
        assert workflow.reveal.revealed_count == 1

        workflow.remove_file(b.file_id)
        assert workflow.stage == WorkflowStage.INTAKE
        assert workflow.live_timer_count == 0

    def test_removing_uploading_file_cancels_ticks(
        self, workflow: WorkflowOrchestrator, clock: VirtualScheduler, pdf: FileDescriptor
    ) -> None:
        (tracked,) = workflow.add_files([pdf])
        clock.advance(600)
        workflow.remove_file(tracked.file_id)
        assert clock.pending_count == 0
        clock.advance(10_000)
        assert workflow.stage == WorkflowStage.INTAKE

    def test_remove_unknown_file(self, workflow: WorkflowOrchestrator) -> None:
        assert workflow.remove_file("missing") is False

    def test_reset_clears_pending_reply(
        self, workflow: WorkflowOrchestrator, clock: VirtualScheduler, pdf: FileDescriptor
    ) -> None:
        _to_conversing(workflow, clock, pdf)
        workflow.submit_message("hello")
        workflow.remove_file(workflow.files[0].file_id)

        assert workflow.transcript == ()
        assert workflow.live_timer_count == 0
        clock.advance(5000)
        assert workflow.transcript == ()

    def test_restart_after_reset(
        self, workflow: WorkflowOrchestrator, clock: VirtualScheduler, pdf: FileDescriptor
    ) -> None:
        _to_conversing(workflow, clock, pdf)
        workflow.remove_file(workflow.files[0].file_id)

        _to_conversing(workflow, clock, pdf)
        assert workflow.reveal.revealed_count == 8
        assert workflow.stage_history[-3:] == [
            (WorkflowStage.CONVERSING, WorkflowStage.INTAKE),
            (WorkflowStage.INTAKE, WorkflowStage.REVEALING),
            (WorkflowStage.REVEALING, WorkflowStage.CONVERSING),
        ]

    def test_cancel_one_of_two_while_uploading(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        pdf: FileDescriptor,
        docx: FileDescriptor,
    ) -> None:
        a, b = workflow.add_files([pdf, docx])
        clock.advance(600)
        assert workflow.remove_file(a.file_id) is True

        assert workflow.stage == WorkflowStage.INTAKE
        assert [f.file_id for f in workflow.files] == [b.file_id]
        assert workflow.live_timer_count == 1

        clock.advance(UPLOAD_DONE_AT - 600 - 1)
        assert workflow.stage == WorkflowStage.INTAKE
        clock.advance(1)
        assert workflow.files[0].status == FileStatus.COMPLETED
        assert workflow.stage == WorkflowStage.REVEALING


class TestSubscriberRemovals:
    """Subscribers removing files while the workflow is publishing."""

    def test_remove_on_entering_revealing(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        bus: EventBus,
        pdf: FileDescriptor,
        store: EventStore,
    ) -> None:
        (tracked,) = workflow.add_files([pdf])

        def on_stage(event: StageChanged) -> None:
            if event.new_stage == WorkflowStage.REVEALING:
                workflow.remove_file(tracked.file_id)

        bus.subscribe(StageChanged, on_stage)
        clock.advance(UPLOAD_DONE_AT)

        assert workflow.stage == WorkflowStage.INTAKE
        assert workflow.files == ()
        assert not workflow.reveal.streaming
        assert workflow.live_timer_count == 0
        assert clock.pending_count == 0

        clock.advance(20_000)
        assert workflow.reveal.records == ()
        assert store.query(RecordRevealed) == []

    def test_remove_on_stream_exhausted(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        bus: EventBus,
        pdf: FileDescriptor,
    ) -> None:
        (tracked,) = workflow.add_files([pdf])
        bus.subscribe(StreamExhausted, lambda e: workflow.remove_file(tracked.file_id))

        clock.advance(20_000)
        assert workflow.stage == WorkflowStage.INTAKE
        assert workflow.live_timer_count == 0
        assert WorkflowStage.CONVERSING not in [new for _, new in workflow.stage_history]

    def test_remove_on_record_revealed(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        bus: EventBus,
        pdf: FileDescriptor,
        store: EventStore,
    ) -> None:
        (tracked,) = workflow.add_files([pdf])
        bus.subscribe(RecordRevealed, lambda e: workflow.remove_file(tracked.file_id))

        clock.advance(20_000)
        assert len(store.query(RecordRevealed)) == 1
        assert workflow.stage == WorkflowStage.INTAKE
        assert workflow.reveal.records == ()
        assert workflow.live_timer_count == 0

    def test_remove_on_upload_progress(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        bus: EventBus,
        pdf: FileDescriptor,
        store: EventStore,
    ) -> None:
        bus.subscribe(UploadProgressed, lambda e: workflow.remove_file(e.file_id))
        workflow.add_files([pdf])

        clock.advance(200)
        assert workflow.files == ()
        assert workflow.live_timer_count == 0
        assert clock.pending_count == 0

        before = len(store)
        clock.advance(10_000)
        assert len(store) == before
        assert store.query(UploadCompleted) == []

    def test_remove_on_final_progress(
        self,
        workflow: WorkflowOrchestrator,
        clock: VirtualScheduler,
        bus: EventBus,
        pdf: FileDescriptor,
        store: EventStore,
    ) -> None:
        def on_progress(event: UploadProgressed) -> None:
            if event.progress == 100:
                workflow.remove_file(event.file_id)

        bus.subscribe(UploadProgressed, on_progress)
        workflow.add_files([pdf])

        clock.advance(20_000)
        assert store.query(UploadCompleted) == []
        assert workflow.stage == WorkflowStage.INTAKE
        assert clock.pending_count == 0


class TestFullScenario:

    def test_reference_walkthrough(
        self, workflow: WorkflowOrchestrator, clock: VirtualScheduler, pdf: FileDescriptor
    ) -> None:
        workflow.add_files([pdf])
        clock.advance(UPLOAD_DONE_AT)
        assert workflow.stage == WorkflowStage.REVEALING

        clock.advance(8 * 800 + 1000)
        assert workflow.stage == WorkflowStage.CONVERSING
        assert workflow.reveal.revealed_count == 8

        workflow.submit_message("match me")
        clock.advance(1000)
        assert len(workflow.transcript) == 2
        assert workflow.live_timer_count == 0
        assert workflow.stage_history == [
            (WorkflowStage.INTAKE, WorkflowStage.REVEALING),
            (WorkflowStage.REVEALING, WorkflowStage.CONVERSING),
        ]

    def test_workflows_sharing_a_clock_are_independent(
        self, clock: VirtualScheduler, bus: EventBus, pdf: FileDescriptor
    ) -> None:
        store = EventStore()
        bus.subscribe_all(store.append)
        first = WorkflowOrchestrator(clock, event_bus=bus, workflow_id="a")
        second = WorkflowOrchestrator(clock, event_bus=bus, workflow_id="b")

        first.add_files([pdf])
        clock.advance(1000)
        (tracked,) = second.add_files([pdf])
        clock.advance(1000)
        assert first.stage == WorkflowStage.REVEALING
        assert second.stage == WorkflowStage.INTAKE

        second.remove_file(tracked.file_id)
        clock.advance(CONVERSING_AT)
        assert first.stage == WorkflowStage.CONVERSING
        assert second.stage == WorkflowStage.INTAKE
        assert len(store.query(RecordRevealed, source_id="a")) == 8
        assert store.query(RecordRevealed, source_id="b") == []

    def test_invalid_config_rejected(self, clock: VirtualScheduler) -> None:
        with pytest.raises(ValueError):
            WorkflowOrchestrator(clock, config=WorkflowConfig(progress_step=0))
