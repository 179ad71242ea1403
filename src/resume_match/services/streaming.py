"""Timed streaming reveal of result records.

Records are revealed one per ``reveal_interval_ms`` in exact source order.
After the last one, a final ``exhaustion_delay_ms`` elapses before the
streamer reports exhaustion and clears its ``streaming`` flag.  At most one
timer is live at any moment.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from resume_match.domain.events import RecordRevealed, StreamExhausted
from resume_match.domain.values import ResultRecord, RevealSnapshot
from resume_match.infrastructure.config import WorkflowConfig
from resume_match.infrastructure.event_bus import EventBus
from resume_match.infrastructure.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class RevealState:
    """Records revealed so far plus the ``streaming`` indicator.

    Insertion order is emission order; records are never reordered or
    removed except by a full :meth:`clear`.
    """

    def __init__(self) -> None:
        self.records: list[ResultRecord] = []
        self.streaming: bool = False
        self.expected_total: int = 0

    def clear(self) -> None:
        self.records.clear()
        self.streaming = False
        self.expected_total = 0

    def snapshot(self) -> RevealSnapshot:
        return RevealSnapshot(
            records=tuple(self.records),
            streaming=self.streaming,
            expected_total=self.expected_total,
        )


class ResultStreamer:
    """Emits records from an ordered source on a fixed cadence.

    Calling :meth:`start` again replaces any in-flight sequence and clears
    what was revealed before.  For a source of length N, each start yields
    exactly N reveals followed by exactly one exhaustion signal, unless it
    is cancelled or restarted first.

    Parameters
    ----------
    scheduler:
        Source of cancellable timers.
    config:
        Reveal cadence and exhaustion delay.
    on_revealed:
        Called with each record as it is revealed.
    on_exhausted:
        Called once the final delay has elapsed.
    event_bus:
        Optional bus for reveal events.
    source_id:
        Stamped on published events.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: WorkflowConfig | None = None,
        on_revealed: Callable[[ResultRecord], None] | None = None,
        on_exhausted: Callable[[], None] | None = None,
        event_bus: EventBus | None = None,
        source_id: str = "",
    ) -> None:
        self._scheduler = scheduler
        self._config = config or WorkflowConfig()
        self._on_revealed = on_revealed
        self._on_exhausted = on_exhausted
        self._event_bus = event_bus
        self._source_id = source_id
        self._state = RevealState()
        self._source: tuple[ResultRecord, ...] = ()
        self._cursor = 0
        # Bumped on start and cancel; callbacks of a superseded sequence are dropped.
        self._generation = 0
        self._timer: TimerHandle | None = None

    # -- commands -----------------------------------------------------------

    def start(self, source: Sequence[ResultRecord]) -> None:
        """Begin revealing *source*, replacing any sequence in flight."""
        self._revoke()
        self._generation += 1
        self._state.clear()
        self._source = tuple(source)
        self._cursor = 0
        self._state.streaming = True
        self._state.expected_total = len(self._source)
        logger.debug("Streaming %d records", len(self._source))
        if self._source:
            self._timer = self._scheduler.call_later(
                self._config.reveal_interval_ms, self._reveal_next
            )
        else:
            self._timer = self._scheduler.call_later(
                self._config.exhaustion_delay_ms, self._exhaust
            )

    def cancel(self) -> None:
        """Revoke the live timer and discard all revealed records."""
        self._revoke()
        self._generation += 1
        self._state.clear()
        self._source = ()
        self._cursor = 0

    # -- queries ------------------------------------------------------------

    @property
    def streaming(self) -> bool:
        return self._state.streaming

    @property
    def revealed(self) -> tuple[ResultRecord, ...]:
        return tuple(self._state.records)

    @property
    def revealed_count(self) -> int:
        return len(self._state.records)

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None and self._timer.active

    def snapshot(self) -> RevealSnapshot:
        return self._state.snapshot()

    # -- internals ----------------------------------------------------------

    def _revoke(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reveal_next(self) -> None:
        self._timer = None
        generation = self._generation
        record = self._source[self._cursor]
        self._cursor += 1
        self._state.records.append(record)
        if self._cursor < len(self._source):
            self._timer = self._scheduler.call_later(
                self._config.reveal_interval_ms, self._reveal_next
            )
        else:
            self._timer = self._scheduler.call_later(
                self._config.exhaustion_delay_ms, self._exhaust
            )

        if self._event_bus is not None:
            self._event_bus.publish(RecordRevealed(
                source_id=self._source_id,
                record=record,
                position=self._cursor - 1,
            ))
        if self._on_revealed is not None and generation == self._generation:
            self._on_revealed(record)

    def _exhaust(self) -> None:
        self._timer = None
        generation = self._generation
        self._state.streaming = False
        logger.debug("Stream exhausted after %d records", len(self._state.records))
        if self._event_bus is not None:
            self._event_bus.publish(StreamExhausted(
                source_id=self._source_id,
                revealed_count=len(self._state.records),
            ))
        if self._on_exhausted is not None and generation == self._generation:
            self._on_exhausted()
