"""Stage state machine for the workflow.

``Intake -> Revealing -> Conversing`` plus a reset edge ``* -> Intake``.
The controller is the only object allowed to change the active stage.
Components that must react to a transition register hooks instead of
reading and writing the stage themselves.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable

from resume_match.domain.enums import WorkflowStage
from resume_match.domain.events import StageChanged, WorkflowReset
from resume_match.domain.exceptions import InvalidTransitionError
from resume_match.infrastructure.event_bus import EventBus

logger = logging.getLogger(__name__)

StageHook = Callable[[], None]

_FORWARD_EDGES: dict[WorkflowStage, WorkflowStage] = {
    WorkflowStage.INTAKE: WorkflowStage.REVEALING,
    WorkflowStage.REVEALING: WorkflowStage.CONVERSING,
}


class StageController:
    """Finite-state machine holding the single active ``WorkflowStage``.

    Forward edges are guarded and fire at most once per visit of their
    source stage.  The reset edge is unconditional: reset hooks run first
    (clearing downstream state), then the stage is set back to ``INTAKE``.
    """

    def __init__(
        self,
        event_bus: EventBus | None = None,
        source_id: str = "",
    ) -> None:
        self._stage = WorkflowStage.INTAKE
        self._event_bus = event_bus
        self._source_id = source_id
        self._enter_hooks: dict[WorkflowStage, list[StageHook]] = defaultdict(list)
        self._reset_hooks: list[StageHook] = []
        self._history: list[tuple[WorkflowStage, WorkflowStage]] = []

    # -- hooks --------------------------------------------------------------

    def on_enter(self, stage: WorkflowStage, hook: StageHook) -> None:
        """Run *hook* every time the machine enters *stage* via a forward edge."""
        self._enter_hooks[stage].append(hook)

    def on_reset(self, hook: StageHook) -> None:
        """Run *hook* on every reset, before the stage returns to ``INTAKE``."""
        self._reset_hooks.append(hook)

    # -- queries ------------------------------------------------------------

    @property
    def stage(self) -> WorkflowStage:
        return self._stage

    @property
    def history(self) -> list[tuple[WorkflowStage, WorkflowStage]]:
        """Every transition taken, as ``(previous, new)`` pairs."""
        return list(self._history)

    # -- transitions --------------------------------------------------------

    def try_begin_reveal(self, files_ready: bool) -> bool:
        """Fire ``Intake -> Revealing`` if in intake and *files_ready*.

        Returns ``True`` only when the transition actually fired.
        """
        if self._stage != WorkflowStage.INTAKE or not files_ready:
            return False
        self._advance(WorkflowStage.REVEALING)
        return True

    def begin_conversation(self) -> None:
        """Fire ``Revealing -> Conversing``."""
        if self._stage != WorkflowStage.REVEALING:
            raise InvalidTransitionError(
                f"Cannot enter conversation from {self._stage.value}",
                current=self._stage.value,
                target=WorkflowStage.CONVERSING.value,
            )
        self._advance(WorkflowStage.CONVERSING)

    def reset(self) -> WorkflowStage:
        """Return to ``INTAKE`` from any stage.  Returns the previous stage."""
        previous = self._stage
        for hook in list(self._reset_hooks):
            hook()
        self._stage = WorkflowStage.INTAKE
        if previous != WorkflowStage.INTAKE:
            self._history.append((previous, WorkflowStage.INTAKE))
            self._publish_change(previous, WorkflowStage.INTAKE)
        logger.info("Workflow %s reset from %s", self._source_id, previous.value)
        if self._event_bus is not None:
            self._event_bus.publish(WorkflowReset(
                source_id=self._source_id,
                previous_stage=previous,
            ))
        return previous

    # -- internals ----------------------------------------------------------

    def _advance(self, target: WorkflowStage) -> None:
        previous = self._stage
        if _FORWARD_EDGES.get(previous) != target:
            raise InvalidTransitionError(
                f"No edge from {previous.value} to {target.value}",
                current=previous.value,
                target=target.value,
            )
        self._stage = target
        self._history.append((previous, target))
        logger.info(
            "Workflow %s stage %s -> %s",
            self._source_id, previous.value, target.value,
        )
        self._publish_change(previous, target)
        for hook in list(self._enter_hooks.get(target, [])):
            # A subscriber or an earlier hook may have reset the workflow.
            if self._stage != target:
                logger.debug(
                    "Workflow %s left %s before its enter hooks ran",
                    self._source_id, target.value,
                )
                return
            hook()

    def _publish_change(self, previous: WorkflowStage, new: WorkflowStage) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(StageChanged(
                source_id=self._source_id,
                previous_stage=previous,
                new_stage=new,
            ))
