"""Turn-based conversation over the revealed results.

A user turn is appended synchronously; exactly one system turn follows after
``reply_delay_ms``.  Reply text comes from an opaque ``ReplyGenerator``
called as ``generator(turn_count, revealed_count)``.  Generators must not block:
a generator that also defines ``async agenerate(turn_count, revealed_count)``
is awaited as a scheduler task on asyncio schedulers, so a slow chat model
never stalls other timers.  Until that task finishes the reply is pending
and is cancelled with the session.

Overlapping submissions are not deduplicated: each one owns its own reply
timer and none cancels another.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from resume_match.domain.enums import TurnAuthor
from resume_match.domain.events import TurnAppended
from resume_match.domain.values import Turn
from resume_match.infrastructure.config import WorkflowConfig
from resume_match.infrastructure.event_bus import EventBus
from resume_match.infrastructure.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

ReplyGenerator = Callable[[int, int], str]


# ===================================================================== #
#  Reply generators                                                      #
# ===================================================================== #

class TemplateReplyGenerator:
    """Canned reply mentioning how many matching jobs were found."""

    template = (
        "Based on your resume analysis, I found {revealed_count} matching jobs. "
        "The positions seem well-aligned with your skills and experience. "
        "Would you like me to help you customize your application for any "
        "specific role or provide more details about the requirements?"
    )

    def __init__(self, template: str | None = None) -> None:
        if template is not None:
            self.template = template

    def __call__(self, turn_count: int, revealed_count: int) -> str:
        return self.template.format(
            turn_count=turn_count,
            revealed_count=revealed_count,
        )


class ReplyOutput(BaseModel):
    """Structured output schema for chat-model replies."""

    reply: str = Field(description="The assistant message shown to the user")


_REPLY_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a career assistant. The user uploaded a resume and was "
            "shown a list of matching job openings. Answer briefly and offer "
            "help tailoring an application.",
        ),
        (
            "human",
            "Matching jobs shown: {revealed_count}\n"
            "Messages so far in this conversation: {turn_count}\n\n"
            "Write the next assistant reply.",
        ),
    ]
)


class ChatModelReplyGenerator:
    """Reply generator backed by a LangChain chat model.

    Falls back to *fallback* (the canned template by default) when the
    model raises.

    Parameters
    ----------
    model:
        Any ``BaseChatModel`` supporting ``with_structured_output``.
    prompt:
        Optional custom ``ChatPromptTemplate`` with ``turn_count`` and
        ``revealed_count`` variables.
    fallback:
        Generator used on model errors.
    """

    def __init__(
        self,
        model: BaseChatModel,
        prompt: ChatPromptTemplate | None = None,
        fallback: ReplyGenerator | None = None,
    ) -> None:
        self.model = model
        self._prompt = prompt or _REPLY_PROMPT
        self._fallback = fallback or TemplateReplyGenerator()
        self._chain = self._build_chain()

    def _build_chain(self) -> Any:
        structured_model = self.model.with_structured_output(ReplyOutput)
        return self._prompt | structured_model

    def __call__(self, turn_count: int, revealed_count: int) -> str:
        try:
            result: ReplyOutput = self._chain.invoke(
                {"turn_count": turn_count, "revealed_count": revealed_count}
            )
            return result.reply
        except Exception as exc:
            logger.warning("ChatModelReplyGenerator: reply failed: %s", exc)
            return self._fallback(turn_count, revealed_count)

    async def agenerate(self, turn_count: int, revealed_count: int) -> str:
        """Async counterpart of :meth:`__call__`, used on asyncio schedulers."""
        try:
            result: ReplyOutput = await self._chain.ainvoke(
                {"turn_count": turn_count, "revealed_count": revealed_count}
            )
            return result.reply
        except Exception as exc:
            logger.warning("ChatModelReplyGenerator: async reply failed: %s", exc)
            return self._fallback(turn_count, revealed_count)


# ===================================================================== #
#  Conversation session                                                  #
# ===================================================================== #

class ConversationSession:
    """Append-only transcript with simulated reply latency.

    Parameters
    ----------
    scheduler:
        Source of cancellable timers.
    reply_generator:
        ``(turn_count, revealed_count) -> str``.  ``turn_count`` is the
        transcript length when the reply is produced.
    revealed_count:
        Returns the number of revealed records; read at submission time.
    config:
        Supplies ``reply_delay_ms``.
    event_bus:
        Optional bus for ``TurnAppended`` events.
    source_id:
        Stamped on published events.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        reply_generator: ReplyGenerator | None = None,
        revealed_count: Callable[[], int] | None = None,
        config: WorkflowConfig | None = None,
        event_bus: EventBus | None = None,
        source_id: str = "",
    ) -> None:
        self._scheduler = scheduler
        self._reply_generator = reply_generator or TemplateReplyGenerator()
        self._revealed_count = revealed_count or (lambda: 0)
        self._config = config or WorkflowConfig()
        self._event_bus = event_bus
        self._source_id = source_id
        self._turns: list[Turn] = []
        self._pending: dict[str, TimerHandle] = {}

    # -- commands -----------------------------------------------------------

    def submit(self, text: str) -> Turn | None:
        """Append a user turn and schedule its reply.

        Blank or whitespace-only *text* is ignored and returns ``None``.
        """
        if not text.strip():
            return None

        turn = Turn(author=TurnAuthor.USER, content=text)
        self._append(turn)

        revealed = self._revealed_count()
        self._pending[turn.turn_id] = self._scheduler.call_later(
            self._config.reply_delay_ms,
            lambda: self._reply(turn.turn_id, revealed),
        )
        return turn

    def cancel(self) -> None:
        """Revoke every pending reply and clear the transcript."""
        for timer in self._pending.values():
            timer.cancel()
        if self._pending:
            logger.debug("Cancelled %d pending replies", len(self._pending))
        self._pending.clear()
        self._turns.clear()

    # -- queries ------------------------------------------------------------

    @property
    def transcript(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def pending_replies(self) -> int:
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._turns)

    # -- internals ----------------------------------------------------------

    def _reply(self, user_turn_id: str, revealed: int) -> None:
        self._pending.pop(user_turn_id, None)
        turn_count = len(self._turns)
        agenerate = getattr(self._reply_generator, "agenerate", None)
        if agenerate is not None and self._scheduler.supports_tasks:
            # The reply stays pending (and cancellable) until the task finishes.
            self._pending[user_turn_id] = self._scheduler.create_task(
                agenerate(turn_count, revealed),
                lambda content: self._complete(user_turn_id, content),
            )
            return
        self._complete(user_turn_id, self._reply_generator(turn_count, revealed))

    def _complete(self, user_turn_id: str, content: str) -> None:
        self._pending.pop(user_turn_id, None)
        self._append(Turn(author=TurnAuthor.SYSTEM, content=content))

    def _append(self, turn: Turn) -> None:
        self._turns.append(turn)
        if self._event_bus is not None:
            self._event_bus.publish(TurnAppended(source_id=self._source_id, turn=turn))
