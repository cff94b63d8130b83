from __future__ import annotations

import asyncio
from typing import Any, Callable, List

from loguru import logger

from .errors import CompletionError, SelectionError
from .markers import parse_reply
from .personas import greeting, resolve_difficulty, resolve_product
from .prompts import compose
from .states import (
    ConversationOutcome,
    ConversationPhase,
    ConversationSnapshot,
    Role,
    SubmitStatus,
    Turn,
)


DEFAULT_CONCLUSION_DELAY = 0.5

NOTICE_SEND_FAILED = "Não foi possível enviar a mensagem. Tente novamente."

OUTCOME_MESSAGES = {
    ConversationOutcome.SOLD: "🎉 Venda fechada! O cliente aceitou a sua proposta.",
    ConversationOutcome.LOST: "Venda perdida. O cliente desistiu da negociação.",
}


class ConversationManager:
    """Single-writer state container for one training conversation.

    Only ``submit_user_turn`` moves the machine: ACTIVE stays ACTIVE on a plain
    reply, or goes CONCLUDING -> CONCLUDED when the reply carries a marker.
    At most one completion request is outstanding at any time.
    """

    def __init__(
        self,
        agent: Any,
        difficulty: Any,
        product: Any,
        conclusion_delay: float = DEFAULT_CONCLUSION_DELAY,
    ) -> None:
        if difficulty is None or product is None:
            raise SelectionError("difficulty and product must be chosen before the conversation starts")
        self.agent = agent
        self.difficulty = resolve_difficulty(difficulty)
        self.product = resolve_product(product)
        self.conclusion_delay = max(0.0, float(conclusion_delay))
        self.turns: List[Turn] = [Turn(Role.CUSTOMER, greeting(self.difficulty, self.product))]
        self.phase = ConversationPhase.ACTIVE
        self.outcome: ConversationOutcome | None = None
        self._in_flight = False
        self._closed = False
        self._pending: asyncio.Task | None = None
        self._subscribers: List[Callable[[ConversationSnapshot], None]] = []
        self._notice_subscribers: List[Callable[[str], None]] = []
        logger.info(f"trainer_chat_start | difficulty={self.difficulty.value} | product={self.product.value}")

    @property
    def busy(self) -> bool:
        return self._in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> ConversationSnapshot:
        return ConversationSnapshot(
            difficulty=self.difficulty,
            product=self.product,
            turns=tuple(self.turns),
            phase=self.phase,
            outcome=self.outcome,
            busy=self._in_flight,
        )

    def subscribe(self, callback: Callable[[ConversationSnapshot], None]) -> Callable[[], None]:
        self._subscribers.append(callback)
        return lambda: self._unsubscribe(self._subscribers, callback)

    def subscribe_notices(self, callback: Callable[[str], None]) -> Callable[[], None]:
        self._notice_subscribers.append(callback)
        return lambda: self._unsubscribe(self._notice_subscribers, callback)

    @staticmethod
    def _unsubscribe(registry: list, callback: Callable) -> None:
        if callback in registry:
            registry.remove(callback)

    async def submit_user_turn(self, text: str) -> SubmitStatus:
        if self._closed or self.phase is not ConversationPhase.ACTIVE:
            logger.debug(f"trainer_submit_ignored | phase={self.phase.value} closed={self._closed}")
            return SubmitStatus.IGNORED
        if self._in_flight:
            logger.debug("trainer_submit_ignored | request already in flight")
            return SubmitStatus.IGNORED
        if not text or not text.strip():
            return SubmitStatus.IGNORED

        self._in_flight = True
        try:
            self._append(Turn(Role.SALESPERSON, text))
            payload = compose(self.difficulty, self.product, self.turns)
            raw = await self.agent.complete(tuple(self.turns), payload)
        except CompletionError as e:
            self._in_flight = False
            if not self._closed:
                logger.warning(f"trainer_reply_failed | turns={len(self.turns)} | {e}")
                self._publish()
                self._notify(NOTICE_SEND_FAILED)
            return SubmitStatus.FAILED
        finally:
            self._in_flight = False

        if self._closed:
            logger.debug("trainer_reply_dropped | conversation discarded while waiting")
            return SubmitStatus.IGNORED

        parsed = parse_reply(raw)
        if parsed.outcome is None:
            self._append(Turn(Role.CUSTOMER, raw))
            return SubmitStatus.REPLIED

        if parsed.text:
            self.turns.append(Turn(Role.CUSTOMER, parsed.text))
            self._log_turn(Role.CUSTOMER, parsed.text)
        self.phase = ConversationPhase.CONCLUDING
        logger.info(f"trainer_chat_concluding | outcome={parsed.outcome.value} | delay={self.conclusion_delay:.2f}s")
        self._publish()
        self._pending = asyncio.get_running_loop().create_task(self._finish(parsed.outcome))
        return SubmitStatus.CONCLUDING

    async def settle(self) -> None:
        """Wait for a scheduled conclusion, if one is pending."""
        task = self._pending
        if task is None or task.done():
            return
        await asyncio.wait({task})

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._subscribers.clear()
        self._notice_subscribers.clear()
        logger.info(f"trainer_chat_closed | phase={self.phase.value} | turns={len(self.turns)}")

    async def _finish(self, outcome: ConversationOutcome) -> None:
        await asyncio.sleep(self.conclusion_delay)
        if self._closed:
            return
        self._conclude(outcome)

    def _conclude(self, outcome: ConversationOutcome) -> None:
        if self.outcome is not None:
            raise RuntimeError(f"conversation already concluded as {self.outcome.value}")
        self.turns.append(Turn(Role.CUSTOMER, OUTCOME_MESSAGES[outcome], outcome=outcome))
        self.outcome = outcome
        self.phase = ConversationPhase.CONCLUDED
        salesperson_turns = sum(1 for t in self.turns if t.role is Role.SALESPERSON)
        logger.info(
            f"trainer_chat_end | outcome={outcome.value} | difficulty={self.difficulty.value} | "
            f"product={self.product.value} | salesperson_turns={salesperson_turns}"
        )
        self._publish()

    def _append(self, turn: Turn) -> None:
        self.turns.append(turn)
        self._log_turn(turn.role, turn.text)
        self._publish()

    def _publish(self) -> None:
        snap = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snap)
            except Exception:
                logger.exception("trainer_subscriber_failed")

    def _notify(self, notice: str) -> None:
        for callback in list(self._notice_subscribers):
            try:
                callback(notice)
            except Exception:
                logger.exception("trainer_notice_subscriber_failed")

    def _log_turn(self, role: Role, text: str) -> None:
        raw = text or ""
        snippet = raw if len(raw) <= 400 else raw[:400] + '...'
        one_line = ' '.join(snippet.split())
        logger.info(
            f"trainer_chat_turn | spk={role.value} ph={self.phase.value} t={len(self.turns)} | msg='{one_line}'"
        )
