from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional

from loguru import logger

from .errors import SelectionError
from .manager import DEFAULT_CONCLUSION_DELAY, ConversationManager
from .personas import resolve_difficulty, resolve_product
from .states import Difficulty, Product, SubmitStatus


class SelectionStep(Enum):
    DIFFICULTY = "difficulty"
    PRODUCT = "product"
    CHAT = "chat"


class TrainingSession:
    """Linear wizard: pick a difficulty, then a product, then chat.

    The conversation only exists on the CHAT step. Leaving it discards the
    conversation and cancels anything it still had scheduled.
    """

    def __init__(
        self,
        agent_factory: Callable[[], Any],
        conclusion_delay: float = DEFAULT_CONCLUSION_DELAY,
    ) -> None:
        self.agent_factory = agent_factory
        self.conclusion_delay = conclusion_delay
        self.step = SelectionStep.DIFFICULTY
        self.difficulty: Optional[Difficulty] = None
        self.product: Optional[Product] = None
        self._conversation: Optional[ConversationManager] = None

    @property
    def conversation(self) -> Optional[ConversationManager]:
        return self._conversation

    def select_difficulty(self, difficulty) -> None:
        if self.step is not SelectionStep.DIFFICULTY:
            raise SelectionError(f"cannot choose difficulty on step {self.step.value}")
        self.difficulty = resolve_difficulty(difficulty)
        self.step = SelectionStep.PRODUCT
        logger.info(f"wizard_step | step={self.step.value} | difficulty={self.difficulty.value}")

    def select_product(self, product) -> ConversationManager:
        if self.step is not SelectionStep.PRODUCT:
            raise SelectionError(f"cannot choose product on step {self.step.value}")
        self.product = resolve_product(product)
        self._conversation = ConversationManager(
            self.agent_factory(),
            self.difficulty,
            self.product,
            conclusion_delay=self.conclusion_delay,
        )
        self.step = SelectionStep.CHAT
        logger.info(f"wizard_step | step={self.step.value} | product={self.product.value}")
        return self._conversation

    def go_back(self) -> None:
        if self.step is SelectionStep.CHAT:
            self._discard_conversation()
            self.product = None
            self.step = SelectionStep.PRODUCT
        elif self.step is SelectionStep.PRODUCT:
            self.difficulty = None
            self.step = SelectionStep.DIFFICULTY
        else:
            return
        logger.info(f"wizard_step | step={self.step.value} | back")

    async def submit_user_turn(self, text: str) -> SubmitStatus:
        if self._conversation is None:
            raise SelectionError("no conversation in progress; choose difficulty and product first")
        return await self._conversation.submit_user_turn(text)

    def _discard_conversation(self) -> None:
        if self._conversation is not None:
            self._conversation.close()
            self._conversation = None
