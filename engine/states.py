from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Role(Enum):
    CUSTOMER = "customer"
    SALESPERSON = "salesperson"


class Difficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Product(Enum):
    CHECKING_ACCOUNT = "conta"
    CREDIT_CARD = "cartao"
    INVESTMENTS = "investimentos"
    LOAN = "emprestimo"
    CAPITALIZATION_BOND = "capitalizacao"
    INSURANCE = "seguro"


class ConversationPhase(Enum):
    ACTIVE = "active"
    CONCLUDING = "concluding"
    CONCLUDED = "concluded"


class ConversationOutcome(Enum):
    SOLD = "sold"
    LOST = "lost"


class SubmitStatus(Enum):
    IGNORED = "ignored"
    REPLIED = "replied"
    CONCLUDING = "concluding"
    FAILED = "failed"


@dataclass(frozen=True)
class Turn:
    role: Role
    text: str
    # Set only on the synthetic turn that closes the conversation.
    outcome: ConversationOutcome | None = None

    @property
    def is_terminal(self) -> bool:
        return self.outcome is not None


@dataclass(frozen=True)
class ConversationSnapshot:
    """Read-only view handed to the presentation layer."""

    difficulty: Difficulty
    product: Product
    turns: Tuple[Turn, ...]
    phase: ConversationPhase
    outcome: ConversationOutcome | None
    busy: bool = False
