from __future__ import annotations


class TrainerError(RuntimeError):
    pass


class CompletionError(TrainerError):
    """The completion call failed; the trainee may resubmit."""


class SelectionError(TrainerError):
    """Difficulty/product were not chosen before a conversation step."""
