from __future__ import annotations

import time
from typing import Any, Callable, List, Optional, Sequence

from loguru import logger
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from .errors import CompletionError
from .llm import get_openai_chat
from .states import Role, Turn


def build_messages(turns: Sequence[Turn], instruction_payload: str) -> List[BaseMessage]:
    """System directive first, then the history in timeline order."""
    messages: List[BaseMessage] = [SystemMessage(content=instruction_payload)]
    for turn in turns:
        if turn.is_terminal:
            continue
        if turn.role is Role.CUSTOMER:
            messages.append(AIMessage(content=turn.text))
        else:
            messages.append(HumanMessage(content=turn.text))
    return messages


class CustomerAgent:
    """Completion operation backed by a LangChain chat model.

    The model plays the customer, so its own earlier lines are replayed as
    assistant messages and the trainee's lines as user messages.
    """

    def __init__(self, llm_factory: Optional[Callable[[], Any]] = None) -> None:
        self._llm_factory = llm_factory or get_openai_chat

    async def complete(self, turns: Sequence[Turn], instruction_payload: str) -> str:
        try:
            llm = self._llm_factory()
        except Exception as e:
            logger.error(f"llm_config_failed | {type(e).__name__}: {e}")
            raise CompletionError(f"chat model could not be configured: {e}") from e
        if llm is None:
            raise CompletionError("chat model not configured; set OPENAI_API_KEY")
        messages = build_messages(turns, instruction_payload)
        t0 = time.perf_counter()
        try:
            result = await llm.ainvoke(messages)
        except Exception as e:
            logger.error(f"llm_call_failed | turns={len(turns)} | {type(e).__name__}: {e}")
            raise CompletionError(str(e)) from e
        dt = time.perf_counter() - t0
        content = getattr(result, "content", None)
        if not isinstance(content, str) or not content.strip():
            logger.error(f"llm_call_malformed | turns={len(turns)} dt={dt:.2f}s")
            raise CompletionError("empty or non-text completion")
        logger.info(f"llm_call | turns={len(turns)} dt={dt:.2f}s")
        return content
