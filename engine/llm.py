from __future__ import annotations

import os
from pathlib import Path
from functools import lru_cache
from typing import Optional

from loguru import logger
from langchain_openai import ChatOpenAI
from dotenv import load_dotenv


# Load env from the project root first, then the working directory
here = Path(__file__).resolve().parents[1]
for env_path in (here / ".env", Path.cwd() / ".env"):
    if env_path.is_file():
        load_dotenv(dotenv_path=str(env_path), override=False)
        break


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        logger.warning(f"Invalid {name}; using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(float(os.getenv(name, str(default))))
    except (ValueError, OverflowError):
        logger.warning(f"Invalid {name}; using {default}")
        return default


@lru_cache(maxsize=8)
def get_openai_chat(model: Optional[str] = None, temperature: Optional[float] = None) -> Optional[ChatOpenAI]:
    """Return a cached LangChain ChatOpenAI client using env configuration.

    Env vars:
      - OPENAI_API_KEY (required)
      - OPENAI_MODEL (optional; default: gpt-4o-mini)
      - OPENAI_BASE_URL (optional; OpenAI-compatible gateway)
      - OPENAI_TEMPERATURE, OPENAI_MAX_TOKENS, OPENAI_TIMEOUT (optional)
    """
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        logger.error("OPENAI_API_KEY not set; cannot initialize OpenAI chat client")
        return None
    mdl = model or os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    if temperature is None:
        temperature = _env_float("OPENAI_TEMPERATURE", 1.0)
    kwargs = {
        "model": mdl,
        "temperature": temperature,
        "api_key": api_key,
        "timeout": _env_float("OPENAI_TIMEOUT", 30.0),
        # Failures surface to the trainee, who resubmits by hand
        "max_retries": 0,
    }
    max_tokens = _env_int("OPENAI_MAX_TOKENS", 300)
    if max_tokens > 0:
        kwargs["max_tokens"] = max_tokens
    base_url = os.getenv("OPENAI_BASE_URL")
    if base_url:
        kwargs["base_url"] = base_url
    logger.debug(f"Initializing OpenAI chat model={mdl} temperature={temperature}")
    return ChatOpenAI(**kwargs)
