"""Chat-completion proxy for the parenting assistant."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from openai import APIError, OpenAI

from .config import CONFIG

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful, empathetic parenting assistant with expertise in child development, "
    "psychology, and family wellness. Provide practical, evidence-based advice while being warm "
    "and supportive. Keep responses concise but informative. Always encourage professional "
    "consultation for serious medical or psychological concerns."
)
EMPTY_COMPLETION_REPLY = "I'm sorry, I couldn't generate a response."
ALLOWED_HISTORY_ROLES = {"user", "assistant", "system"}


class ProxyError(Exception):
    """Structured proxy failure; ``use_fallback`` tells callers to answer locally."""

    def __init__(self, message: str, *, status_code: int, use_fallback: bool = True) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.use_fallback = use_fallback

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.use_fallback:
            payload["useFallback"] = True
        return payload


@lru_cache(maxsize=4)
def _client(api_key: str, base_url: str) -> OpenAI:
    return OpenAI(api_key=api_key, base_url=base_url)


def get_client() -> Optional[OpenAI]:
    if not CONFIG.has_llm_credentials:
        return None
    return _client(CONFIG.llm_api_key, CONFIG.llm_base_url)


def normalize_history(
    conversation_history: Optional[List[Dict[str, Any]]],
) -> List[Dict[str, str]]:
    if not conversation_history:
        return []
    normalized: List[Dict[str, str]] = []
    for turn in conversation_history:
        if not isinstance(turn, dict):
            continue
        role = turn.get("role")
        content = turn.get("content")
        if role not in ALLOWED_HISTORY_ROLES:
            continue
        if not isinstance(content, str):
            continue
        normalized.append({"role": role, "content": content})
    return normalized


def build_messages(
    message: str,
    conversation_history: Optional[List[Dict[str, Any]]] = None,
) -> List[Dict[str, str]]:
    """System prompt first, then prior turns, then the new user message."""

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        *normalize_history(conversation_history),
        {"role": "user", "content": message},
    ]


def _completion_text(response: Any) -> str:
    try:
        raw_content = response.choices[0].message.content or ""
    except (AttributeError, IndexError, KeyError, TypeError):
        logger.warning("Unexpected chat completion format, using empty reply")
        return EMPTY_COMPLETION_REPLY

    if isinstance(raw_content, str):
        content = raw_content
    else:
        chunks = []
        for part in raw_content:
            text = getattr(part, "text", None)
            if text is None and isinstance(part, dict):
                text = part.get("text")
            if text:
                chunks.append(text)
        content = "".join(chunks)
    return content or EMPTY_COMPLETION_REPLY


def forward_chat(
    message: Optional[str],
    conversation_history: Optional[List[Dict[str, Any]]] = None,
) -> str:
    if not message or not message.strip():
        raise ProxyError("Message is required", status_code=400, use_fallback=False)

    client = get_client()
    if client is None:
        logger.warning("chat proxy called without an upstream API key")
        raise ProxyError("Groq API key not configured", status_code=503)

    messages = build_messages(message, conversation_history)
    try:
        response = client.chat.completions.create(
            model=CONFIG.llm_model,
            messages=messages,
            temperature=CONFIG.llm_temperature,
            max_tokens=CONFIG.llm_max_tokens,
        )
    except APIError as exc:
        logger.exception("Chat completion API failed", exc_info=exc)
        raise ProxyError("Failed to get AI response", status_code=500) from exc
    except Exception as exc:
        logger.exception("Chat proxy failed unexpectedly", exc_info=exc)
        raise ProxyError("Internal server error", status_code=500) from exc

    logger.info(
        "chat proxy completed",
        extra={"model": CONFIG.llm_model, "history_turns": len(messages) - 2},
    )
    return _completion_text(response)
