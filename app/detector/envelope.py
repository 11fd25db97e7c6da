"""
Envelope Unwrapper
==================
Extracts the model's answer text from whatever the gateway returned.

Accepted shapes, in priority order:
    1. a plain string
    2. {"message": {"content": "..."}}                       (Ollama-style chat)
    3. {"text": "..."}
    4. {"detail": {"choices": [{"message": {"content": "..."}}]}}   (chat completion)

Each object shape is probed by a small pure function returning the text or
None; the first non-empty string wins. The input is never mutated.
"""
from collections.abc import Mapping, Sequence
from typing import Any, Callable, List, Optional

from app.detector.errors import EmptyReplyError, UnrecognizedEnvelopeError


def _get(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    return None


def _first(value: Any) -> Any:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)) and value:
        return value[0]
    return None


def _message_content(raw: Any) -> Any:
    return _get(_get(raw, "message"), "content")


def _top_level_text(raw: Any) -> Any:
    return _get(raw, "text")


def _choice_message_content(raw: Any) -> Any:
    choice = _first(_get(_get(raw, "detail"), "choices"))
    return _get(_get(choice, "message"), "content")


EXTRACTION_ATTEMPTS: List[Callable[[Any], Any]] = [
    _message_content,
    _top_level_text,
    _choice_message_content,
]


def find_reply_text(raw: Any) -> Optional[str]:
    """Return the first non-empty string any extraction attempt finds, else None."""
    if isinstance(raw, str):
        return raw
    for attempt in EXTRACTION_ATTEMPTS:
        text = attempt(raw)
        if isinstance(text, str) and text:
            return text
    return None


def unwrap_reply(raw: Any) -> str:
    """
    Produce the text to treat as the model's answer.

    Raises
    ------
    EmptyReplyError
        Nothing came back, or the extracted text is blank.
    UnrecognizedEnvelopeError
        An object came back that matches none of the known shapes.
    """
    if raw is None:
        raise EmptyReplyError("Gateway returned no reply")

    text = find_reply_text(raw)
    if text is None:
        raise UnrecognizedEnvelopeError(
            f"Unexpected response format ({type(raw).__name__})"
        )
    if not text.strip():
        raise EmptyReplyError("Bug detector received empty response")
    return text
