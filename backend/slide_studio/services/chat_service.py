from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator

from slide_studio.providers.base import BaseLLMProvider, ChatTurn
from slide_studio.schemas import ChatMessage
from slide_studio.services.prompt_templates import build_chat_system_prompt


logger = logging.getLogger("slide_studio.chat")


def _split_turns(messages: list[ChatMessage]) -> tuple[list[str], list[ChatTurn]]:
    extra_system: list[str] = []
    turns: list[ChatTurn] = []
    for row in messages:
        if row.role == "system":
            extra_system.append(row.content)
        else:
            turns.append({"role": row.role, "content": row.content})
    return extra_system, turns


def open_chat_stream(
    provider: BaseLLMProvider,
    messages: list[ChatMessage],
    context: str | None = None,
) -> Iterator[str]:
    """Start a streamed reply and return an iterator over its text chunks.

    The first chunk is pulled before returning, so a remote failure raises
    ``ProviderError`` here instead of surfacing halfway through a response.
    Each call produces an independent stream; dropping the iterator stops it.
    """
    extra_system, turns = _split_turns(messages)
    system = build_chat_system_prompt(context)
    if extra_system:
        system = "\n\n".join([system, *extra_system])

    stream = iter(provider.stream_chat(system_prompt=system, messages=turns))
    try:
        first = next(stream)
    except StopIteration:
        logger.info("chat_stream_empty provider=%s turns=%d", provider.name, len(turns))
        return iter(())
    return itertools.chain([first], stream)
