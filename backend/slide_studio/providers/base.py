from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from slide_studio.config import settings


ChatTurn = dict[str, str]


class ProviderError(RuntimeError):
    """Raised when the remote model call fails for any reason."""


@dataclass
class GenerationResult:
    text: str
    usage: dict[str, Any] = field(default_factory=dict)
    model: str | None = None


def preview_text(text: str, limit: int | None = None) -> str:
    raw = str(text or "").replace("\r", " ").replace("\n", " ").strip()
    cap = int(limit or settings.log_preview_chars)
    if len(raw) <= cap:
        return raw
    return raw[:cap].rstrip() + " ..."


class BaseLLMProvider:
    name = "base"
    model: str | None = None

    def generate_text(self, *, system_prompt: str, user_prompt: str, max_tokens: int | None = None) -> GenerationResult:
        raise NotImplementedError

    def stream_chat(self, *, system_prompt: str, messages: list[ChatTurn]) -> Iterator[str]:
        raise NotImplementedError
