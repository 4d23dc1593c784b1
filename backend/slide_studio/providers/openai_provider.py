import logging
from collections.abc import Iterator
from time import perf_counter
from typing import Any

from openai import OpenAI

from slide_studio.config import settings
from slide_studio.providers.base import BaseLLMProvider, ChatTurn, GenerationResult, ProviderError, preview_text


logger = logging.getLogger("slide_studio.providers")


def _usage_dict(usage: Any) -> dict[str, Any]:
    if usage is None:
        return {}
    if hasattr(usage, "model_dump"):
        return {k: v for k, v in usage.model_dump().items() if isinstance(v, (int, float))}
    return dict(usage) if isinstance(usage, dict) else {}


class OpenAIProvider(BaseLLMProvider):
    """Chat-completions client for OpenAI and OpenAI-compatible endpoints such as Perplexity."""

    name = "openai"

    def __init__(self, api_key: str, *, model: str | None = None, base_url: str | None = None, name: str | None = None):
        self.model = model or settings.openai_model
        if name:
            self.name = name
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=settings.llm_timeout_seconds)

    def generate_text(self, *, system_prompt: str, user_prompt: str, max_tokens: int | None = None) -> GenerationResult:
        started = perf_counter()
        logger.info(
            "%s_request_start label=generate_text model=%s input_chars=%d system_preview=%s user_preview=%s",
            self.name,
            self.model,
            len(system_prompt) + len(user_prompt),
            preview_text(system_prompt, 140),
            preview_text(user_prompt, 220),
        )
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        try:
            response = self.client.chat.completions.create(**kwargs)
        except Exception as exc:
            logger.warning(
                "%s_request_error label=generate_text duration_sec=%.2f reason=%s",
                self.name,
                perf_counter() - started,
                exc,
            )
            raise ProviderError(f"{self.name} request failed: {exc}") from exc

        if not response.choices:
            raise ProviderError(f"{self.name} returned no choices")
        text = response.choices[0].message.content or ""
        logger.info(
            "%s_request_done label=generate_text duration_sec=%.2f output_chars=%d output_preview=%s",
            self.name,
            perf_counter() - started,
            len(text),
            preview_text(text, 220),
        )
        return GenerationResult(text=text, usage=_usage_dict(response.usage), model=self.model)

    def stream_chat(self, *, system_prompt: str, messages: list[ChatTurn]) -> Iterator[str]:
        logger.info(
            "%s_stream_start model=%s turns=%d system_preview=%s",
            self.name,
            self.model,
            len(messages),
            preview_text(system_prompt, 140),
        )
        try:
            stream = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "system", "content": system_prompt}, *messages],
                stream=True,
            )
            for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        except Exception as exc:
            logger.warning("%s_stream_error reason=%s", self.name, exc)
            raise ProviderError(f"{self.name} stream failed: {exc}") from exc
