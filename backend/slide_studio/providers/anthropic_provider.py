import logging
from collections.abc import Iterator
from time import perf_counter

from anthropic import Anthropic

from slide_studio.config import settings
from slide_studio.providers.base import BaseLLMProvider, ChatTurn, GenerationResult, ProviderError, preview_text


logger = logging.getLogger("slide_studio.providers")


class AnthropicProvider(BaseLLMProvider):
    name = "anthropic"

    def __init__(self, api_key: str, *, model: str | None = None):
        self.model = model or settings.anthropic_model
        self.client = Anthropic(api_key=api_key, timeout=settings.llm_timeout_seconds)

    def generate_text(self, *, system_prompt: str, user_prompt: str, max_tokens: int | None = None) -> GenerationResult:
        started = perf_counter()
        logger.info(
            "anthropic_request_start label=generate_text model=%s input_chars=%d system_preview=%s user_preview=%s",
            self.model,
            len(system_prompt) + len(user_prompt),
            preview_text(system_prompt, 140),
            preview_text(user_prompt, 220),
        )
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens or settings.anthropic_max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except Exception as exc:
            logger.warning(
                "anthropic_request_error label=generate_text duration_sec=%.2f reason=%s",
                perf_counter() - started,
                exc,
            )
            raise ProviderError(f"anthropic request failed: {exc}") from exc

        text = "".join(block.text for block in response.content if hasattr(block, "text"))
        logger.info(
            "anthropic_request_done label=generate_text duration_sec=%.2f output_chars=%d output_preview=%s",
            perf_counter() - started,
            len(text),
            preview_text(text, 220),
        )
        usage = {}
        if response.usage is not None:
            usage = {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            }
        return GenerationResult(text=text, usage=usage, model=self.model)

    def stream_chat(self, *, system_prompt: str, messages: list[ChatTurn]) -> Iterator[str]:
        logger.info(
            "anthropic_stream_start model=%s turns=%d system_preview=%s",
            self.model,
            len(messages),
            preview_text(system_prompt, 140),
        )
        try:
            with self.client.messages.stream(
                model=self.model,
                max_tokens=settings.anthropic_max_tokens,
                system=system_prompt,
                messages=messages,
            ) as stream:
                for text in stream.text_stream:
                    if text:
                        yield text
        except Exception as exc:
            logger.warning("anthropic_stream_error reason=%s", exc)
            raise ProviderError(f"anthropic stream failed: {exc}") from exc
