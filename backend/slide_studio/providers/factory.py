from slide_studio.config import settings
from slide_studio.providers.anthropic_provider import AnthropicProvider
from slide_studio.providers.base import BaseLLMProvider
from slide_studio.providers.mock_provider import MockProvider
from slide_studio.providers.openai_provider import OpenAIProvider


def get_provider(name: str | None = None) -> BaseLLMProvider:
    candidate = (name or settings.default_llm_provider).lower()

    if candidate == "perplexity" and settings.perplexity_api_key:
        return OpenAIProvider(
            settings.perplexity_api_key,
            model=settings.perplexity_model,
            base_url=settings.perplexity_base_url,
            name="perplexity",
        )
    if candidate == "openai" and settings.openai_api_key:
        return OpenAIProvider(settings.openai_api_key, base_url=settings.openai_base_url)
    if candidate == "anthropic" and settings.anthropic_api_key:
        return AnthropicProvider(settings.anthropic_api_key)

    return MockProvider()
