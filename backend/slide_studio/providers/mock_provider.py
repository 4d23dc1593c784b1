from collections.abc import Iterator

from slide_studio.providers.base import BaseLLMProvider, ChatTurn, GenerationResult


class MockProvider(BaseLLMProvider):
    """Offline provider used when no API key is configured."""

    name = "mock"
    model = "mock"

    def generate_text(self, *, system_prompt: str, user_prompt: str, max_tokens: int | None = None) -> GenerationResult:
        first_line = next((line.strip() for line in user_prompt.splitlines() if line.strip()), "Untitled")
        topic = first_line.split(":", 1)[-1].strip() or "Untitled"
        text = "\n".join(
            [
                f"# {topic}",
                "An overview prepared offline.",
                "## Introduction",
                f"- Why {topic} matters",
                "- What this presentation covers",
                "## Key ideas",
                "- Core concept one",
                "- Core concept two",
                "## Conclusion",
                "- Summary and next steps",
            ]
        )
        return GenerationResult(
            text=text,
            usage={"prompt_tokens": len(user_prompt.split()), "completion_tokens": len(text.split())},
            model=self.model,
        )

    def stream_chat(self, *, system_prompt: str, messages: list[ChatTurn]) -> Iterator[str]:
        last_user = next((row.get("content", "") for row in reversed(messages) if row.get("role") == "user"), "")
        reply = f"Suggestion for your slides: {last_user.strip() or 'tell me what to refine'}."
        for word in reply.split(" "):
            yield word + " "
