from typing import Any, Literal

from pydantic import Field, field_validator

from slide_studio.presentation.settings import (
    CamelModel,
    NoteMarker,
    PresentationSettings,
    QuestionType,
    QuizSettings,
)
from slide_studio.services.themes import SlideTheme


PromptPreset = Literal["standard", "educational", "simplified"]


class ResearchRequest(CamelModel):
    topic: str = Field(min_length=1, max_length=500)
    documents: list[str] = Field(default_factory=list)
    slide_count: int = Field(default=10, ge=1, le=50)
    theme_id: str = "clean"
    prompt_template: str | None = None
    prompt_preset: PromptPreset = "standard"
    include_images: bool = True
    include_examples: bool = True
    simple_language: bool = False
    include_questions: bool = True
    is_educational_focus: bool = False
    include_web_sources: bool = False
    provider: str | None = None

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("topic must not be blank")
        return value.strip()


class ResearchOut(CamelModel):
    success: bool
    content: str | None = None
    usage: dict[str, Any] | None = None
    error: str | None = None


class ChatMessage(CamelModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(CamelModel):
    messages: list[ChatMessage] = Field(min_length=1)
    context: str | None = None
    provider: str | None = None


class QuizQuestion(CamelModel):
    id: str
    type: QuestionType
    question: str
    options: list[str] | None = None
    correct_answer: str | bool | None = None


class QuizResponse(CamelModel):
    question_id: str
    response: str | bool
    is_correct: bool | None = None


class QuizCreateRequest(CamelModel):
    content: str = Field(min_length=1)
    settings: QuizSettings = Field(default_factory=QuizSettings)


class QuizCreateOut(CamelModel):
    success: bool
    quiz_id: str
    questions: list[QuizQuestion]


class QuizSubmitRequest(CamelModel):
    quiz_id: str = Field(min_length=1)
    responses: list[QuizResponse]


class QuizSubmitOut(CamelModel):
    success: bool
    message: str
    responses: list[QuizResponse] = Field(default_factory=list)


class QuestionBreakdown(CamelModel):
    question_id: str
    correct_rate: float | None = None
    response_distribution: dict[str, float] = Field(default_factory=dict)


class QuizResults(CamelModel):
    quiz_id: str
    total_responses: int
    correct_rate: float | None = None
    question_breakdown: list[QuestionBreakdown] = Field(default_factory=list)


class QuizResultsOut(CamelModel):
    success: bool
    results: QuizResults


class GenerationPreferences(CamelModel):
    include_images: bool = True
    include_examples: bool = True
    simple_language: bool = False
    include_questions: bool = True
    is_educational_focus: bool = False
    prompt_template: str | None = None
    selected_prompt_type: PromptPreset = "standard"


class DocumentTextOut(CamelModel):
    filename: str
    characters: int
    text: str


class SlideOut(CamelModel):
    index: int
    title: str
    body: str


class PresentationCreateRequest(CamelModel):
    content: str
    theme_id: str | None = None
    settings: dict[str, Any] | None = None


class PresentationOut(CamelModel):
    id: str
    slide_count: int
    current_index: int
    slides: list[SlideOut]
    settings: PresentationSettings
    theme: SlideTheme


class GotoRequest(CamelModel):
    index: int


class NoteUpdateRequest(CamelModel):
    content: str = ""
    markers: list[NoteMarker] | None = None


class MarkerCreateRequest(CamelModel):
    x: float = Field(default=50, ge=0, le=100)
    y: float = Field(default=50, ge=0, le=100)
    color: str = "#ef4444"
    text: str = "Key point"
