from __future__ import annotations

import json
import logging
import math
import re
from collections import Counter, defaultdict
from typing import Any, Protocol
from uuid import uuid4

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from slide_studio.models import Quiz, QuizResponseRecord
from slide_studio.presentation.settings import QuizSettings
from slide_studio.providers.base import BaseLLMProvider, ProviderError
from slide_studio.schemas import QuestionBreakdown, QuizQuestion, QuizResponse, QuizResults
from slide_studio.services.prompt_templates import build_quiz_prompts


logger = logging.getLogger("slide_studio.quiz")

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


def truncate_content(content: str, max_length: int = 50) -> str:
    if len(content) <= max_length:
        return content
    return content[:max_length] + "..."


def enabled_types(settings: QuizSettings) -> list[str]:
    types = settings.question_types
    return [name for name in ("multiple", "truefalse", "short") if getattr(types, name)]


class QuestionGenerator(Protocol):
    name: str

    def generate(self, content: str, settings: QuizSettings) -> list[QuizQuestion]:
        ...


class TemplateQuestionGenerator:
    """Fills fixed question templates with a snippet of the slide content."""

    name = "template"

    def generate(self, content: str, settings: QuizSettings, stamp: str | None = None) -> list[QuizQuestion]:
        stamp = stamp or uuid4().hex[:8]
        snippet = truncate_content(content)
        per_type = math.ceil(settings.question_count / 3)
        questions: list[QuizQuestion] = []

        if settings.question_types.multiple:
            options = [
                "First option based on the content",
                "Second option based on the content",
                "Third option based on the content",
                "Fourth option based on the content",
            ]
            for i in range(per_type):
                questions.append(
                    QuizQuestion(
                        id=f"mc-{stamp}-{i}",
                        type="multiple",
                        question=f'Multiple-choice question based on the content: "{snippet}"',
                        options=options,
                        correct_answer=options[0],
                    )
                )

        if settings.question_types.truefalse:
            for i in range(per_type):
                questions.append(
                    QuizQuestion(
                        id=f"tf-{stamp}-{i}",
                        type="truefalse",
                        question=f'Statement based on the content: "{snippet}". Is this statement correct?',
                        correct_answer=True,
                    )
                )

        if settings.question_types.short:
            for i in range(per_type):
                questions.append(
                    QuizQuestion(
                        id=f"sa-{stamp}-{i}",
                        type="short",
                        question=f'Briefly explain the following concept from the content: "{snippet}"',
                    )
                )

        return questions[: settings.question_count]


class ModelQuestionGenerator:
    """Asks the language model for questions, falling back to templates."""

    name = "model"

    def __init__(self, provider: BaseLLMProvider, fallback: QuestionGenerator | None = None):
        self.provider = provider
        self.fallback = fallback or TemplateQuestionGenerator()

    @staticmethod
    def _parse(text: str, allowed: list[str], count: int) -> list[QuizQuestion]:
        payload = json.loads(_CODE_FENCE.sub("", text.strip()))
        rows = payload.get("questions", []) if isinstance(payload, dict) else payload
        if not isinstance(rows, list):
            rows = []
        stamp = uuid4().hex[:8]
        parsed: list[QuizQuestion] = []
        for idx, row in enumerate(rows):
            if not isinstance(row, dict) or row.get("type") not in allowed:
                continue
            try:
                parsed.append(QuizQuestion.model_validate({**row, "id": f"q-{stamp}-{idx}"}))
            except ValidationError:
                continue
            if len(parsed) >= count:
                break
        return parsed

    def generate(self, content: str, settings: QuizSettings) -> list[QuizQuestion]:
        allowed = enabled_types(settings)
        system, user = build_quiz_prompts(
            content=content,
            question_types=allowed,
            question_count=settings.question_count,
        )
        try:
            result = self.provider.generate_text(system_prompt=system, user_prompt=user, max_tokens=1500)
            parsed = self._parse(result.text, allowed, settings.question_count)
            if parsed:
                return parsed
            logger.warning("quiz_model_payload_empty provider=%s", self.provider.name)
        except (ProviderError, ValueError, AttributeError) as exc:
            logger.warning("quiz_model_generation_failed provider=%s reason=%s", self.provider.name, exc)
        return self.fallback.generate(content, settings)


def _as_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in {"true", "yes", "1"}:
        return True
    if lowered in {"false", "no", "0"}:
        return False
    return None


def grade_response(question: QuizQuestion, response: str | bool) -> bool | None:
    if question.type == "short" or question.correct_answer is None:
        return None
    if question.type == "truefalse":
        given = _as_bool(response)
        return None if given is None else given == _as_bool(question.correct_answer)
    return str(response).strip() == str(question.correct_answer).strip()


def load_questions(row: Quiz) -> list[QuizQuestion]:
    return [QuizQuestion.model_validate(item) for item in json.loads(row.questions_json)]


def create_quiz(
    db: Session,
    *,
    content: str,
    settings: QuizSettings,
    generator: QuestionGenerator,
) -> tuple[Quiz, list[QuizQuestion]]:
    questions = generator.generate(content, settings)
    row = Quiz(
        id=str(uuid4()),
        content_preview=truncate_content(content, 200),
        questions_json=json.dumps([q.model_dump(mode="json", by_alias=True) for q in questions]),
        settings_json=settings.model_dump_json(by_alias=True),
        generator=generator.name,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("quiz_created quiz_id=%s generator=%s questions=%d", row.id, generator.name, len(questions))
    return row, questions


def record_responses(db: Session, quiz: Quiz, responses: list[QuizResponse]) -> list[QuizResponse]:
    questions = {q.id: q for q in load_questions(quiz)}
    unknown = sorted({r.question_id for r in responses if r.question_id not in questions})
    if unknown:
        raise ValueError(f"Unknown question ids for quiz {quiz.id}: {unknown}")

    submission_id = str(uuid4())
    graded: list[QuizResponse] = []
    for response in responses:
        question = questions[response.question_id]
        is_correct = grade_response(question, response.response)
        graded.append(response.model_copy(update={"is_correct": is_correct}))
        db.add(
            QuizResponseRecord(
                quiz_id=quiz.id,
                submission_id=submission_id,
                question_id=response.question_id,
                response_json=json.dumps(response.response),
                is_correct=None if is_correct is None else int(is_correct),
            )
        )
    db.commit()
    logger.info("quiz_responses_recorded quiz_id=%s count=%d", quiz.id, len(graded))
    return graded


def _distribution_key(response_json: str) -> str:
    value = json.loads(response_json)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _rate(values: list[int]) -> float | None:
    if not values:
        return None
    return round(sum(values) / len(values), 4)


def aggregate_results(db: Session, quiz: Quiz) -> QuizResults:
    rows = db.scalars(
        select(QuizResponseRecord)
        .where(QuizResponseRecord.quiz_id == quiz.id)
        .order_by(QuizResponseRecord.id.asc())
    ).all()

    graded_all: list[int] = []
    per_question_graded: dict[str, list[int]] = defaultdict(list)
    per_question_answers: dict[str, Counter] = defaultdict(Counter)
    for row in rows:
        per_question_answers[row.question_id][_distribution_key(row.response_json)] += 1
        if row.is_correct is not None:
            graded_all.append(row.is_correct)
            per_question_graded[row.question_id].append(row.is_correct)

    breakdown: list[QuestionBreakdown] = []
    for question in load_questions(quiz):
        answers = per_question_answers.get(question.id, Counter())
        total = sum(answers.values())
        breakdown.append(
            QuestionBreakdown(
                question_id=question.id,
                correct_rate=_rate(per_question_graded.get(question.id, [])),
                response_distribution={key: round(count / total, 4) for key, count in answers.items()},
            )
        )

    return QuizResults(
        quiz_id=quiz.id,
        total_responses=len({row.submission_id for row in rows}),
        correct_rate=_rate(graded_all),
        question_breakdown=breakdown,
    )


def get_question_generator(name: str, provider: BaseLLMProvider | None = None) -> QuestionGenerator:
    if name == "model" and provider is not None:
        return ModelQuestionGenerator(provider)
    return TemplateQuestionGenerator()
