import json

import pytest

from slide_studio.db import SessionLocal
from slide_studio.presentation.settings import QuizSettings
from slide_studio.providers.base import BaseLLMProvider, GenerationResult, ProviderError
from slide_studio.schemas import QuizQuestion, QuizResponse
from slide_studio.services.quiz_service import (
    ModelQuestionGenerator,
    TemplateQuestionGenerator,
    aggregate_results,
    create_quiz,
    grade_response,
    record_responses,
    truncate_content,
)


CONTENT = "Photosynthesis turns light, water and carbon dioxide into glucose and oxygen."


class CannedProvider(BaseLLMProvider):
    name = "canned"

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error

    def generate_text(self, *, system_prompt, user_prompt, max_tokens=None):
        if self.error:
            raise self.error
        return GenerationResult(text=self.text)


def _types(questions):
    return [q.type for q in questions]


def test_truncate_content():
    assert truncate_content("short") == "short"
    assert truncate_content("x" * 60) == "x" * 50 + "..."


def test_default_settings_give_one_question_per_type():
    questions = TemplateQuestionGenerator().generate(CONTENT, QuizSettings(), stamp="s1")
    assert _types(questions) == ["multiple", "truefalse", "short"]
    assert [q.id for q in questions] == ["mc-s1-0", "tf-s1-0", "sa-s1-0"]
    assert questions[0].correct_answer == questions[0].options[0]
    assert questions[1].correct_answer is True
    assert questions[2].correct_answer is None


def test_counts_round_up_per_type_then_cut():
    questions = TemplateQuestionGenerator().generate(CONTENT, QuizSettings(question_count=5))
    assert _types(questions) == ["multiple", "multiple", "truefalse", "truefalse", "short"]


def test_disabled_types_are_skipped():
    settings = QuizSettings.model_validate({"questionCount": 4, "questionTypes": {"multiple": False}})
    questions = TemplateQuestionGenerator().generate(CONTENT, settings)
    assert set(_types(questions)) == {"truefalse", "short"}
    assert len(questions) == 4


def test_grading():
    mc = QuizQuestion(id="a", type="multiple", question="?", options=["x", "y"], correct_answer="x")
    tf = QuizQuestion(id="b", type="truefalse", question="?", correct_answer=True)
    sa = QuizQuestion(id="c", type="short", question="?")

    assert grade_response(mc, "x") is True
    assert grade_response(mc, "y") is False
    assert grade_response(tf, "true") is True
    assert grade_response(tf, False) is False
    assert grade_response(tf, "maybe") is None
    assert grade_response(sa, "anything") is None


def test_model_generator_parses_fenced_json():
    payload = {
        "questions": [
            {"type": "multiple", "question": "Product?", "options": ["glucose", "salt"], "correctAnswer": "glucose"},
            {"type": "truefalse", "question": "Needs light?", "correctAnswer": True},
            {"type": "essay", "question": "Not allowed"},
        ]
    }
    provider = CannedProvider(text="```json\n" + json.dumps(payload) + "\n```")
    questions = ModelQuestionGenerator(provider).generate(CONTENT, QuizSettings())

    assert _types(questions) == ["multiple", "truefalse"]
    assert questions[0].correct_answer == "glucose"
    assert questions[1].correct_answer is True


@pytest.mark.parametrize(
    "provider",
    [
        CannedProvider(text="not json at all"),
        CannedProvider(error=ProviderError("down")),
        CannedProvider(text="[]"),
        CannedProvider(text="42"),
        CannedProvider(text='{"questions": "none"}'),
    ],
)
def test_model_generator_falls_back_to_templates(provider):
    questions = ModelQuestionGenerator(provider).generate(CONTENT, QuizSettings())
    assert _types(questions) == ["multiple", "truefalse", "short"]


def test_create_record_and_aggregate(db_tables):
    db = SessionLocal()
    try:
        quiz, questions = create_quiz(db, content=CONTENT, settings=QuizSettings(), generator=TemplateQuestionGenerator())
        mc, tf, sa = questions

        graded = record_responses(
            db,
            quiz,
            [
                QuizResponse(question_id=mc.id, response=mc.options[0]),
                QuizResponse(question_id=tf.id, response=True),
                QuizResponse(question_id=sa.id, response="Plants make food"),
            ],
        )
        assert [r.is_correct for r in graded] == [True, True, None]

        record_responses(
            db,
            quiz,
            [
                QuizResponse(question_id=mc.id, response=mc.options[1]),
                QuizResponse(question_id=tf.id, response=False),
            ],
        )

        results = aggregate_results(db, quiz)
        assert results.total_responses == 2
        assert results.correct_rate == 0.5

        by_id = {row.question_id: row for row in results.question_breakdown}
        assert by_id[mc.id].correct_rate == 0.5
        assert by_id[tf.id].response_distribution == {"true": 0.5, "false": 0.5}
        assert by_id[sa.id].correct_rate is None
        assert by_id[sa.id].response_distribution == {"Plants make food": 1.0}
    finally:
        db.close()


def test_unknown_question_id_records_nothing(db_tables):
    db = SessionLocal()
    try:
        quiz, questions = create_quiz(db, content=CONTENT, settings=QuizSettings(), generator=TemplateQuestionGenerator())
        with pytest.raises(ValueError):
            record_responses(
                db,
                quiz,
                [
                    QuizResponse(question_id=questions[0].id, response="x"),
                    QuizResponse(question_id="ghost", response="y"),
                ],
            )
        assert aggregate_results(db, quiz).total_responses == 0
    finally:
        db.close()
