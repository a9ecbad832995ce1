from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List

import pytest

from quiz_trainer.core.config import Settings
from quiz_trainer.core.errors import MissingInputError, UpstreamError
from quiz_trainer.models.generation import GenerationConfig
from quiz_trainer.services.llm_client import LLMAPIError
from quiz_trainer.services.quiz_generator import (
    CORRECT_PLACEHOLDER_COMMENT,
    QuizGenerator,
    normalize_generated_quiz,
)
from quiz_trainer.utils.quiz_parser import InvalidJSONError, ValidationError, parse_quiz_object
from quiz_trainer.utils.quiz_prompt import MULTIPLE_ANSWER_LABEL


def llm_question(i: int, answers: int = 4, correct: List[int] | None = None) -> Dict[str, Any]:
    correct = [0] if correct is None else correct
    return {
        "text": f"Frage {i}",
        "type": "SingleAnswer",
        "answers": [
            {"text": f"Antwort {j}", "correct": j in correct, "comment": f"Kommentar {j}"}
            for j in range(answers)
        ],
    }


def llm_quiz(count: int, **kwargs: Any) -> Dict[str, Any]:
    return {"topic": "Generiert", "questions": [llm_question(i, **kwargs) for i in range(count)]}


class FakeCompletion:
    """Async stand-in for the LLM call that records what it was sent"""

    def __init__(self, response: str) -> None:
        self.response = response
        self.calls: List[Dict[str, str]] = []

    async def __call__(self, prompt: str, system: str) -> str:
        self.calls.append({"prompt": prompt, "system": system})
        return self.response


def generate(settings: Settings, response: str, config: GenerationConfig, text: str = "Quelltext"):
    fake = FakeCompletion(response)
    generator = QuizGenerator(settings, completion=fake)
    return asyncio.run(generator.generate(text, config)), fake


def test_truncates_questions_to_question_count(settings: Settings) -> None:
    quiz, fake = generate(settings, json.dumps(llm_quiz(12)), GenerationConfig(questionCount=10))
    assert len(quiz.questions) == 10
    assert quiz.poolConfig is None
    assert "Quelltext" in fake.calls[0]["prompt"]
    assert "JSON" in fake.calls[0]["system"]


def test_never_pads_questions(settings: Settings) -> None:
    quiz, _ = generate(settings, json.dumps(llm_quiz(3)), GenerationConfig(questionCount=5))
    assert len(quiz.questions) == 3


def test_truncates_answers_per_question(settings: Settings) -> None:
    quiz, _ = generate(
        settings,
        json.dumps(llm_quiz(2, answers=6)),
        GenerationConfig(questionCount=2, answersPerQuestion=3),
    )
    assert all(len(q.answers) == 3 for q in quiz.questions)


def test_marks_first_answer_correct_when_none_is(settings: Settings) -> None:
    quiz, _ = generate(settings, json.dumps(llm_quiz(1, correct=[])), GenerationConfig(questionCount=1))
    first = quiz.questions[0].answers[0]
    assert first.correct
    assert first.comment == CORRECT_PLACEHOLDER_COMMENT


def test_single_answer_keeps_only_first_correct(settings: Settings) -> None:
    quiz, _ = generate(settings, json.dumps(llm_quiz(1, correct=[1, 2])), GenerationConfig(questionCount=1))
    assert [a.correct for a in quiz.questions[0].answers] == [False, True, False, False]
    assert quiz.questions[0].type == "SingleAnswer"


def test_multiple_answers_forces_type_and_keeps_all_correct(settings: Settings) -> None:
    config = GenerationConfig(questionCount=1, allowMultipleAnswers=True)
    quiz, fake = generate(settings, json.dumps(llm_quiz(1, correct=[1, 2])), config)
    assert quiz.questions[0].type == "MultipleAnswer"
    assert quiz.questions[0].correct_indices() == {1, 2}
    assert MULTIPLE_ANSWER_LABEL in fake.calls[0]["prompt"]


def test_pool_size_generates_pool_and_attaches_config(settings: Settings) -> None:
    config = GenerationConfig(questionCount=5, poolSize=20)
    quiz, fake = generate(settings, json.dumps(llm_quiz(25)), config)
    assert len(quiz.questions) == 20
    assert quiz.poolConfig.poolSize == 20
    assert quiz.poolConfig.questionsPerGame == 5
    assert "20" in fake.calls[0]["prompt"]


def test_accepts_markdown_fenced_german_response(settings: Settings) -> None:
    german = {
        "Thema": "Altformat",
        "Fragen": [{
            "Frage": "Wie viel ist 2 + 2?",
            "Typ": "SingleAnswer",
            "Antworten": [
                {"Antwort": "4", "Richtig": True, "Kommentar": "Ja."},
                {"Antwort": "5", "Richtig": False, "Kommentar": "Nein."},
            ],
        }],
    }
    response = "```json\n" + json.dumps(german) + "\n```"
    quiz, _ = generate(settings, response, GenerationConfig(questionCount=1))
    assert quiz.topic == "Altformat"
    assert quiz.questions[0].answers[0].text == "4"


def test_missing_content_is_rejected(settings: Settings) -> None:
    fake = FakeCompletion("{}")
    generator = QuizGenerator(settings, completion=fake)
    with pytest.raises(MissingInputError):
        asyncio.run(generator.generate("   ", GenerationConfig()))
    assert fake.calls == []


@pytest.mark.parametrize("response", [
    "Tut mir leid, das kann ich nicht.",
    json.dumps({"questions": []}),
    json.dumps({"topic": "x", "questions": "keine"}),
])
def test_unusable_responses_raise_upstream_error(settings: Settings, response: str) -> None:
    with pytest.raises(UpstreamError):
        generate(settings, response, GenerationConfig())


def test_failed_llm_call_raises_upstream_error(settings: Settings) -> None:
    async def failing(prompt: str, system: str) -> str:
        raise LLMAPIError("boom")

    generator = QuizGenerator(settings, completion=failing)
    with pytest.raises(UpstreamError):
        asyncio.run(generator.generate("Text", GenerationConfig()))


def test_parse_quiz_object_errors() -> None:
    with pytest.raises(InvalidJSONError):
        parse_quiz_object("")
    with pytest.raises(ValidationError):
        parse_quiz_object("[1, 2, 3]")
    with pytest.raises(ValidationError):
        parse_quiz_object(json.dumps({"topic": "x", "questions": [{"text": "q", "answers": "a"}]}))


def test_parse_quiz_object_fixes_trailing_commas() -> None:
    data = parse_quiz_object('Hier ist das Quiz: {"topic": "T", "questions": [],}')
    assert data == {"topic": "T", "questions": []}


def test_normalize_clamps_questions_per_game_when_under_generated() -> None:
    data = llm_quiz(3)
    normalized = normalize_generated_quiz(data, GenerationConfig(questionCount=5, poolSize=10))
    assert normalized["poolConfig"] == {"poolSize": 10, "questionsPerGame": 3}
