from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from quiz_trainer.core.config import Settings, get_settings
from quiz_trainer.models.quiz import QuizDocument
from quiz_trainer.services.quiz_store import QuizStore


def make_quiz_dict(question_count: int = 3, pool: Dict[str, int] | None = None) -> Dict[str, Any]:
    """Quiz with one SingleAnswer question per index and one MultipleAnswer at the end"""
    questions = []
    for i in range(question_count - 1):
        questions.append({
            "text": f"Frage {i}",
            "type": "SingleAnswer",
            "answers": [
                {"text": f"richtig {i}", "correct": True, "comment": "Genau."},
                {"text": f"falsch {i}a", "correct": False, "comment": "Leider nein."},
                {"text": f"falsch {i}b", "correct": False, "comment": "Auch nicht."},
            ],
        })
    questions.append({
        "text": "Welche sind Primzahlen?",
        "type": "MultipleAnswer",
        "answers": [
            {"text": "2", "correct": True, "comment": "Kleinste Primzahl."},
            {"text": "4", "correct": False, "comment": "4 = 2 * 2."},
            {"text": "5", "correct": True, "comment": "Ja."},
        ],
    })
    data: Dict[str, Any] = {"topic": "Testquiz", "questions": questions}
    if pool:
        data["poolConfig"] = pool
    return data


@pytest.fixture
def quiz_dict() -> Dict[str, Any]:
    return make_quiz_dict()


@pytest.fixture
def quiz_doc(quiz_dict: Dict[str, Any]) -> QuizDocument:
    return QuizDocument.model_validate(quiz_dict)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=str(tmp_path / "data"), openai_api_key=None)


@pytest.fixture
def quiz_store(settings: Settings) -> QuizStore:
    return QuizStore(settings.quizzes_path)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    from quiz_trainer.main import app

    app.dependency_overrides[get_settings] = lambda: settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
