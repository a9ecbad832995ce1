from __future__ import annotations

import json
from pathlib import Path

import pytest

from quiz_trainer.core.errors import InvalidFormatError, InvalidInputError, NotFoundError
from quiz_trainer.models.quiz import QuizDocument, QuizLocation
from quiz_trainer.services.quiz_store import QuizStore, slugify_filename, validate_segment


def test_slugify_filename_rules() -> None:
    assert slugify_filename("Algebra") == "algebra.json"
    assert slugify_filename("  Lineare   Gleichungen!! ") == "lineare-gleichungen.json"
    assert slugify_filename("Größe & Maße") == "größe-maße.json"
    assert slugify_filename("a -- b") == "a-b.json"
    assert slugify_filename("bruch.json") == "bruch.json"


def test_slugify_filename_empty_falls_back_to_timestamp() -> None:
    name = slugify_filename("?!*")
    assert name.startswith("quiz-")
    assert name.endswith(".json")
    assert name[len("quiz-"):-len(".json")].isdigit()


@pytest.mark.parametrize("bad", ["", "   ", ".", "..", "a/b", "a\\b", None])
def test_validate_segment_rejects_unsafe_names(bad) -> None:
    with pytest.raises(InvalidInputError):
        validate_segment(bad, "Kategorie")


def test_validate_segment_keeps_case_and_strips_whitespace() -> None:
    assert validate_segment("  Mathe ", "Kategorie") == "Mathe"


def test_write_quiz_collision_suffixes(quiz_store: QuizStore, quiz_doc: QuizDocument) -> None:
    names = [quiz_store.write_quiz("Mathe", "Algebra", "Algebra", quiz_doc) for _ in range(3)]
    assert names == ["algebra.json", "algebra-1.json", "algebra-2.json"]
    assert quiz_store.list_structure() == {
        "Mathe": {"Algebra": ["algebra-1.json", "algebra-2.json", "algebra.json"]}
    }


def test_write_then_read_preserves_content(quiz_store: QuizStore, quiz_doc: QuizDocument) -> None:
    name = quiz_store.write_quiz("Mathe", "Algebra", "Testquiz", quiz_doc)
    loaded = quiz_store.read_quiz(QuizLocation(category="Mathe", subcategory="Algebra", filename=name))
    assert loaded == quiz_doc

    raw = json.loads((quiz_store.root / "Mathe" / "Algebra" / name).read_text(encoding="utf-8"))
    assert "poolConfig" not in raw
    assert raw["questions"][0]["answers"][0]["correct"] is True


def test_list_structure_missing_root_and_non_json(tmp_path: Path) -> None:
    store = QuizStore(tmp_path / "nowhere")
    assert store.list_structure() == {}

    root = tmp_path / "quizzes"
    (root / "Kat" / "Sub").mkdir(parents=True)
    (root / "Kat" / "Sub" / "notes.txt").write_text("x", encoding="utf-8")
    (root / "Kat" / "Sub" / "a.json").write_text("{}", encoding="utf-8")
    (root / "stray.json").write_text("{}", encoding="utf-8")
    assert QuizStore(root).list_structure() == {"Kat": {"Sub": ["a.json"]}}


def test_read_quiz_not_found(quiz_store: QuizStore) -> None:
    with pytest.raises(NotFoundError):
        quiz_store.read_quiz(QuizLocation(category="A", subcategory="B", filename="c.json"))


@pytest.mark.parametrize("content", [
    "not json",
    "[1, 2]",
    json.dumps({"topic": "Ohne Fragen"}),
    json.dumps({"questions": []}),
    json.dumps({"topic": "x", "questions": [{"text": "q", "answers": [{"text": "a"}]}]}),
])
def test_read_quiz_invalid_format(quiz_store: QuizStore, content: str) -> None:
    path = quiz_store.root / "A" / "B" / "c.json"
    path.parent.mkdir(parents=True)
    path.write_text(content, encoding="utf-8")
    with pytest.raises(InvalidFormatError):
        quiz_store.read_quiz(QuizLocation(category="A", subcategory="B", filename="c.json"))


def test_read_quiz_accepts_german_keys(quiz_store: QuizStore) -> None:
    path = quiz_store.root / "Alt" / "Bestand" / "alt.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({
        "Thema": "Altes Quiz",
        "Fragen": [{
            "Frage": "Hauptstadt von Frankreich?",
            "Typ": "SingleAnswer",
            "Antworten": [
                {"Antwort": "Paris", "Richtig": True, "Kommentar": "Korrekt."},
                {"Antwort": "Lyon", "Richtig": False},
            ],
        }],
    }), encoding="utf-8")

    quiz = quiz_store.read_quiz(QuizLocation(category="Alt", subcategory="Bestand", filename="alt.json"))
    assert quiz.topic == "Altes Quiz"
    assert quiz.questions[0].answers[0].comment == "Korrekt."


def test_rename_update_delete_quiz(quiz_store: QuizStore, quiz_doc: QuizDocument) -> None:
    name = quiz_store.write_quiz("Mathe", "Algebra", "alt", quiz_doc)
    location = QuizLocation(category="Mathe", subcategory="Algebra", filename=name)

    quiz_store.rename_quiz(location, "neu.json")
    renamed = QuizLocation(category="Mathe", subcategory="Algebra", filename="neu.json")
    with pytest.raises(NotFoundError):
        quiz_store.read_quiz(location)

    updated = quiz_doc.model_copy(update={"topic": "Neuer Titel"})
    quiz_store.update_quiz(renamed, updated)
    assert quiz_store.read_quiz(renamed).topic == "Neuer Titel"

    quiz_store.delete_quiz(renamed)
    assert quiz_store.list_structure() == {"Mathe": {"Algebra": []}}

    with pytest.raises(NotFoundError):
        quiz_store.delete_quiz(renamed)
    with pytest.raises(NotFoundError):
        quiz_store.update_quiz(renamed, quiz_doc)


def test_rename_quiz_appends_extension(quiz_store: QuizStore, quiz_doc: QuizDocument) -> None:
    name = quiz_store.write_quiz("Mathe", "Algebra", "alt", quiz_doc)
    location = QuizLocation(category="Mathe", subcategory="Algebra", filename=name)

    assert quiz_store.rename_quiz(location, "Neuer Name") == "Neuer Name.json"
    assert quiz_store.list_structure() == {"Mathe": {"Algebra": ["Neuer Name.json"]}}
    renamed = QuizLocation(category="Mathe", subcategory="Algebra", filename="Neuer Name.json")
    assert quiz_store.read_quiz(renamed).topic == quiz_doc.topic


def test_rename_quiz_refuses_existing_target(quiz_store: QuizStore, quiz_doc: QuizDocument) -> None:
    alpha = quiz_store.write_quiz("Mathe", "Algebra", "alpha", quiz_doc)
    beta_doc = quiz_doc.model_copy(update={"topic": "Beta"})
    beta = quiz_store.write_quiz("Mathe", "Algebra", "beta", beta_doc)
    location = QuizLocation(category="Mathe", subcategory="Algebra", filename=alpha)

    with pytest.raises(InvalidInputError, match="existiert bereits"):
        quiz_store.rename_quiz(location, beta)
    with pytest.raises(InvalidInputError, match="existiert bereits"):
        quiz_store.rename_quiz(location, "beta")

    assert quiz_store.list_structure() == {"Mathe": {"Algebra": [alpha, beta]}}
    assert quiz_store.read_quiz(location).topic == quiz_doc.topic
    beta_location = QuizLocation(category="Mathe", subcategory="Algebra", filename=beta)
    assert quiz_store.read_quiz(beta_location).topic == "Beta"

    assert quiz_store.rename_quiz(location, alpha) == alpha
    assert quiz_store.read_quiz(location).topic == quiz_doc.topic


def test_namespace_entries(quiz_store: QuizStore, quiz_doc: QuizDocument) -> None:
    quiz_store.create_category("Mathe")
    quiz_store.create_category("Mathe")
    quiz_store.create_subcategory("Mathe", "Algebra")
    quiz_store.write_quiz("Mathe", "Algebra", "q", quiz_doc)

    quiz_store.rename_namespace_entry("subcategory", "Algebra", "Geometrie", parent_category="Mathe")
    quiz_store.rename_namespace_entry("category", "Mathe", "Mathematik")
    assert quiz_store.list_structure() == {"Mathematik": {"Geometrie": ["q.json"]}}

    quiz_store.delete_namespace_entry("category", "Mathematik")
    assert quiz_store.list_structure() == {}


def test_namespace_entry_errors(quiz_store: QuizStore) -> None:
    with pytest.raises(InvalidInputError):
        quiz_store.rename_namespace_entry("subcategory", "a", "b")
    with pytest.raises(InvalidInputError):
        quiz_store.delete_namespace_entry("folder", "a")
    with pytest.raises(NotFoundError):
        quiz_store.rename_namespace_entry("category", "fehlt", "neu")
    with pytest.raises(NotFoundError):
        quiz_store.delete_namespace_entry("subcategory", "fehlt", parent_category="auch")


def test_namespace_rename_refuses_existing_target(quiz_store: QuizStore, quiz_doc: QuizDocument) -> None:
    quiz_store.write_quiz("Mathe", "Algebra", "a", quiz_doc)
    quiz_store.write_quiz("Mathe", "Geometrie", "g", quiz_doc)
    quiz_store.write_quiz("Physik", "Mechanik", "m", quiz_doc)

    with pytest.raises(InvalidInputError, match="existiert bereits"):
        quiz_store.rename_namespace_entry("subcategory", "Algebra", "Geometrie", parent_category="Mathe")
    with pytest.raises(InvalidInputError, match="existiert bereits"):
        quiz_store.rename_namespace_entry("category", "Mathe", "Physik")

    assert quiz_store.list_structure() == {
        "Mathe": {"Algebra": ["a.json"], "Geometrie": ["g.json"]},
        "Physik": {"Mechanik": ["m.json"]},
    }
