"""
Quiz Models
Pydantic models for quiz documents and their addresses in the quiz tree
FILE: quiz_trainer/models/quiz.py

Documents are written with English camelCase keys. The German keys used by
older quiz files (Thema, Fragen, Frage, Typ, Antworten, Antwort, Richtig,
Kommentar, PoolConfig) are accepted on input.
"""
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator

QuestionType = Literal["SingleAnswer", "MultipleAnswer"]

QuizStructure = Dict[str, Dict[str, List[str]]]


class Answer(BaseModel):
    """A single answer option with its feedback comment"""
    text: str = Field(
        ...,
        validation_alias=AliasChoices("text", "Antwort"),
        description="Answer text"
    )
    correct: bool = Field(
        default=False,
        validation_alias=AliasChoices("correct", "Richtig"),
        description="Whether this answer is correct"
    )
    comment: str = Field(
        default="",
        validation_alias=AliasChoices("comment", "Kommentar"),
        description="Feedback shown after answering"
    )


class Question(BaseModel):
    """A quiz question with its answers in canonical order"""
    text: str = Field(
        ...,
        validation_alias=AliasChoices("text", "Frage"),
        description="Question text"
    )
    type: QuestionType = Field(
        default="SingleAnswer",
        validation_alias=AliasChoices("type", "Typ"),
        description="SingleAnswer or MultipleAnswer"
    )
    answers: List[Answer] = Field(
        ...,
        validation_alias=AliasChoices("answers", "Antworten"),
        min_length=1,
        description="Answer options in canonical order"
    )

    @model_validator(mode="after")
    def check_correct_answers(self):
        correct_count = sum(1 for a in self.answers if a.correct)
        if correct_count == 0:
            raise ValueError(f"Question '{self.text}' has no correct answer")
        if self.type == "SingleAnswer" and correct_count != 1:
            raise ValueError(
                f"SingleAnswer question '{self.text}' has {correct_count} correct answers"
            )
        return self

    def correct_indices(self) -> set:
        return {i for i, a in enumerate(self.answers) if a.correct}


class PoolConfig(BaseModel):
    """Sampling configuration for pooled quizzes"""
    poolSize: int = Field(..., ge=1, description="Total questions in the pool")
    questionsPerGame: int = Field(..., ge=1, description="Questions drawn per attempt")


class QuizDocument(BaseModel):
    """A complete quiz as stored in the quiz tree"""
    topic: str = Field(
        ...,
        validation_alias=AliasChoices("topic", "Thema"),
        description="Display title"
    )
    questions: List[Question] = Field(
        ...,
        validation_alias=AliasChoices("questions", "Fragen"),
        min_length=1,
        description="Questions in canonical order"
    )
    poolConfig: Optional[PoolConfig] = Field(
        default=None,
        validation_alias=AliasChoices("poolConfig", "PoolConfig"),
        description="Present when each attempt samples a subset of the questions"
    )

    @model_validator(mode="after")
    def check_pool_config(self):
        if self.poolConfig and self.poolConfig.questionsPerGame > len(self.questions):
            raise ValueError(
                f"questionsPerGame ({self.poolConfig.questionsPerGame}) exceeds "
                f"question count ({len(self.questions)})"
            )
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "topic": "Bruchrechnung",
                "questions": [
                    {
                        "text": "Was ist 1/2 + 1/4?",
                        "type": "SingleAnswer",
                        "answers": [
                            {"text": "3/4", "correct": True, "comment": "Richtig, 2/4 + 1/4."},
                            {"text": "2/6", "correct": False, "comment": "Nenner werden nicht addiert."}
                        ]
                    }
                ]
            }
        }


class QuizLocation(BaseModel):
    """Stable address of a quiz document inside the quiz tree"""
    category: str
    subcategory: str
    filename: str

    @property
    def path(self) -> str:
        return f"{self.category}/{self.subcategory}/{self.filename}"
