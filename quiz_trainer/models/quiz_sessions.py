"""
Quiz Session Models
Persisted session records, in-progress run state, and the quiz-taking API payloads
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from quiz_trainer.models.quiz import QuestionType, QuizDocument, QuizLocation

QuizMode = Literal["immediate", "summary"]
RunStatus = Literal["loading", "presenting", "completed"]


# ==================== PERSISTED SESSION RECORD ====================

class AnsweredQuestion(BaseModel):
    """
    Textual snapshot of one answered question

    Stored as text so later edits to the quiz never alter history.
    """
    questionText: str
    type: QuestionType
    userAnswerTexts: List[str] = Field(default_factory=list)
    correctAnswerTexts: List[str] = Field(default_factory=list)
    correct: bool
    originalIndex: int = Field(..., ge=0, description="Index in the canonical question order")


class Score(BaseModel):
    correct: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100, description="Rounded to the nearest integer")


class QuizSession(BaseModel):
    """One complete attempt at a quiz by one user"""
    id: str = Field(..., min_length=1, description="Unique per attempt")
    user: str = Field(..., min_length=1)
    startedAt: datetime
    quizLocation: QuizLocation
    mode: QuizMode
    durationSeconds: int = Field(default=0, ge=0)
    answeredQuestions: List[AnsweredQuestion] = Field(default_factory=list)
    score: Score

    class Config:
        json_schema_extra = {
            "example": {
                "id": "session_3f2a9c1b7d4e",
                "user": "anna",
                "startedAt": "2025-03-01T09:15:00Z",
                "quizLocation": {
                    "category": "Mathematik",
                    "subcategory": "Algebra",
                    "filename": "gleichungen.json"
                },
                "mode": "immediate",
                "durationSeconds": 184,
                "answeredQuestions": [
                    {
                        "questionText": "Was ist x, wenn 2x = 6?",
                        "type": "SingleAnswer",
                        "userAnswerTexts": ["3"],
                        "correctAnswerTexts": ["3"],
                        "correct": True,
                        "originalIndex": 4
                    }
                ],
                "score": {"correct": 1, "total": 1, "percentage": 100}
            }
        }


# ==================== IN-PROGRESS RUN STATE ====================

class UserAnswer(BaseModel):
    """A submitted answer, expressed in canonical (original) indices"""
    originalQuestionIndex: int = Field(..., ge=0)
    selectedAnswerIndices: List[int] = Field(default_factory=list)
    correct: bool


class QuizRunState(BaseModel):
    """Serializable state of a quiz run between requests"""
    runId: str
    user: str
    quizLocation: QuizLocation
    quiz: QuizDocument = Field(..., description="Snapshot taken when the run started")
    mode: QuizMode
    status: RunStatus
    startedAt: datetime
    completedAt: Optional[datetime] = None
    questionOrder: List[int] = Field(
        default_factory=list,
        description="Original indices of the questions in presentation order"
    )
    position: int = 0
    answerOrder: List[int] = Field(
        default_factory=list,
        description="Original indices of the current question's answers in presentation order"
    )
    answers: List[UserAnswer] = Field(default_factory=list)
    record: Optional[QuizSession] = None
    recorded: bool = False


# ==================== API PAYLOADS ====================

class StartRunRequest(BaseModel):
    user: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    filename: Optional[str] = None
    mode: QuizMode = "immediate"


class PresentedAnswer(BaseModel):
    index: int = Field(..., description="Presentation index to submit")
    text: str


class PresentedQuestion(BaseModel):
    number: int = Field(..., ge=1, description="1-based position in this run")
    total: int
    text: str
    type: QuestionType
    answers: List[PresentedAnswer]


class QuizRunView(BaseModel):
    runId: str
    topic: str
    mode: QuizMode
    status: RunStatus
    answeredCount: int
    question: Optional[PresentedQuestion] = None


class SubmitAnswerRequest(BaseModel):
    selected: List[int] = Field(..., description="Presentation indices of the chosen answers")


class AnswerFeedback(BaseModel):
    correct: bool
    comment: str = ""
    correctAnswerIndices: List[int] = Field(
        default_factory=list,
        description="Presentation indices of the correct answers"
    )
    advanceAfterMs: int = Field(..., description="Client pacing delay before showing the next question")
    completed: bool
    next: Optional[PresentedQuestion] = None
