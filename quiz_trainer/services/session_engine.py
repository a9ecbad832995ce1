"""
Session Engine
The quiz-taking state machine: shuffling, answer evaluation, scoring and session records

States: loading -> presenting(i) -> presenting(i + 1) | completed

Two orders exist side by side. Presentation order is what the user sees;
canonical order is the order stored in the quiz document. Every shuffled
item carries its canonical index as a Tagged pair, and everything that is
recorded (answers, history) uses canonical indices only.
"""
import logging
import math
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Generic, Iterable, List, Optional, Sequence, Set, Tuple, TypeVar

from quiz_trainer.core.errors import InvalidInputError, InvalidStateError
from quiz_trainer.models.quiz import Answer, Question, QuizDocument, QuizLocation
from quiz_trainer.models.quiz_sessions import (
    AnsweredQuestion,
    QuizRunState,
    QuizSession,
    Score,
    UserAnswer,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Client pacing before the next question is shown
SUMMARY_ADVANCE_MS = 300
IMMEDIATE_ADVANCE_MS = 3000

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    return f"session_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class Tagged(Generic[T]):
    """A value paired with its index in canonical order"""
    value: T
    original_index: int


def shuffle_tagged(items: Sequence[T], rng: random.Random) -> List[Tagged[T]]:
    """Fisher-Yates shuffle that tags every item with its original index"""
    shuffled = [Tagged(value, index) for index, value in enumerate(items)]
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def selected_original_indices(presented: Sequence[Tagged[T]], selected: Sequence[int]) -> Set[int]:
    """Map presentation indices to canonical indices via their tags"""
    return {presented[i].original_index for i in selected}


def evaluate_selection(question: Question, selected_original: Iterable[int]) -> bool:
    """Correct iff the selected canonical indices are exactly the correct ones"""
    return set(selected_original) == question.correct_indices()


def compute_score(correct: int, total: int) -> Score:
    """Score with the percentage rounded half-up to the nearest integer"""
    if total <= 0:
        return Score(correct=correct, total=total, percentage=0)
    percentage = math.floor(correct * 100 / total + 0.5)
    return Score(correct=correct, total=total, percentage=percentage)


@dataclass
class Submission:
    """Outcome of submitting one answer"""
    user_answer: UserAnswer
    comment: str
    correct_presentation_indices: List[int]
    advance_after_ms: int
    completed: bool


class QuizRun:
    """One attempt at a quiz, driven question by question"""

    def __init__(
        self,
        quiz: QuizDocument,
        location: QuizLocation,
        user: str,
        mode: str = "immediate",
        run_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None
    ):
        self.quiz = quiz
        self.location = location
        self.user = user
        self.mode = mode
        self.run_id = run_id or new_session_id()
        self.rng = rng or random.Random()
        self.clock = clock or utc_now

        self.status = "loading"
        self.started_at = self.clock()
        self.completed_at: Optional[datetime] = None
        self.play_questions: List[Tagged[Question]] = []
        self.position = 0
        self.current_answers: List[Tagged[Answer]] = []
        self.answers: List[UserAnswer] = []
        self.record: Optional[QuizSession] = None
        self.recorded = False

    # ==================== TRANSITIONS ====================

    def start(self) -> None:
        """Shuffle (and sample, when pooled) the questions and present the first"""
        if self.status != "loading":
            raise InvalidStateError("Quiz run already started")

        play = shuffle_tagged(self.quiz.questions, self.rng)
        if self.quiz.poolConfig:
            play = play[:self.quiz.poolConfig.questionsPerGame]

        self.play_questions = play
        self.position = 0
        self.status = "presenting"
        self._present_current()

        logger.info(
            f"🎬 Started run {self.run_id} for {self.user} on {self.location.path} "
            f"({len(play)} of {len(self.quiz.questions)} questions, mode={self.mode})"
        )

    def _present_current(self) -> None:
        question = self.play_questions[self.position].value
        self.current_answers = shuffle_tagged(question.answers, self.rng)

    def _advance(self) -> None:
        self.position += 1
        if self.position >= len(self.play_questions):
            self.status = "completed"
            self.completed_at = self.clock()
            self.current_answers = []
            logger.info(f"🏁 Run {self.run_id} completed")
        else:
            self._present_current()

    def current_question(self) -> Tagged[Question]:
        if self.status != "presenting":
            raise InvalidStateError(f"No question to present (status: {self.status})")
        return self.play_questions[self.position]

    def submit_answer(self, selected: Sequence[int]) -> Submission:
        """
        Record an answer given in presentation indices and move on

        Args:
            selected: Presentation indices of the chosen answers

        Returns:
            Submission with correctness, feedback comment and pacing hint

        Raises:
            InvalidStateError: If no question is being presented
            InvalidInputError: If the selection is empty, out of range,
                duplicated, or has several entries for a SingleAnswer question
        """
        tagged_question = self.current_question()
        question = tagged_question.value

        if not selected:
            raise InvalidInputError("Keine Antwort ausgewählt")
        if len(set(selected)) != len(selected):
            raise InvalidInputError("Antworten doppelt ausgewählt")
        if any(i < 0 or i >= len(self.current_answers) for i in selected):
            raise InvalidInputError("Ungültiger Antwortindex")
        if question.type == "SingleAnswer" and len(selected) != 1:
            raise InvalidInputError("Nur eine Antwort erlaubt")

        picked = [self.current_answers[i] for i in selected]
        original_indices = sorted(selected_original_indices(self.current_answers, selected))
        correct = evaluate_selection(question, original_indices)

        wrong = [t for t in picked if not t.value.correct]
        comment = wrong[0].value.comment if wrong else picked[0].value.comment

        correct_presentation = [
            i for i, t in enumerate(self.current_answers) if t.value.correct
        ]

        user_answer = UserAnswer(
            originalQuestionIndex=tagged_question.original_index,
            selectedAnswerIndices=original_indices,
            correct=correct
        )
        self.answers.append(user_answer)

        logger.debug(
            f"Run {self.run_id}: question {tagged_question.original_index} "
            f"answered {'✓' if correct else '✗'}"
        )

        self._advance()

        return Submission(
            user_answer=user_answer,
            comment=comment,
            correct_presentation_indices=correct_presentation,
            advance_after_ms=SUMMARY_ADVANCE_MS if self.mode == "summary" else IMMEDIATE_ADVANCE_MS,
            completed=self.status == "completed"
        )

    def complete(self) -> Tuple[QuizSession, bool]:
        """
        Build the session record for a finished run

        Repeated calls return the same record.

        Returns:
            (record, created) where created is True only on the first call
        """
        if self.status != "completed":
            raise InvalidStateError("Quiz run is not finished yet")

        if self.record is not None:
            return self.record, False

        self.record = self._build_record()
        return self.record, True

    # ==================== RECORD ====================

    def _build_record(self) -> QuizSession:
        answered = []
        for user_answer in self.answers:
            question = self.quiz.questions[user_answer.originalQuestionIndex]
            answered.append(AnsweredQuestion(
                questionText=question.text,
                type=question.type,
                userAnswerTexts=[question.answers[i].text for i in user_answer.selectedAnswerIndices],
                correctAnswerTexts=[a.text for a in question.answers if a.correct],
                correct=user_answer.correct,
                originalIndex=user_answer.originalQuestionIndex
            ))

        correct_count = sum(1 for a in self.answers if a.correct)
        finished = self.completed_at or self.clock()
        duration = max(0, round((finished - self.started_at).total_seconds()))

        return QuizSession(
            id=self.run_id,
            user=self.user,
            startedAt=self.started_at,
            quizLocation=self.location,
            mode=self.mode,
            durationSeconds=duration,
            answeredQuestions=answered,
            score=compute_score(correct_count, len(self.play_questions))
        )

    # ==================== PERSISTENCE ====================

    def to_state(self) -> QuizRunState:
        return QuizRunState(
            runId=self.run_id,
            user=self.user,
            quizLocation=self.location,
            quiz=self.quiz,
            mode=self.mode,
            status=self.status,
            startedAt=self.started_at,
            completedAt=self.completed_at,
            questionOrder=[t.original_index for t in self.play_questions],
            position=self.position,
            answerOrder=[t.original_index for t in self.current_answers],
            answers=list(self.answers),
            record=self.record,
            recorded=self.recorded
        )

    @classmethod
    def from_state(
        cls,
        state: QuizRunState,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None
    ) -> "QuizRun":
        run = cls(
            quiz=state.quiz,
            location=state.quizLocation,
            user=state.user,
            mode=state.mode,
            run_id=state.runId,
            rng=rng,
            clock=clock
        )
        run.status = state.status
        run.started_at = state.startedAt
        run.completed_at = state.completedAt
        run.play_questions = [Tagged(state.quiz.questions[i], i) for i in state.questionOrder]
        run.position = state.position
        if run.status == "presenting":
            answers = run.play_questions[run.position].value.answers
            run.current_answers = [Tagged(answers[i], i) for i in state.answerOrder]
        run.answers = list(state.answers)
        run.record = state.record
        run.recorded = state.recorded
        return run

