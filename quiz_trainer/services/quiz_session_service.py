"""
Quiz Session Service
Drives quiz runs across HTTP requests, persisting their state between calls
FILE: quiz_trainer/services/quiz_session_service.py
"""
import logging
import random
import re
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from quiz_trainer.core.errors import InvalidInputError, NotFoundError, StorageError
from quiz_trainer.db.file_store import delete_file, read_json, write_json
from quiz_trainer.models.quiz import QuizLocation
from quiz_trainer.models.quiz_sessions import (
    AnswerFeedback,
    PresentedAnswer,
    PresentedQuestion,
    QuizRunState,
    QuizRunView,
    QuizSession,
)
from quiz_trainer.services.history_store import HistoryStore
from quiz_trainer.services.quiz_store import QuizStore
from quiz_trainer.services.session_engine import Clock, QuizRun

logger = logging.getLogger(__name__)

RUN_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+$")


class QuizSessionService:
    """Service class for quiz run operations with completion recording"""

    def __init__(
        self,
        quiz_store: QuizStore,
        history_store: HistoryStore,
        runs_dir: Path,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None
    ):
        """
        Initialize quiz session service

        Args:
            quiz_store: Source of quiz documents
            history_store: Destination of finished session records
            runs_dir: Directory holding the state of in-progress runs
            rng: Optional random source (tests pass a seeded one)
            clock: Optional time source
        """
        self.quiz_store = quiz_store
        self.history_store = history_store
        self.runs_dir = Path(runs_dir)
        self.rng = rng
        self.clock = clock

    # ==================== PERSISTENCE ====================

    def _run_path(self, run_id: str) -> Path:
        if not RUN_ID_PATTERN.match(run_id or ""):
            raise NotFoundError(f"Quiz run not found: {run_id}")
        return self.runs_dir / f"{run_id}.json"

    def _load(self, run_id: str) -> QuizRun:
        try:
            data = read_json(self._run_path(run_id))
        except NotFoundError:
            raise NotFoundError(f"Quiz run not found: {run_id}")

        try:
            state = QuizRunState.model_validate(data)
        except ValidationError as e:
            logger.error(f"❌ Corrupt state for run {run_id}: {e}")
            raise StorageError(f"Corrupt state for quiz run {run_id}")

        return QuizRun.from_state(state, rng=self.rng, clock=self.clock)

    def _save(self, run: QuizRun) -> None:
        write_json(self._run_path(run.run_id), run.to_state().model_dump(mode="json"))

    # ==================== VIEWS ====================

    def _present(self, run: QuizRun) -> Optional[PresentedQuestion]:
        if run.status != "presenting":
            return None
        question = run.current_question().value
        return PresentedQuestion(
            number=run.position + 1,
            total=len(run.play_questions),
            text=question.text,
            type=question.type,
            answers=[
                PresentedAnswer(index=i, text=tagged.value.text)
                for i, tagged in enumerate(run.current_answers)
            ]
        )

    def _view(self, run: QuizRun) -> QuizRunView:
        return QuizRunView(
            runId=run.run_id,
            topic=run.quiz.topic,
            mode=run.mode,
            status=run.status,
            answeredCount=len(run.answers),
            question=self._present(run)
        )

    # ==================== OPERATIONS ====================

    def start(self, user: Optional[str], location: QuizLocation, mode: str) -> QuizRunView:
        """
        Load a quiz and start a new run on it

        Raises:
            InvalidInputError: If the user name is empty
            NotFoundError: If the quiz does not exist
            InvalidFormatError: If the quiz document is invalid
        """
        if not user or not user.strip():
            raise InvalidInputError("Benutzer fehlt")

        quiz = self.quiz_store.read_quiz(location)
        run = QuizRun(
            quiz=quiz,
            location=location,
            user=user.strip(),
            mode=mode,
            rng=self.rng,
            clock=self.clock
        )
        run.start()
        self._save(run)
        return self._view(run)

    def current(self, run_id: str) -> QuizRunView:
        return self._view(self._load(run_id))

    def submit(self, run_id: str, selected: list) -> AnswerFeedback:
        """Submit presentation indices for the current question"""
        run = self._load(run_id)
        submission = run.submit_answer(selected)
        self._save(run)

        return AnswerFeedback(
            correct=submission.user_answer.correct,
            comment=submission.comment,
            correctAnswerIndices=submission.correct_presentation_indices,
            advanceAfterMs=submission.advance_after_ms,
            completed=submission.completed,
            next=self._present(run)
        )

    def complete(self, run_id: str) -> QuizSession:
        """
        Finish a run and record it in the user's history

        Safe to call repeatedly: the session is appended to history only once.
        """
        run = self._load(run_id)
        record, _ = run.complete()

        if not run.recorded:
            self.history_store.append(record)
            run.recorded = True
            logger.info(
                f"✅ Recorded run {run.run_id}: {record.score.correct}/{record.score.total} "
                f"({record.score.percentage}%)"
            )
        else:
            logger.info(f"↩️ Run {run.run_id} already recorded")

        self._save(run)
        return record

    def abandon(self, run_id: str) -> None:
        """Discard an in-progress run without recording it"""
        delete_file(self._run_path(run_id))
        logger.info(f"🛑 Abandoned run {run_id}")
