"""
Quiz Run API Routes
Take a quiz question by question; completed runs are recorded in the history
FILE: quiz_trainer/api/sessions.py
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from quiz_trainer.api.dependencies import get_session_service
from quiz_trainer.core.errors import (
    InvalidFormatError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    StorageError,
)
from quiz_trainer.models.management import SuccessResponse
from quiz_trainer.models.quiz import QuizLocation
from quiz_trainer.models.quiz_sessions import (
    AnswerFeedback,
    QuizRunView,
    QuizSession,
    StartRunRequest,
    SubmitAnswerRequest,
)
from quiz_trainer.services.quiz_session_service import QuizSessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["Quiz Runs"])


def _http_error(e: Exception) -> HTTPException:
    """Translate a service error into the matching HTTP error"""
    if isinstance(e, (InvalidInputError, InvalidStateError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, InvalidFormatError):
        logger.error(f"❌ {e}")
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Ungültiges Quiz-Format"
        )
    logger.error(f"❌ Quiz run storage error: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Fehler beim Speichern des Quiz-Durchlaufs"
    )


SERVICE_ERRORS = (InvalidInputError, InvalidStateError, NotFoundError, InvalidFormatError, StorageError)


@router.post(
    "",
    response_model=QuizRunView,
    status_code=status.HTTP_201_CREATED,
    summary="Start a quiz run",
    description="""
    Loads the quiz, shuffles its questions (sampling `questionsPerGame`
    of them for pooled quizzes) and presents the first question.

    **Next Steps:**
    Submit answers with `/api/sessions/{id}/answer` using the presented
    answer indices, then finish with `/api/sessions/{id}/complete`.
    """
)
async def start_run(
    request: StartRunRequest,
    service: QuizSessionService = Depends(get_session_service)
) -> QuizRunView:
    if not request.user or not request.category or not request.subcategory or not request.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Fehlende Parameter"
        )

    location = QuizLocation(
        category=request.category,
        subcategory=request.subcategory,
        filename=request.filename
    )

    try:
        return service.start(request.user, location, request.mode)
    except SERVICE_ERRORS as e:
        raise _http_error(e)


@router.get("/{run_id}", response_model=QuizRunView, summary="Current state of a quiz run")
async def get_run(
    run_id: str,
    service: QuizSessionService = Depends(get_session_service)
) -> QuizRunView:
    try:
        return service.current(run_id)
    except SERVICE_ERRORS as e:
        raise _http_error(e)


@router.post(
    "/{run_id}/answer",
    response_model=AnswerFeedback,
    summary="Answer the current question",
    description="""
    `selected` holds presentation indices of the chosen answers.

    The run advances immediately; `advanceAfterMs` is the delay the
    client should wait before showing `next` (300 ms in summary mode,
    3000 ms in immediate mode).
    """
)
async def submit_answer(
    run_id: str,
    request: SubmitAnswerRequest,
    service: QuizSessionService = Depends(get_session_service)
) -> AnswerFeedback:
    try:
        return service.submit(run_id, request.selected)
    except SERVICE_ERRORS as e:
        raise _http_error(e)


@router.post(
    "/{run_id}/complete",
    response_model=QuizSession,
    summary="Finish a run and record it",
    description="Idempotent: repeated calls return the same session without recording it again."
)
async def complete_run(
    run_id: str,
    service: QuizSessionService = Depends(get_session_service)
) -> QuizSession:
    try:
        return service.complete(run_id)
    except SERVICE_ERRORS as e:
        raise _http_error(e)


@router.delete("/{run_id}", response_model=SuccessResponse, summary="Abandon a quiz run")
async def abandon_run(
    run_id: str,
    service: QuizSessionService = Depends(get_session_service)
) -> SuccessResponse:
    try:
        service.abandon(run_id)
        return SuccessResponse(success=True)
    except SERVICE_ERRORS as e:
        raise _http_error(e)
