"""
History API Routes
Completed quiz sessions per user
FILE: quiz_trainer/api/history.py
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import BaseModel, ValidationError

from quiz_trainer.api.dependencies import get_history_store
from quiz_trainer.core.errors import NotFoundError, StorageError
from quiz_trainer.models.management import SuccessResponse
from quiz_trainer.models.quiz_sessions import QuizSession
from quiz_trainer.services.history_store import HistoryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/history", tags=["History"])


class SaveHistoryResponse(BaseModel):
    success: bool = True
    id: str


@router.get(
    "",
    response_model=List[QuizSession],
    summary="List sessions",
    description="Sessions of one user (most recent first) or of all users sorted by start time."
)
async def list_history(
    user: Optional[str] = Query(None, description="Only sessions of this user"),
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of sessions"),
    history: HistoryStore = Depends(get_history_store)
) -> List[QuizSession]:
    if user:
        return history.list_for_user(user, limit)
    return history.list_all(limit)


@router.get("/{user}/{session_id}", response_model=QuizSession, summary="Read one session")
async def get_history_entry(
    user: str,
    session_id: str,
    history: HistoryStore = Depends(get_history_store)
) -> QuizSession:
    try:
        return history.get(user, session_id)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )


@router.post("", response_model=SaveHistoryResponse, summary="Record a completed session")
async def save_history_entry(
    payload: Dict[str, Any] = Body(...),
    history: HistoryStore = Depends(get_history_store)
) -> SaveHistoryResponse:
    try:
        session = QuizSession.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"⚠️ Rejected session payload: {e.error_count()} validation errors")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid session data"
        )

    try:
        history.append(session)
        return SaveHistoryResponse(success=True, id=session.id)

    except StorageError as e:
        logger.error(f"❌ Failed to save session {session.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save session"
        )


@router.delete(
    "",
    response_model=SuccessResponse,
    summary="Delete sessions",
    description="""
    - `?id=&user=` deletes one session
    - `?user=` deletes the user's whole history
    - no parameters clears the history of every user
    """
)
async def delete_history(
    id: Optional[str] = Query(None, description="Session id (requires user)"),
    user: Optional[str] = Query(None, description="Owner of the history"),
    history: HistoryStore = Depends(get_history_store)
) -> SuccessResponse:
    if id and not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is required to delete a session"
        )

    try:
        if id:
            history.delete_one(user, id)
        elif user:
            history.delete_all(user)
        else:
            logger.warning("⚠️ Clearing the history of all users")
            history.clear()
        return SuccessResponse(success=True)

    except StorageError as e:
        logger.error(f"❌ Failed to delete history: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete history"
        )
