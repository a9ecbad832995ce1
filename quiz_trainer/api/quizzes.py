"""
Quiz API Routes
FastAPI endpoints for browsing, saving, editing and deleting quiz documents
FILE: quiz_trainer/api/quizzes.py
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from quiz_trainer.api.dependencies import get_quiz_store
from quiz_trainer.core.errors import (
    InvalidFormatError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from quiz_trainer.models.management import (
    DeleteQuizRequest,
    SaveQuizRequest,
    SaveQuizResponse,
    SuccessResponse,
    UpdateQuizRequest,
)
from quiz_trainer.models.quiz import QuizDocument, QuizLocation, QuizStructure
from quiz_trainer.services.quiz_store import QuizStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Quizzes"])


def _parse_quiz(data: dict) -> QuizDocument:
    """Validate a client-submitted quiz payload (400 on bad shape)"""
    try:
        return QuizDocument.model_validate(data)
    except ValidationError as e:
        logger.warning(f"⚠️ Rejected quiz payload: {e.error_count()} validation errors")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ungültiges Quiz-Format"
        )


# ==================== READ ====================

@router.get(
    "/quizzes",
    response_model=QuizStructure,
    summary="List the quiz tree",
    description="Returns `{category: {subcategory: [filename]}}` with sorted names."
)
async def list_quizzes(store: QuizStore = Depends(get_quiz_store)) -> QuizStructure:
    try:
        return store.list_structure()

    except StorageError as e:
        logger.error(f"❌ Failed to list quizzes: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler beim Laden der Quizze"
        )


@router.get(
    "/quiz/{category}/{subcategory}/{filename}",
    response_model=QuizDocument,
    responses={
        404: {"description": "Quiz not found"},
        500: {"description": "Stored quiz is invalid"}
    },
    summary="Read one quiz document"
)
async def get_quiz(
    category: str,
    subcategory: str,
    filename: str,
    store: QuizStore = Depends(get_quiz_store)
) -> QuizDocument:
    location = QuizLocation(category=category, subcategory=subcategory, filename=filename)
    try:
        return store.read_quiz(location)

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Quiz nicht gefunden"
        )

    except InvalidFormatError as e:
        logger.error(f"❌ {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Ungültiges Quiz-Format"
        )

    except StorageError as e:
        logger.error(f"❌ Failed to read quiz {location.path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler beim Laden des Quiz"
        )


# ==================== SAVE ====================

@router.post(
    "/save-quiz",
    response_model=SaveQuizResponse,
    summary="Save a new quiz",
    description="""
    Save a quiz under a sanitized file name.

    The file name is lowercased and reduced to `a-z 0-9 ä ö ü ß -`.
    If the name is taken, `-1`, `-2`, ... is appended.
    """
)
async def save_quiz(
    request: SaveQuizRequest,
    store: QuizStore = Depends(get_quiz_store)
) -> SaveQuizResponse:
    if not request.quiz or not request.category or not request.subcategory or not request.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Fehlende Parameter"
        )

    document = _parse_quiz(request.quiz)

    try:
        final_name = store.write_quiz(
            request.category,
            request.subcategory,
            request.filename,
            document
        )
        return SaveQuizResponse(
            success=True,
            filename=final_name,
            path=f"{request.category}/{request.subcategory}/{final_name}"
        )

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except StorageError as e:
        logger.error(f"❌ Failed to save quiz: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler beim Speichern des Quiz"
        )


# ==================== MANAGEMENT ====================

@router.put(
    "/quiz-management",
    response_model=SuccessResponse,
    summary="Rename and/or update a quiz",
    description="""
    Renames the file when `newName` differs from `oldName`, then replaces
    its content when `quizData` is given. The two steps are not atomic.
    """
)
async def update_quiz(
    request: UpdateQuizRequest,
    store: QuizStore = Depends(get_quiz_store)
) -> SuccessResponse:
    if not request.category or not request.subcategory or not request.oldName:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Fehlende Parameter"
        )

    document = _parse_quiz(request.quizData) if request.quizData else None

    location = QuizLocation(
        category=request.category,
        subcategory=request.subcategory,
        filename=request.oldName
    )

    try:
        if request.newName and request.newName != request.oldName:
            new_filename = store.rename_quiz(location, request.newName)
            location = QuizLocation(
                category=request.category,
                subcategory=request.subcategory,
                filename=new_filename
            )

        if document is not None:
            store.update_quiz(location, document)

        return SuccessResponse(success=True)

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Quiz nicht gefunden"
        )

    except StorageError as e:
        logger.error(f"❌ Failed to update quiz {location.path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler beim Aktualisieren des Quiz"
        )


@router.delete(
    "/quiz-management",
    response_model=SuccessResponse,
    summary="Delete a quiz"
)
async def delete_quiz(
    request: DeleteQuizRequest,
    store: QuizStore = Depends(get_quiz_store)
) -> SuccessResponse:
    if not request.category or not request.subcategory or not request.filename:
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
        store.delete_quiz(location)
        return SuccessResponse(success=True)

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Quiz nicht gefunden"
        )

    except StorageError as e:
        logger.error(f"❌ Failed to delete quiz {location.path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler beim Löschen des Quiz"
        )
