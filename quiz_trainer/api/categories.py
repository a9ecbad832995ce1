"""
Category API Routes
Create, rename and delete categories and subcategories of the quiz tree
FILE: quiz_trainer/api/categories.py
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from quiz_trainer.api.dependencies import get_quiz_store
from quiz_trainer.core.errors import InvalidInputError, NotFoundError, StorageError
from quiz_trainer.models.management import (
    CreateCategoryRequest,
    DeleteCategoryRequest,
    RenameCategoryRequest,
    SuccessResponse,
)
from quiz_trainer.services.quiz_store import QuizStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.post("", response_model=SuccessResponse, summary="Create a category (and subcategory)")
async def create_category(
    request: CreateCategoryRequest,
    store: QuizStore = Depends(get_quiz_store)
) -> SuccessResponse:
    """Idempotent: existing directories are left untouched"""
    if not request.category:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Kategorie fehlt"
        )

    try:
        store.create_category(request.category)
        if request.subcategory:
            store.create_subcategory(request.category, request.subcategory)
        return SuccessResponse(success=True)

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except StorageError as e:
        logger.error(f"❌ Failed to create category: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler beim Erstellen der Kategorie"
        )


@router.put("", response_model=SuccessResponse, summary="Rename a category or subcategory")
async def rename_category(
    request: RenameCategoryRequest,
    store: QuizStore = Depends(get_quiz_store)
) -> SuccessResponse:
    if not request.oldName or not request.newName or not request.type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Fehlende Parameter"
        )

    try:
        store.rename_namespace_entry(
            request.type,
            request.oldName,
            request.newName,
            parent_category=request.category
        )
        return SuccessResponse(success=True)

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Kategorie nicht gefunden"
        )

    except StorageError as e:
        logger.error(f"❌ Failed to rename {request.type}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler beim Umbenennen"
        )


@router.delete("", response_model=SuccessResponse, summary="Delete a category or subcategory")
async def delete_category(
    request: DeleteCategoryRequest,
    store: QuizStore = Depends(get_quiz_store)
) -> SuccessResponse:
    """Recursive: every quiz beneath the entry is removed"""
    if not request.name or not request.type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Fehlende Parameter"
        )

    try:
        store.delete_namespace_entry(
            request.type,
            request.name,
            parent_category=request.category
        )
        return SuccessResponse(success=True)

    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Kategorie nicht gefunden"
        )

    except StorageError as e:
        logger.error(f"❌ Failed to delete {request.type}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Fehler beim Löschen"
        )
