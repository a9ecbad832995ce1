"""
Quiz Tree Management Models
Request/response models for category, subcategory and quiz file management

Required fields are declared optional here and checked in the routers so a
missing field is reported as 400 rather than a validation error.
"""
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

NamespaceKind = Literal["category", "subcategory"]


class CreateCategoryRequest(BaseModel):
    """Create a category and optionally a subcategory inside it"""
    category: Optional[str] = Field(None, description="Category name")
    subcategory: Optional[str] = Field(None, description="Optional subcategory name")


class RenameCategoryRequest(BaseModel):
    """Rename a category or subcategory"""
    oldName: Optional[str] = None
    newName: Optional[str] = None
    type: Optional[str] = Field(None, description="'category' or 'subcategory'")
    category: Optional[str] = Field(None, description="Parent category for subcategories")

    class Config:
        json_schema_extra = {
            "example": {
                "oldName": "Algebra",
                "newName": "Lineare Algebra",
                "type": "subcategory",
                "category": "Mathematik"
            }
        }


class DeleteCategoryRequest(BaseModel):
    """Delete a category or subcategory (recursive)"""
    name: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None


class SaveQuizRequest(BaseModel):
    """Persist a (generated or hand-written) quiz under a new file name"""
    quiz: Optional[Dict[str, Any]] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    filename: Optional[str] = None


class SaveQuizResponse(BaseModel):
    success: bool = True
    filename: str
    path: str


class UpdateQuizRequest(BaseModel):
    """Rename a quiz file and/or replace its content"""
    category: Optional[str] = None
    subcategory: Optional[str] = None
    oldName: Optional[str] = None
    newName: Optional[str] = None
    quizData: Optional[Dict[str, Any]] = None


class DeleteQuizRequest(BaseModel):
    category: Optional[str] = None
    subcategory: Optional[str] = None
    filename: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True
