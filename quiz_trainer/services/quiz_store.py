"""
Quiz Store
File-tree backed storage for quiz documents addressed by category/subcategory/filename
FILE: quiz_trainer/services/quiz_store.py
"""
import logging
import re
import shutil
import time
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from quiz_trainer.core.errors import (
    InvalidFormatError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from quiz_trainer.db.file_store import delete_file, ensure_dir, read_json, write_json
from quiz_trainer.models.quiz import QuizDocument, QuizLocation, QuizStructure

logger = logging.getLogger(__name__)

QUIZ_EXTENSION = ".json"


def slugify_filename(desired: str) -> str:
    """
    Turn a free-form title into a URL/filesystem-safe quiz file name

    Lowercases, keeps a-z, digits, German umlauts/ß, hyphens and whitespace,
    turns whitespace runs into hyphens and collapses repeated hyphens. Falls
    back to a timestamp name when nothing survives.

    Example:
        >>> slugify_filename("Algebra: Teil 1!")
        'algebra-teil-1.json'
    """
    slug = (desired or "").lower()
    if slug.endswith(QUIZ_EXTENSION):
        slug = slug[: -len(QUIZ_EXTENSION)]
    slug = re.sub(r"[^a-z0-9äöüß\-\s]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")

    if not slug:
        slug = f"quiz-{int(time.time() * 1000)}"

    return slug + QUIZ_EXTENSION


def validate_segment(name: Optional[str], label: str) -> str:
    """
    Validate one path segment of the quiz namespace

    Names are kept verbatim (case-sensitive, no Unicode normalization);
    only surrounding whitespace is stripped.
    """
    if name is None or not str(name).strip():
        raise InvalidInputError(f"{label} fehlt")

    segment = str(name).strip()
    if segment in (".", "..") or "/" in segment or "\\" in segment or "\x00" in segment:
        raise InvalidInputError(f"Ungültiger Name für {label}: {segment}")

    return segment


class QuizStore:
    """Two-level namespace (category → subcategory) of JSON quiz documents"""

    def __init__(self, root: Path):
        """
        Initialize quiz store

        Args:
            root: Directory holding the category directories
        """
        self.root = Path(root)

    # ==================== PATH HELPERS ====================

    def _category_path(self, category: str) -> Path:
        return self.root / validate_segment(category, "Kategorie")

    def _subcategory_path(self, category: str, subcategory: str) -> Path:
        return self._category_path(category) / validate_segment(subcategory, "Unterkategorie")

    def _quiz_path(self, location: QuizLocation) -> Path:
        return (
            self._subcategory_path(location.category, location.subcategory)
            / validate_segment(location.filename, "Dateiname")
        )

    # ==================== QUIZ DOCUMENTS ====================

    def list_structure(self) -> QuizStructure:
        """
        Walk the namespace and list quiz files per subcategory

        Returns:
            {category: {subcategory: [filename, ...]}}, empty if no quizzes exist yet
        """
        structure: QuizStructure = {}

        if not self.root.is_dir():
            logger.info(f"📂 Quiz root {self.root} does not exist yet")
            return structure

        try:
            for category_dir in sorted(self.root.iterdir()):
                if not category_dir.is_dir():
                    continue
                structure[category_dir.name] = {}

                for subcategory_dir in sorted(category_dir.iterdir()):
                    if not subcategory_dir.is_dir():
                        continue
                    structure[category_dir.name][subcategory_dir.name] = sorted(
                        f.name
                        for f in subcategory_dir.iterdir()
                        if f.is_file() and f.name.endswith(QUIZ_EXTENSION)
                    )
        except OSError as e:
            logger.error(f"❌ Failed to read quiz structure: {e}")
            raise StorageError(f"Failed to read quiz structure: {e}")

        return structure

    def read_quiz(self, location: QuizLocation) -> QuizDocument:
        """
        Load and validate one quiz document

        Raises:
            NotFoundError: If the location does not resolve to a file
            InvalidFormatError: If the document is not a valid quiz
        """
        path = self._quiz_path(location)
        if not path.is_file():
            raise NotFoundError(f"Quiz not found: {location.path}")

        try:
            data = read_json(path)
        except StorageError as e:
            raise InvalidFormatError(f"Quiz file is not valid JSON: {location.path}") from e

        if not isinstance(data, dict):
            raise InvalidFormatError(f"Quiz file is not a JSON object: {location.path}")

        try:
            return QuizDocument.model_validate(data)
        except ValidationError as e:
            logger.warning(f"⚠️ Invalid quiz document {location.path}: {e.error_count()} errors")
            raise InvalidFormatError(f"Invalid quiz format in {location.path}") from e

    def write_quiz(
        self,
        category: str,
        subcategory: str,
        desired_filename: str,
        document: QuizDocument
    ) -> str:
        """
        Store a new quiz under a sanitized, collision-free file name

        Returns:
            The final file name (e.g. "algebra-1.json")
        """
        directory = self._subcategory_path(category, subcategory)
        ensure_dir(directory)

        base_name = slugify_filename(desired_filename)
        final_name = base_name

        if (directory / final_name).exists():
            stem = base_name[: -len(QUIZ_EXTENSION)]
            counter = 1
            while (directory / f"{stem}-{counter}{QUIZ_EXTENSION}").exists():
                counter += 1
            final_name = f"{stem}-{counter}{QUIZ_EXTENSION}"

        write_json(directory / final_name, document.model_dump(exclude_none=True))
        logger.info(f"💾 Saved quiz {category}/{subcategory}/{final_name}")

        return final_name

    def update_quiz(self, location: QuizLocation, document: QuizDocument) -> None:
        """Replace the content of an existing quiz"""
        path = self._quiz_path(location)
        if not path.is_file():
            raise NotFoundError(f"Quiz not found: {location.path}")

        write_json(path, document.model_dump(exclude_none=True))
        logger.info(f"✏️ Updated quiz {location.path}")

    def rename_quiz(self, location: QuizLocation, new_filename: str) -> str:
        """
        Rename a quiz file within its subcategory

        The new name gets the .json extension if it lacks one.

        Returns:
            The final file name

        Raises:
            NotFoundError: If the quiz does not exist
            InvalidInputError: If another quiz already uses the new name
        """
        source = self._quiz_path(location)
        final_name = validate_segment(new_filename, "Dateiname")
        if not final_name.endswith(QUIZ_EXTENSION):
            final_name += QUIZ_EXTENSION
        target = source.parent / final_name

        if not source.is_file():
            raise NotFoundError(f"Quiz not found: {location.path}")

        if target.name == source.name:
            return final_name

        if target.exists():
            raise InvalidInputError(f"Ein Quiz mit dem Namen {final_name} existiert bereits")

        try:
            source.rename(target)
        except OSError as e:
            raise StorageError(f"Failed to rename quiz {location.path}: {e}")

        logger.info(f"✏️ Renamed quiz {location.path} -> {final_name}")
        return final_name

    def delete_quiz(self, location: QuizLocation) -> None:
        """Delete one quiz file"""
        delete_file(self._quiz_path(location))
        logger.info(f"🗑️ Deleted quiz {location.path}")

    # ==================== NAMESPACE ENTRIES ====================

    def create_category(self, name: str) -> None:
        """Create a category directory; existing categories are left alone"""
        ensure_dir(self._category_path(name))
        logger.info(f"📁 Category ready: {name}")

    def create_subcategory(self, category: str, name: str) -> None:
        """Create a subcategory (and its category) if missing"""
        ensure_dir(self._subcategory_path(category, name))
        logger.info(f"📁 Subcategory ready: {category}/{name}")

    def _namespace_path(
        self,
        kind: str,
        name: str,
        parent_category: Optional[str]
    ) -> Path:
        if kind == "category":
            return self._category_path(name)
        if kind == "subcategory":
            if not parent_category:
                raise InvalidInputError("Ungültiger Typ oder fehlende Kategorie")
            return self._subcategory_path(parent_category, name)
        raise InvalidInputError("Ungültiger Typ oder fehlende Kategorie")

    def rename_namespace_entry(
        self,
        kind: str,
        old_name: str,
        new_name: str,
        parent_category: Optional[str] = None
    ) -> None:
        """
        Rename a category or subcategory directory

        Args:
            kind: "category" or "subcategory"
            old_name: Current directory name
            new_name: New directory name
            parent_category: Required when kind is "subcategory"
        """
        source = self._namespace_path(kind, old_name, parent_category)
        target = self._namespace_path(kind, new_name, parent_category)

        if not source.is_dir():
            raise NotFoundError(f"{kind} not found: {old_name}")

        if target == source:
            return

        if target.exists():
            raise InvalidInputError(f"{new_name} existiert bereits")

        try:
            source.rename(target)
        except OSError as e:
            raise StorageError(f"Failed to rename {kind} {old_name}: {e}")

        logger.info(f"✏️ Renamed {kind} {old_name} -> {new_name}")

    def delete_namespace_entry(
        self,
        kind: str,
        name: str,
        parent_category: Optional[str] = None
    ) -> None:
        """
        Recursively delete a category or subcategory with all quizzes beneath it

        Irreversible; callers are expected to confirm with the user first.
        """
        path = self._namespace_path(kind, name, parent_category)

        if not path.is_dir():
            raise NotFoundError(f"{kind} not found: {name}")

        try:
            shutil.rmtree(path)
        except OSError as e:
            raise StorageError(f"Failed to delete {kind} {name}: {e}")

        logger.info(f"🗑️ Deleted {kind} {name}")
