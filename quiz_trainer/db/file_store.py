"""
JSON File Storage
Low-level helpers for the file tree that backs quizzes, history and users
FILE: quiz_trainer/db/file_store.py
"""
import json
import logging
import os
from pathlib import Path
from typing import Any

from quiz_trainer.core.config import Settings
from quiz_trainer.core.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)


def init_data_dir(settings: Settings) -> None:
    """Create the data root and its fixed sub-directories"""
    try:
        for path in (
            settings.quizzes_path,
            settings.history_path,
            settings.active_sessions_path,
        ):
            path.mkdir(parents=True, exist_ok=True)
        logger.info(f"✓ Data directory ready at {settings.data_path.resolve()}")
    except OSError as e:
        logger.error(f"✗ Failed to prepare data directory: {e}")
        raise StorageError(f"Failed to prepare data directory: {e}")


def ensure_dir(path: Path) -> None:
    """Create a directory (and parents) if missing"""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Failed to create directory {path}: {e}")


def read_json(path: Path) -> Any:
    """
    Read and decode a UTF-8 JSON document

    Raises:
        NotFoundError: If the file does not exist
        StorageError: If the file cannot be read or decoded
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise NotFoundError(f"File not found: {path.name}")
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"❌ Failed to read {path}: {e}")
        raise StorageError(f"Failed to read {path.name}: {e}")


def write_json(path: Path, data: Any) -> None:
    """
    Write a document as pretty-printed UTF-8 JSON

    The document is written to a sibling temp file first and moved into
    place, so readers never observe a half-written file.
    """
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"❌ Failed to write {path}: {e}")
        raise StorageError(f"Failed to write {path.name}: {e}")


def delete_file(path: Path) -> None:
    """Delete a single file, raising NotFoundError if it is absent"""
    try:
        path.unlink()
    except FileNotFoundError:
        raise NotFoundError(f"File not found: {path.name}")
    except OSError as e:
        raise StorageError(f"Failed to delete {path.name}: {e}")
