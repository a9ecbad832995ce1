"""
History Store
Per-user, most-recent-first log of completed quiz sessions, one JSON file per user
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote, unquote

from pydantic import ValidationError

from quiz_trainer.core.errors import NotFoundError, StorageError
from quiz_trainer.db.file_store import delete_file, read_json, write_json
from quiz_trainer.models.quiz_sessions import QuizSession

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 1000


def _started_at(session: QuizSession) -> datetime:
    started = session.startedAt
    if started.tzinfo is None:
        started = started.replace(tzinfo=timezone.utc)
    return started


def user_file_key(user: str) -> str:
    """Filesystem-safe file name for a user's history"""
    return quote(user, safe="") + ".json"


class HistoryStore:
    """Append-only session history, capped per user"""

    def __init__(self, root: Path, max_entries: int = DEFAULT_HISTORY_LIMIT):
        """
        Initialize history store

        Args:
            root: Directory holding one history file per user
            max_entries: Sessions kept per user (oldest evicted first)
        """
        self.root = Path(root)
        self.max_entries = max_entries

    def _user_path(self, user: str) -> Path:
        return self.root / user_file_key(user)

    def _load(self, path: Path) -> List[QuizSession]:
        """Read one history file; unreadable or missing files count as empty"""
        try:
            data = read_json(path)
        except NotFoundError:
            return []
        except StorageError as e:
            logger.warning(f"⚠️ Treating unreadable history {path.name} as empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"⚠️ History file {path.name} is not a list, treating as empty")
            return []

        sessions = []
        for item in data:
            try:
                sessions.append(QuizSession.model_validate(item))
            except ValidationError:
                logger.warning(f"⚠️ Skipping malformed session entry in {path.name}")
        return sessions

    def _save(self, user: str, sessions: List[QuizSession]) -> None:
        write_json(
            self._user_path(user),
            [s.model_dump(mode="json") for s in sessions]
        )

    def append(self, session: QuizSession) -> None:
        """Insert a session at the head of its user's history, trimming to the cap"""
        sessions = self._load(self._user_path(session.user))
        sessions = [session] + [s for s in sessions if s.id != session.id]
        evicted = len(sessions) - self.max_entries
        if evicted > 0:
            sessions = sessions[:self.max_entries]
            logger.info(f"🧹 Evicted {evicted} oldest sessions for {session.user}")
        self._save(session.user, sessions)
        logger.info(f"📝 Recorded session {session.id} for {session.user}")

    def list_for_user(self, user: str, limit: Optional[int] = None) -> List[QuizSession]:
        """Sessions of one user, most recent first"""
        sessions = self._load(self._user_path(user))
        return sessions[:limit] if limit is not None else sessions

    def list_all(self, limit: Optional[int] = None) -> List[QuizSession]:
        """Sessions of every user, sorted by start time descending"""
        if not self.root.is_dir():
            return []

        sessions: List[QuizSession] = []
        for path in sorted(self.root.glob("*.json")):
            sessions.extend(self._load(path))

        sessions.sort(key=_started_at, reverse=True)
        return sessions[:limit] if limit is not None else sessions

    def get(self, user: str, session_id: str) -> QuizSession:
        for session in self._load(self._user_path(user)):
            if session.id == session_id:
                return session
        raise NotFoundError(f"Session not found: {session_id}")

    def delete_one(self, user: str, session_id: str) -> None:
        """Remove one session; unknown ids are ignored"""
        sessions = self._load(self._user_path(user))
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) != len(sessions):
            self._save(user, remaining)
            logger.info(f"🗑️ Deleted session {session_id} of {user}")

    def delete_all(self, user: str) -> None:
        """Remove a user's whole history"""
        try:
            delete_file(self._user_path(user))
            logger.info(f"🗑️ Cleared history of {user}")
        except NotFoundError:
            pass

    def clear(self) -> None:
        """Remove every user's history"""
        if not self.root.is_dir():
            return
        for path in self.root.glob("*.json"):
            delete_file(path)
            logger.info(f"🗑️ Cleared history of {unquote(path.stem)}")
