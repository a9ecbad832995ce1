"""
User Directory
Registry of known users ordered by last use, stored as a single JSON list
"""
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import ValidationError

from quiz_trainer.core.errors import InvalidInputError, NotFoundError, StorageError
from quiz_trainer.db.file_store import read_json, write_json
from quiz_trainer.models.user import LoginSession, User

logger = logging.getLogger(__name__)

DEFAULT_SESSION_HOURS = 4


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class UserDirectory:
    """Small user registry used for login suggestions"""

    def __init__(
        self,
        users_file: Path,
        session_hours: int = DEFAULT_SESSION_HOURS,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize user directory

        Args:
            users_file: JSON file holding the user list
            session_hours: Lifetime of a login session
            clock: Optional time source (defaults to UTC now)
        """
        self.users_file = Path(users_file)
        self.session_duration = timedelta(hours=session_hours)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _load(self) -> List[User]:
        try:
            data = read_json(self.users_file)
        except NotFoundError:
            return []
        except StorageError as e:
            self._quarantine(str(e))
            return []

        if not isinstance(data, list):
            self._quarantine("content is not a list")
            return []

        users = []
        for item in data:
            try:
                user = User.model_validate(item)
            except ValidationError:
                logger.warning("⚠️ Skipping malformed user entry")
                continue
            if user.name.strip():
                users.append(user)
        return users

    def _quarantine(self, reason: str) -> None:
        """
        Move an unusable user list aside so the next save cannot overwrite it

        Raises:
            StorageError: If the file cannot be moved
        """
        stamp = self.clock().strftime("%Y%m%d%H%M%S")
        backup = self.users_file.with_name(f"{self.users_file.name}.corrupt-{stamp}")
        try:
            self.users_file.rename(backup)
        except OSError as e:
            logger.error(f"❌ Could not move unreadable user list aside: {e}")
            raise StorageError(f"User list is unreadable and could not be backed up: {e}")

        logger.error(f"❌ Unreadable user list ({reason}) moved to {backup.name}")

    def _save(self, users: List[User]) -> None:
        write_json(self.users_file, [u.model_dump(mode="json") for u in users])

    def list(self) -> List[User]:
        """All users, most recently used first"""
        return sorted(self._load(), key=lambda u: _aware(u.lastUsed), reverse=True)

    def get(self, name: str) -> User:
        for user in self._load():
            if user.name == name:
                return user
        raise NotFoundError(f"User not found: {name}")

    def upsert(self, name: Optional[str]) -> User:
        """
        Register a login: insert the user or bump its lastUsed timestamp

        Raises:
            InvalidInputError: If the name is empty or whitespace only
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Valid name is required")

        name = name.strip()
        now = self.clock()
        users = self._load()

        user = User(name=name, lastUsed=now)
        existing = [i for i, u in enumerate(users) if u.name == name]
        if existing:
            users[existing[0]] = user
        else:
            users.append(user)
            logger.info(f"👤 New user: {name}")

        users.sort(key=lambda u: _aware(u.lastUsed), reverse=True)
        self._save(users)
        return user

    def remove(self, name: str) -> None:
        """Remove a user; unknown names are ignored and history is kept"""
        users = self._load()
        remaining = [u for u in users if u.name != name]
        if len(remaining) != len(users):
            self._save(remaining)
            logger.info(f"🗑️ Removed user {name}")

    # ==================== LOGIN SESSIONS ====================

    def login(self, name: Optional[str]) -> LoginSession:
        """Upsert the user and open a login session with an expiry time"""
        user = self.upsert(name)
        return LoginSession(
            username=user.name,
            loginTime=user.lastUsed,
            expiresAt=user.lastUsed + self.session_duration
        )

    def check_session(self, session: LoginSession, now: Optional[datetime] = None) -> bool:
        """A login session is valid until its expiry time"""
        now = now or self.clock()
        return _aware(now) < _aware(session.expiresAt)
