from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from quiz_trainer.core.errors import InvalidInputError, NotFoundError
from quiz_trainer.services.user_directory import UserDirectory


class ManualClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def users(tmp_path: Path, clock: ManualClock) -> UserDirectory:
    return UserDirectory(tmp_path / "users.json", clock=clock)


def test_upsert_orders_by_last_use(users: UserDirectory, clock: ManualClock) -> None:
    users.upsert("anna")
    clock.advance(minutes=1)
    users.upsert("  ben ")
    assert [u.name for u in users.list()] == ["ben", "anna"]

    clock.advance(minutes=1)
    users.upsert("anna")
    assert [u.name for u in users.list()] == ["anna", "ben"]
    assert users.get("anna").lastUsed == clock.now


@pytest.mark.parametrize("name", [None, "", "   "])
def test_upsert_rejects_empty_names(users: UserDirectory, name) -> None:
    with pytest.raises(InvalidInputError, match="Valid name is required"):
        users.upsert(name)


def test_remove_ignores_unknown(users: UserDirectory) -> None:
    users.upsert("anna")
    users.remove("niemand")
    users.remove("anna")
    assert users.list() == []
    with pytest.raises(NotFoundError):
        users.get("anna")


def test_missing_or_corrupt_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "users.json"
    assert UserDirectory(path).list() == []
    path.write_text("[{\"name\": \"\"}, 42, ", encoding="utf-8")
    assert UserDirectory(path).list() == []


def test_corrupt_file_is_moved_aside_before_saving(tmp_path: Path, clock: ManualClock) -> None:
    path = tmp_path / "users.json"
    original = "[{\"name\": \"anna\", \"lastUsed\": "
    path.write_text(original, encoding="utf-8")
    users = UserDirectory(path, clock=clock)

    users.upsert("ben")

    backups = list(tmp_path.glob("users.json.corrupt-*"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == original
    assert [u.name for u in users.list()] == ["ben"]


def test_non_list_file_is_moved_aside(tmp_path: Path, clock: ManualClock) -> None:
    path = tmp_path / "users.json"
    path.write_text("{\"anna\": {}}", encoding="utf-8")

    assert UserDirectory(path, clock=clock).list() == []
    assert not path.exists()
    assert len(list(tmp_path.glob("users.json.corrupt-*"))) == 1


def test_login_session_expires_after_configured_hours(tmp_path: Path, clock: ManualClock) -> None:
    users = UserDirectory(tmp_path / "users.json", session_hours=4, clock=clock)
    session = users.login("anna")

    assert session.username == "anna"
    assert session.expiresAt - session.loginTime == timedelta(hours=4)
    assert users.check_session(session)

    clock.advance(hours=3, minutes=59)
    assert users.check_session(session)
    clock.advance(minutes=1)
    assert not users.check_session(session)
