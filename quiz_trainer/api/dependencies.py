"""
Dependency Injection
Services are built per request from the cached settings
FILE: quiz_trainer/api/dependencies.py
"""
from fastapi import Depends

from quiz_trainer.core.config import Settings, get_settings
from quiz_trainer.services.history_store import HistoryStore
from quiz_trainer.services.quiz_generator import QuizGenerator
from quiz_trainer.services.quiz_session_service import QuizSessionService
from quiz_trainer.services.quiz_store import QuizStore
from quiz_trainer.services.user_directory import UserDirectory


def get_quiz_store(settings: Settings = Depends(get_settings)) -> QuizStore:
    """Dependency to get QuizStore instance"""
    return QuizStore(settings.quizzes_path)


def get_history_store(settings: Settings = Depends(get_settings)) -> HistoryStore:
    """Dependency to get HistoryStore instance"""
    return HistoryStore(settings.history_path, max_entries=settings.history_limit)


def get_user_directory(settings: Settings = Depends(get_settings)) -> UserDirectory:
    """Dependency to get UserDirectory instance"""
    return UserDirectory(settings.users_file, session_hours=settings.login_session_hours)


def get_quiz_generator(settings: Settings = Depends(get_settings)) -> QuizGenerator:
    """Dependency to get QuizGenerator instance"""
    return QuizGenerator(settings)


def get_session_service(
    settings: Settings = Depends(get_settings),
    quiz_store: QuizStore = Depends(get_quiz_store),
    history_store: HistoryStore = Depends(get_history_store)
) -> QuizSessionService:
    """Dependency to get QuizSessionService instance"""
    return QuizSessionService(
        quiz_store=quiz_store,
        history_store=history_store,
        runs_dir=settings.active_sessions_path
    )
