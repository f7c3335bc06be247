"""
Composition root.

Builds settings, the bracket config and the Supabase-backed services once per
process (or per request for the cheap wrappers) and hands them to the routers
through FastAPI dependencies. Tests replace any of these with
`app.dependency_overrides`.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends
from supabase import Client

from api.config import Settings, load_settings
from domain.bracket_config import BracketConfig, load_bracket_config
from repositories.client import get_supabase_client
from repositories.quiz_repository import QuizRepository
from repositories.rate_limit_repository import RateLimitRepository
from repositories.submission_repository import SubmissionRepository
from services.quiz_session_service import QuizSessionService
from services.rate_limit_service import RateLimiter
from services.submission_service import SubmissionPipeline


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def get_bracket_config() -> BracketConfig:
    """Loaded once; a bad table fails the first request loudly, not silently."""
    return load_bracket_config(get_settings().bracket_config_path)


def get_supabase(settings: Settings = Depends(get_settings)) -> Client:
    url, key = settings.require_supabase_credentials()
    return get_supabase_client(url, key, settings.request_timeout_seconds)


def get_submission_pipeline(
    settings: Settings = Depends(get_settings),
    config: BracketConfig = Depends(get_bracket_config),
    client: Client = Depends(get_supabase),
) -> SubmissionPipeline:
    return SubmissionPipeline(
        config=config,
        rate_limiter=RateLimiter(RateLimitRepository(client), settings.rate_limit_windows),
        submissions=SubmissionRepository(client),
        quiz_sessions=QuizRepository(client),
    )


def get_quiz_session_service(client: Client = Depends(get_supabase)) -> QuizSessionService:
    return QuizSessionService(QuizRepository(client))
