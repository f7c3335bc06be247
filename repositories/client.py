"""
Supabase client initialization and query execution.

This module contains *only* the database connection setup and the shared
`execute_query` helper the repository modules use to run a query and map
gateway failures onto the domain error taxonomy.

The client is built lazily (first use, not import) so the application and its
tests can start without credentials; it is cached per (url, key, timeout).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from domain.errors import DuplicateError, TransientInfrastructureError

# PostgreSQL SQLSTATE for unique_violation.
UNIQUE_VIOLATION = "23505"


@lru_cache(maxsize=4)
def get_supabase_client(url: str, key: str, timeout_seconds: float) -> Client:
    """
    Official Supabase Python client for the given project.

    Every PostgREST call made through it is bounded by `timeout_seconds`;
    a timeout surfaces as httpx.TimeoutException and is mapped to
    TransientInfrastructureError by execute_query.
    """
    options = ClientOptions(postgrest_client_timeout=timeout_seconds)
    return create_client(url, key, options=options)


def execute_query(
    query: Any,
    action: str,
    duplicate_form_type: str | None = None,
    duplicate_email: str | None = None,
) -> list[dict[str, Any]]:
    """
    Execute a PostgREST query builder and return its rows.

    Args:
        query: A supabase-py request builder (anything with .execute())
        action: Short description for error messages ("insert quiz lead")
        duplicate_form_type: When set, a unique violation raises DuplicateError
            for this form type instead of a generic failure
        duplicate_email: Email reported on the DuplicateError

    Raises:
        DuplicateError: unique violation on an insert that opted in
        TransientInfrastructureError: any other gateway or network failure
    """
    try:
        response = query.execute()
    except APIError as e:
        if duplicate_form_type is not None and e.code == UNIQUE_VIOLATION:
            raise DuplicateError(duplicate_form_type, duplicate_email or "") from e
        raise TransientInfrastructureError(f"Failed to {action}: {e.message}") from e
    except httpx.HTTPError as e:
        raise TransientInfrastructureError(f"Failed to {action}: {e!r}") from e

    error = getattr(response, "error", None)
    if error:
        raise TransientInfrastructureError(f"Failed to {action}: {error}")

    rows = getattr(response, "data", None) or []
    if isinstance(rows, dict):
        return [rows]
    return list(rows)


__all__ = ["get_supabase_client", "execute_query", "UNIQUE_VIOLATION"]
