"""
Tests for the HTTP layer (`api/`).

Runs the FastAPI app against the in-memory Supabase double through
dependency overrides. Covers the status-code mapping, CORS headers and
preflight, and the quiz-session and calculator endpoints.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api import __version__
from api.config import Settings
from api.dependencies import (
    get_bracket_config,
    get_settings,
    get_submission_pipeline,
    get_supabase,
)
from api.main import app
from repositories.quiz_repository import QuizRepository
from repositories.rate_limit_repository import RateLimitRepository
from repositories.submission_repository import SubmissionRepository
from services.rate_limit_service import RateLimiter
from services.submission_service import SubmissionPipeline


@pytest.fixture
def client(supabase, bracket_config):
    app.dependency_overrides[get_settings] = lambda: Settings()
    app.dependency_overrides[get_bracket_config] = lambda: bracket_config
    app.dependency_overrides[get_supabase] = lambda: supabase
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _start_session(client: TestClient) -> str:
    response = client.post("/api/v1/quiz/sessions", json={"utm_source": "google"})
    assert response.status_code == 201
    return response.json()["session_id"]


# ============================================================================
# Health
# ============================================================================

def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "version": __version__,
        "service": "miami-lead-engine-api",
    }


# ============================================================================
# Submissions
# ============================================================================

def test_contact_accepted(client: TestClient, supabase, contact_payload) -> None:
    response = client.post(
        "/api/v1/submit-contact",
        json=contact_payload,
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert response.headers["access-control-allow-origin"] == "*"
    [limit] = supabase.rows("form_rate_limits")
    assert limit["ip_address"] == "203.0.113.7"


def test_contact_invalid_lists_violations(client: TestClient) -> None:
    response = client.post(
        "/api/v1/submit-contact",
        json={"firstName": "Dana", "lastName": "Levy", "email": "dana@", "phone": "abc"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Please correct the highlighted fields."
    assert {v["field"] for v in body["violations"]} == {"email", "phone"}


def test_non_json_body_is_invalid(client: TestClient) -> None:
    response = client.post(
        "/api/v1/submit-lead",
        content=b"email=guide@gmail.com",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 400
    assert response.json()["violations"] == [
        {"field": "body", "message": "Payload must be a JSON object"}
    ]


def test_lead_rate_limited(client: TestClient) -> None:
    assert client.post("/api/v1/submit-lead", json={"email": "guide@gmail.com"}).status_code == 200

    response = client.post("/api/v1/submit-lead", json={"email": "guide@gmail.com"})

    assert response.status_code == 429
    assert response.json()["error"] == (
        "Too many submissions. Please wait 2 minutes before submitting again."
    )
    assert 1 <= int(response.headers["retry-after"]) <= 120
    assert response.headers["access-control-allow-origin"] == "*"


def test_lead_duplicate(client: TestClient, supabase) -> None:
    supabase.tables["lead_submissions"].append({"id": "existing", "email": "guide@gmail.com"})

    response = client.post("/api/v1/submit-lead", json={"email": "guide@gmail.com"})

    assert response.status_code == 409
    assert "already signed up" in response.json()["error"]


def test_quiz_duplicate_after_window(
    client: TestClient, supabase, clock, bracket_config, quiz_payload
) -> None:
    app.dependency_overrides[get_submission_pipeline] = lambda: SubmissionPipeline(
        config=bracket_config,
        rate_limiter=RateLimiter(
            RateLimitRepository(supabase), Settings().rate_limit_windows, clock=clock
        ),
        submissions=SubmissionRepository(supabase),
        quiz_sessions=QuizRepository(supabase),
        clock=clock,
    )
    session_id = _start_session(client)
    assert client.post("/api/v1/submit-quiz", json=quiz_payload(session_id)).status_code == 200
    clock.advance(181)

    response = client.post("/api/v1/submit-quiz", json=quiz_payload(session_id))

    assert response.status_code == 409
    assert response.json() == {
        "error": "You've already completed the quiz with this email address."
    }
    assert len(supabase.rows("quiz_leads")) == 1


def test_store_failure_is_generic_500(client: TestClient, supabase, contact_payload) -> None:
    supabase.fail_on("contact_submissions", "insert")

    response = client.post("/api/v1/submit-contact", json=contact_payload)

    assert response.status_code == 500
    assert response.json() == {"error": "Something went wrong. Please try again."}


def test_quiz_flow(client: TestClient, supabase, quiz_payload) -> None:
    session_id = _start_session(client)

    answer = client.post(
        f"/api/v1/quiz/sessions/{session_id}/answers",
        json={"step": 1, "question_key": "frustration", "answer_value": ["winters", "taxes"]},
    )
    assert answer.status_code == 201
    assert answer.json()["answer_value"] == "taxes,winters"

    response = client.post("/api/v1/submit-quiz", json=quiz_payload(session_id))

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "tier": "tier_a_hot_lead",
        "annual_savings": 35800,
    }
    assert len(supabase.rows("quiz_leads")) == 1


def test_quiz_unknown_session_is_500(client: TestClient, quiz_payload) -> None:
    response = client.post("/api/v1/submit-quiz", json=quiz_payload("never-started"))

    assert response.status_code == 500


@pytest.mark.parametrize("path", ["/api/v1/submit-contact", "/api/v1/submit-lead", "/api/v1/submit-quiz"])
def test_preflight(client: TestClient, path: str) -> None:
    response = client.options(
        path,
        headers={"Origin": "https://miami.example", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-headers"] == (
        "authorization, x-client-info, apikey, content-type"
    )


def test_missing_credentials_is_generic_500(supabase, bracket_config, contact_payload) -> None:
    app.dependency_overrides[get_settings] = lambda: Settings()
    app.dependency_overrides[get_bracket_config] = lambda: bracket_config
    try:
        response = TestClient(app).post("/api/v1/submit-contact", json=contact_payload)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Something went wrong. Please try again."}
    assert response.headers["access-control-allow-origin"] == "*"


# ============================================================================
# Quiz sessions
# ============================================================================

def test_start_session_derives_device(client: TestClient) -> None:
    response = client.post(
        "/api/v1/quiz/sessions",
        json={"session_id": "visit-42"},
        headers={"User-Agent": "Mozilla/5.0 (iPad; CPU OS 17_4 like Mac OS X) Safari/604.1"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["session_id"] == "visit-42"
    assert body["device_type"] == "tablet"
    assert body["browser"] == "Safari"


def test_answer_for_unknown_session_is_404(client: TestClient) -> None:
    response = client.post(
        "/api/v1/quiz/sessions/missing/answers",
        json={"step": 1, "question_key": "timeline", "answer_value": "0-6mo"},
    )

    assert response.status_code == 404


# ============================================================================
# Calculator
# ============================================================================

def test_calculator(client: TestClient) -> None:
    response = client.post(
        "/api/v1/calculator/savings",
        json={"income_bracket": "250k_400k", "monthly_cost": "3.5k_5k"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["annual_savings"] == 35800
    assert body["tax_savings"] == 22750
    assert body["retirement_savings"] is None
    assert body["headline_display"] == "$35,800"


def test_calculator_with_age(client: TestClient) -> None:
    response = client.post(
        "/api/v1/calculator/savings",
        json={"income_bracket": "250k_400k", "monthly_cost": "3.5k_5k", "age_bracket": "60_plus"},
    )

    body = response.json()
    assert body["retirement_savings"] == 74106
    assert body["years_until_retirement"] == 2
    assert body["headline_display"] == "$74,106"


def test_calculator_rejects_unknown_bracket(client: TestClient) -> None:
    response = client.post(
        "/api/v1/calculator/savings",
        json={"income_bracket": "5m_plus", "monthly_cost": "3.5k_5k"},
    )

    assert response.status_code == 422
