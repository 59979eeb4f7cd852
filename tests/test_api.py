"""Tests for the FastAPI endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from reviewguard.api.main import create_app, field_error
from reviewguard.api.routes import retry_after_seconds

STRONG = "Str0ng!Pass"

SIGN_UP = {
    "name": "Jane Doe",
    "email": "Jane@Example.com",
    "password": STRONG,
    "confirm_password": STRONG,
    "phone": "(555) 123-4567",
}

REVIEW = {
    "doctor_name": "Dr. Jane Smith",
    "doctor_specialization": "Cardiology",
    "rating": 5,
    "review_text": "Listened carefully and explained everything.",
}


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def trusted_client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("RG_TRUSTED_CLIENT_KEY_HEADER", "X-Client-Key")
    return TestClient(create_app())


@pytest.fixture
def client_with_api_key(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("RG_API_KEY", "sekret")
    return TestClient(create_app())


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "version" in data

    def test_reports_rate_limit_policies(self, client):
        limits = client.get("/health").json()["rate_limits"]
        assert limits["auth"] == {"max_attempts": 5, "window_ms": 900_000}
        assert limits["general"] == {"max_attempts": 10, "window_ms": 300_000}


class TestSignUp:
    def test_valid(self, client):
        resp = client.post("/api/v1/signup", json=SIGN_UP)
        assert resp.status_code == 200
        data = resp.json()
        assert data["accepted"] is True
        assert data["outcome"]["sanitized_data"]["email"] == "jane@example.com"

    def test_password_never_echoed(self, client):
        resp = client.post("/api/v1/signup", json=SIGN_UP)
        assert "password" not in resp.json()["outcome"]["sanitized_data"]
        assert STRONG not in resp.text

    def test_validation_failure_is_422(self, client):
        resp = client.post("/api/v1/signup", json={**SIGN_UP, "confirm_password": "Other1!x"})
        assert resp.status_code == 422
        data = resp.json()
        assert data["accepted"] is False
        assert data["outcome"]["field_errors"] == {"confirm_password": "Passwords do not match"}

    def test_suspicious_input_is_400(self, client):
        resp = client.post("/api/v1/signup", json={**SIGN_UP, "name": "<script>alert(1)</script>"})
        assert resp.status_code == 400
        data = resp.json()
        assert "name" in data["suspicious"]
        assert data["outcome"] is None
        assert "<script>" not in resp.text

    def test_rate_limited_after_five_attempts(self, client):
        codes = [client.post("/api/v1/signup", json=SIGN_UP).status_code for _ in range(6)]
        assert codes == [200] * 5 + [429]

    def test_rate_limited_response(self, client):
        for _ in range(5):
            client.post("/api/v1/signup", json=SIGN_UP)
        resp = client.post("/api/v1/signup", json=SIGN_UP)
        assert resp.status_code == 429
        assert 0 < int(resp.headers["Retry-After"]) <= 900
        assert resp.json()["rate_limited"] is True

    def test_rotating_client_header_still_limited(self, client):
        codes = [
            client.post(
                "/api/v1/signup",
                json={**SIGN_UP, "email": f"user{i}@example.com"},
                headers={"X-Client-Key": f"k{i}"},
            ).status_code
            for i in range(6)
        ]
        assert codes == [200] * 5 + [429]

    def test_trusted_header_keys_clients_separately(self, trusted_client):
        for _ in range(6):
            trusted_client.post("/api/v1/signup", json=SIGN_UP, headers={"X-Client-Key": "one"})
        resp = trusted_client.post(
            "/api/v1/signup",
            json={**SIGN_UP, "email": "other@example.com"},
            headers={"X-Client-Key": "two"},
        )
        assert resp.status_code == 200

    def test_same_email_limited_across_trusted_clients(self, trusted_client):
        codes = [
            trusted_client.post(
                "/api/v1/signup", json=SIGN_UP, headers={"X-Client-Key": f"k{i}"},
            ).status_code
            for i in range(6)
        ]
        assert codes == [200] * 5 + [429]

    def test_malformed_trusted_header_falls_back_to_ip(self, trusted_client):
        for i in range(5):
            trusted_client.post(
                "/api/v1/signup",
                json={**SIGN_UP, "email": f"user{i}@example.com"},
                headers={"X-Client-Key": f"bad key {i}"},
            )
        resp = trusted_client.post("/api/v1/signup", json={**SIGN_UP, "email": "new@example.com"})
        assert resp.status_code == 429

    def test_wrong_type_is_422_field_list(self, client):
        resp = client.post("/api/v1/signup", json={**SIGN_UP, "phone": None})
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail[0]["field"] == "phone"
        assert detail[0]["location"] == "body"


class TestSignIn:
    def test_valid(self, client):
        resp = client.post("/api/v1/signin", json={"email": "a@b.com", "password": "x"})
        assert resp.status_code == 200

    def test_empty(self, client):
        resp = client.post("/api/v1/signin", json={})
        assert resp.status_code == 422
        assert set(resp.json()["outcome"]["errors"]) == {"email", "password"}

    def test_shares_auth_limit_with_sign_up(self, client):
        for _ in range(5):
            client.post("/api/v1/signup", json=SIGN_UP)
        resp = client.post("/api/v1/signin", json={"email": "a@b.com", "password": "x"})
        assert resp.status_code == 429

    def test_rotating_client_header_cannot_dodge_limit(self, client):
        codes = [
            client.post(
                "/api/v1/signin",
                json={"email": "a@b.com", "password": f"guess-{i}"},
                headers={"X-Client-Key": f"k{i}"},
            ).status_code
            for i in range(20)
        ]
        assert codes[:5] == [200] * 5
        assert set(codes[5:]) == {429}


class TestReviews:
    def test_valid(self, client):
        resp = client.post("/api/v1/reviews", json=REVIEW)
        assert resp.status_code == 200
        assert resp.json()["outcome"]["sanitized_data"]["rating"] == 5

    def test_missing_rating(self, client):
        resp = client.post("/api/v1/reviews", json={"doctor_name": "Dr. Who"})
        assert resp.status_code == 422
        assert "rating" in resp.json()["outcome"]["errors"]

    def test_non_numeric_rating_rejected_by_model(self, client):
        resp = client.post("/api/v1/reviews", json={**REVIEW, "rating": "great"})
        assert resp.status_code == 422
        assert resp.json()["detail"][0]["field"] == "rating"

    def test_general_limit(self, client):
        codes = [client.post("/api/v1/reviews", json=REVIEW).status_code for _ in range(11)]
        assert codes == [200] * 10 + [429]

    def test_traversal_in_location(self, client):
        resp = client.post("/api/v1/reviews", json={**REVIEW, "doctor_location": "../../etc"})
        assert resp.status_code == 400


class TestDetect:
    def test_suspicious(self, client):
        resp = client.post("/api/v1/detect", json={"text": "' OR 1=1; --"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["is_suspicious"] is True
        assert "Potential SQL injection detected" in data["reasons"]

    def test_clean(self, client):
        resp = client.post("/api/v1/detect", json={"text": "Kind and patient."})
        assert resp.json() == {"is_suspicious": False, "reasons": []}

    def test_missing_text(self, client):
        assert client.post("/api/v1/detect", json={}).status_code == 422


class TestPasswordSuggestions:
    def test_default_count(self, client):
        resp = client.get("/api/v1/password-suggestions")
        assert resp.status_code == 200
        assert len(resp.json()["suggestions"]) == 3

    def test_count(self, client):
        resp = client.get("/api/v1/password-suggestions", params={"count": 5})
        suggestions = resp.json()["suggestions"]
        assert len(suggestions) == 5
        assert all(len(s) == 12 for s in suggestions)

    def test_configured_weak_words_applied(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RG_WEAK_WORDS", '["e", "x"]')
        app = create_app()
        policy = app.state.engine.forms.password
        resp = TestClient(app).get("/api/v1/password-suggestions", params={"count": 20})
        for suggestion in resp.json()["suggestions"]:
            assert not set(suggestion.lower()) & {"e", "x"}
            assert policy.validate(suggestion).is_valid

    @pytest.mark.parametrize("count", [0, 21])
    def test_count_bounds(self, client, count):
        resp = client.get("/api/v1/password-suggestions", params={"count": count})
        assert resp.status_code == 422


class TestSecurity:
    def test_api_key_required_when_set(self, client_with_api_key):
        resp = client_with_api_key.post("/api/v1/detect", json={"text": "hi"})
        assert resp.status_code == 401

    def test_api_key_accepted(self, client_with_api_key):
        resp = client_with_api_key.post(
            "/api/v1/detect", json={"text": "hi"}, headers={"X-API-Key": "sekret"},
        )
        assert resp.status_code == 200

    def test_wrong_api_key_rejected(self, client_with_api_key):
        resp = client_with_api_key.get(
            "/api/v1/password-suggestions", headers={"X-API-Key": "wrong"},
        )
        assert resp.status_code == 401

    def test_health_open_with_api_key(self, client_with_api_key):
        assert client_with_api_key.get("/health").status_code == 200

    def test_security_headers(self, client):
        resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["Cache-Control"] == "no-store"

    def test_request_id_propagated(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc-123_def"})
        assert resp.headers["X-Request-ID"] == "abc-123_def"

    def test_request_id_in_verdict(self, client):
        resp = client.post("/api/v1/signup", json=SIGN_UP, headers={"X-Request-ID": "rid-7"})
        assert resp.json()["request_id"] == "rid-7"

    def test_malicious_request_id_sanitized(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "evil;Injected:pwned"})
        rid = resp.headers["X-Request-ID"]
        assert ";" not in rid
        assert ":" not in rid

    def test_response_time_header(self, client):
        assert "X-Response-Time-Ms" in client.get("/health").headers

    def test_body_limit(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RG_MAX_REQUEST_BODY_BYTES", "64")
        small = TestClient(create_app())
        resp = small.post("/api/v1/detect", json={"text": "x" * 200})
        assert resp.status_code == 413


class TestRetryAfter:
    @pytest.mark.parametrize("ms, seconds", [(1, 1), (1000, 1), (1001, 2), (900_000, 900), (0, 1)])
    def test_rounds_up(self, ms, seconds):
        assert retry_after_seconds(ms) == seconds


class TestMalformedRequests:
    def test_query_errors_keep_their_location(self, client):
        resp = client.get("/api/v1/password-suggestions", params={"count": 0})
        error = resp.json()["detail"][0]
        assert (error["field"], error["location"]) == ("count", "query")

    def test_request_id_included(self, client):
        resp = client.post(
            "/api/v1/reviews",
            json={**REVIEW, "rating": "great"},
            headers={"X-Request-ID": "rid-9"},
        )
        assert resp.json()["request_id"] == "rid-9"

    def test_nested_location_joined(self):
        err = {"loc": ("body", "items", 0), "msg": "bad", "type": "int_parsing", "input": "x"}
        assert field_error(err) == {
            "field": "items.0", "location": "body", "message": "bad", "type": "int_parsing",
        }

    def test_whole_body_error(self):
        assert field_error({"loc": ("body",), "msg": "Field required"})["field"] == "body"
