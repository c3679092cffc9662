"""
Tests for the shared HTTP client.
"""
import threading

import pytest
import requests

import backend_client
from exceptions import ApiError, NotFoundError, UnauthorizedError


def test_get_returns_decoded_json(fake_session, make_response):
    """GET decodes the JSON body."""
    fake_session.request.return_value = make_response(200, [{"id": 1}])
    assert backend_client.get("/fee/coach") == [{"id": 1}]


def test_request_builds_url_and_drops_none_params(fake_session, make_response):
    """None params are not sent and the path is joined to BASE_URL."""
    fake_session.request.return_value = make_response(200, {})
    backend_client.get("/cardio/7", params={"startDate": "2026-01-01", "endDate": None})

    args, kwargs = fake_session.request.call_args
    assert args == ("GET", f"{backend_client.BASE_URL}/cardio/7")
    assert kwargs["params"] == {"startDate": "2026-01-01"}


def test_bearer_token_comes_from_the_provider(fake_session, make_response):
    """The registered provider's token goes into the Authorization header."""
    backend_client.set_token_provider(lambda: "abc")
    fake_session.request.return_value = make_response(200, {})
    backend_client.get("/auth/check-status")

    headers = fake_session.request.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer abc"


def test_explicit_token_wins(fake_session, make_response):
    """A token passed per call overrides the provider."""
    backend_client.set_token_provider(lambda: "someone-else")
    fake_session.request.return_value = make_response(200, {})
    backend_client.get("/auth/check-status", token="mine")

    headers = fake_session.request.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer mine"


def test_concurrent_sessions_keep_their_own_tokens(fake_session, make_response):
    """Two sessions calling at the same time never send each other's token."""
    local = threading.local()
    backend_client.set_token_provider(lambda: getattr(local, "token", None))
    barrier = threading.Barrier(2)
    seen = []
    lock = threading.Lock()

    def record(method, url, **kwargs):
        with lock:
            seen.append((threading.current_thread().name, kwargs["headers"].get("Authorization")))
        return make_response(200, {})

    fake_session.request.side_effect = record

    def run(token):
        local.token = token
        barrier.wait()
        for _ in range(20):
            backend_client.get("/auth/check-status")

    threads = [threading.Thread(target=run, args=(tok,), name=tok) for tok in ("token-a", "token-b")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(seen) == 40
    assert all(header == f"Bearer {name}" for name, header in seen)


def test_env_login_is_the_fallback(fake_session, make_response, monkeypatch):
    """Without a session token the client logs in once with env credentials."""
    monkeypatch.setattr(backend_client, "API_EMAIL", "svc@example.com")
    monkeypatch.setattr(backend_client, "API_PASSWORD", "secret")
    backend_client.set_token_provider(lambda: None)
    fake_session.post.return_value = make_response(200, {"token": "svc"})
    fake_session.request.return_value = make_response(200, {})

    backend_client.get("/exercise-catalog")
    backend_client.get("/exercise-catalog")

    assert fake_session.post.call_count == 1
    assert fake_session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer svc"

    backend_client.set_token_provider(lambda: "user-token")
    backend_client.get("/exercise-catalog")
    assert fake_session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer user-token"



def test_no_token_no_header(fake_session, make_response):
    """Without a token no Authorization header is sent."""
    fake_session.request.return_value = make_response(200, {})
    backend_client.get("/exercise-catalog")
    assert "Authorization" not in fake_session.request.call_args.kwargs["headers"]


def test_empty_body_returns_none(fake_session, make_response):
    """204-style empty responses decode to None."""
    fake_session.request.return_value = make_response(204)
    assert backend_client.delete("/cardio/3") is None


def test_server_message_is_used(fake_session, make_response):
    """The backend's message field becomes the error message."""
    fake_session.request.return_value = make_response(400, {"message": "Monto inválido"})
    with pytest.raises(ApiError) as excinfo:
        backend_client.post("/payments", json={})
    assert excinfo.value.message == "Monto inválido"
    assert excinfo.value.http_status == 400


def test_message_list_is_joined(fake_session, make_response):
    """Validation messages sent as a list are joined."""
    fake_session.request.return_value = make_response(400, {"message": ["amount must be positive", "feeId required"]})
    with pytest.raises(ApiError) as excinfo:
        backend_client.post("/payments", json={})
    assert excinfo.value.message == "amount must be positive; feeId required"


def test_401_forgets_env_token(fake_session, make_response, monkeypatch):
    """An expired env-credential token raises UnauthorizedError and is dropped."""
    monkeypatch.setattr(backend_client, "_env_token", "expired")
    fake_session.request.return_value = make_response(401, {"message": "Unauthorized"})
    with pytest.raises(UnauthorizedError):
        backend_client.get("/auth/check-status")
    assert backend_client._env_token is None



def test_404_raises_not_found(fake_session, make_response):
    """404 maps to NotFoundError, still an ApiError."""
    fake_session.request.return_value = make_response(404)
    with pytest.raises(NotFoundError) as excinfo:
        backend_client.get("/meal-plans/99")
    assert isinstance(excinfo.value, ApiError)


def test_transport_error_becomes_api_error(fake_session):
    """Connection failures are wrapped in ApiError."""
    fake_session.request.side_effect = requests.ConnectionError("boom")
    with pytest.raises(ApiError) as excinfo:
        backend_client.get("/fee/coach")
    assert "Could not reach the server" in excinfo.value.message


def test_unwrap_list_shapes():
    """Bare arrays, {value: [...]} and other wrappers all unwrap."""
    assert backend_client.unwrap_list([1, 2]) == [1, 2]
    assert backend_client.unwrap_list({"value": [3]}) == [3]
    assert backend_client.unwrap_list({"data": [4], "count": 1}) == [4]
    assert backend_client.unwrap_list({"message": "ok"}) == []
    assert backend_client.unwrap_list(None) == []
