from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Optional

import requests
from dotenv import load_dotenv

from exceptions import ApiError, UnauthorizedError

load_dotenv()

BASE_URL = os.getenv("FITCOACH_API_URL", "https://fit-finance-backend-8lhp.onrender.com/api").rstrip("/")
API_EMAIL = os.getenv("FITCOACH_EMAIL")
API_PASSWORD = os.getenv("FITCOACH_PASSWORD")
TIMEOUT = float(os.getenv("FITCOACH_TIMEOUT", "10"))

logger = logging.getLogger("fitcoach.client")

_session = requests.Session()
_session.headers.update({"Content-Type": "application/json"})
# returns the signed-in user's token for whoever is calling (the UI reads it
# from st.session_state); never a single module-level token
_token_provider: Optional[Callable[[], Optional[str]]] = None
# service token from FITCOACH_EMAIL / FITCOACH_PASSWORD
_env_token: Optional[str] = None


def set_token_provider(provider: Optional[Callable[[], Optional[str]]]) -> None:
    """Register the callable that yields the caller's own token."""
    global _token_provider
    _token_provider = provider


def clear_token() -> None:
    """Forget the env-credential token so the next call logs in again."""
    global _env_token
    _env_token = None


def _env_login() -> Optional[str]:
    global _env_token
    if _env_token:
        return _env_token

    if not (API_EMAIL and API_PASSWORD):
        return None

    try:
        resp = _session.post(
            f"{BASE_URL}/auth/login",
            json={"email": API_EMAIL, "password": API_PASSWORD},
            timeout=TIMEOUT,
        )
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Automatic login for %s failed: %s", API_EMAIL, exc)
        return None

    _env_token = payload.get("token") or payload.get("access_token")
    return _env_token


def get_token() -> Optional[str]:
    """Return the caller's session token, falling back to the env-credential login."""
    if _token_provider is not None:
        token = _token_provider()
        if token:
            return token
    return _env_login()


def _url(path: str) -> str:
    if path.startswith("http://") or path.startswith("https://"):
        return path
    return f"{BASE_URL}/{path.lstrip('/')}"


def request(
    method: str,
    path: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    json: Any = None,
    token: Optional[str] = None,
) -> Any:
    """
    Issue a request against the coaching API and return the decoded JSON body.

    An explicit token wins over the one from get_token(). Raises UnauthorizedError
    on 401 (forgetting the env-credential token when that was used), NotFoundError
    on 404, ApiError for any other failure.
    """
    headers = {}
    token = token or get_token()
    if token:
        headers["Authorization"] = f"Bearer {token}"

    if params:
        params = {k: v for k, v in params.items() if v is not None}

    try:
        resp = _session.request(
            method,
            _url(path),
            params=params or None,
            json=json,
            headers=headers,
            timeout=TIMEOUT,
        )
    except requests.RequestException as exc:
        logger.error("%s %s failed: %s", method, path, exc)
        raise ApiError(f"Could not reach the server: {exc}") from exc

    if not resp.ok:
        error = ApiError.from_response(resp, default_message=f"{method} {path} failed ({resp.status_code})")
        if isinstance(error, UnauthorizedError) and token and token == _env_token:
            clear_token()
        logger.warning("%s %s -> %s: %s", method, path, resp.status_code, error.message)
        raise error

    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


def get(path: str, params: Optional[Dict[str, Any]] = None, token: Optional[str] = None) -> Any:
    return request("GET", path, params=params, token=token)


def post(path: str, json: Any = None, params: Optional[Dict[str, Any]] = None, token: Optional[str] = None) -> Any:
    return request("POST", path, params=params, json=json, token=token)


def put(path: str, json: Any = None) -> Any:
    return request("PUT", path, json=json)


def patch(path: str, json: Any = None) -> Any:
    return request("PATCH", path, json=json)


def delete(path: str) -> Any:
    return request("DELETE", path)


def unwrap_list(payload: Any) -> List[Any]:
    """
    Normalize list responses.

    Some endpoints answer with a bare array, others wrap it as {"value": [...]}
    or under another key; anything unrecognised becomes an empty list.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        value = payload.get("value")
        if isinstance(value, list):
            return value
        for candidate in payload.values():
            if isinstance(candidate, list):
                return candidate
    return []
