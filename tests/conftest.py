"""Shared pytest fixtures.

fake_api        : replaces backend_client.request, records every call and
                  answers from a (method, path) table
fake_session    : replaces the client's requests.Session with a MagicMock
make_response   : builds real requests.Response objects for fake_session
store_path      : points the local JSON store at a temp file (autouse)
"""

from __future__ import annotations

import json as jsonlib
from unittest.mock import MagicMock

import pytest
import requests

import backend_client
import local_store


class FakeApi:
    def __init__(self):
        self.calls = []
        self.responses = {}

    def respond(self, method, path, body):
        self.responses[(method, path)] = body

    def __call__(self, method, path, *, params=None, json=None, token=None):
        self.calls.append({"method": method, "path": path, "params": params, "json": json, "token": token})
        body = self.responses.get((method, path))
        if isinstance(body, Exception):
            raise body
        return body

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def fake_api(monkeypatch) -> FakeApi:
    api = FakeApi()
    monkeypatch.setattr(backend_client, "request", api)
    return api


@pytest.fixture
def fake_session(monkeypatch) -> MagicMock:
    session = MagicMock()
    monkeypatch.setattr(backend_client, "_session", session)
    monkeypatch.setattr(backend_client, "_token_provider", None)
    monkeypatch.setattr(backend_client, "_env_token", None)
    monkeypatch.setattr(backend_client, "API_EMAIL", None)
    monkeypatch.setattr(backend_client, "API_PASSWORD", None)
    return session


@pytest.fixture
def make_response():
    def _make(status: int = 200, body=None) -> requests.Response:
        resp = requests.Response()
        resp.status_code = status
        resp._content = b"" if body is None else jsonlib.dumps(body).encode("utf-8")
        return resp

    return _make


@pytest.fixture(autouse=True)
def store_path(tmp_path, monkeypatch):
    path = tmp_path / "store.json"
    monkeypatch.setattr(local_store, "STORE_PATH", path)
    return path
