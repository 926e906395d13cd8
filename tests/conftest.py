"""Shared fixtures: fake upstream services and an in-memory draft store."""

import json
import os

# settings are read at import time; keep a developer .env from leaking into tests
os.environ["CONSOLE_API_TOKEN"] = ""
os.environ["DATABASE_URL"] = "sqlite://"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.db import Base, get_db
from main import app


class FakeUpstream:
    """Routes (method, path) to canned responses and records every request."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method, path, body=None, status=200):
        # body may be a callable(request) -> body
        self.routes[(method.upper(), path or "/")] = (status, body)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"message": f"no route {key}"})
        status, body = self.routes[key]
        if callable(body):
            body = body(request)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)

    def requests_to(self, method, path):
        return [r for r in self.calls if r.method == method.upper() and r.url.path == (path or "/")]

    def sent_json(self, method, path, index=-1):
        return json.loads(self.requests_to(method, path)[index].content)


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def upstream():
    """upstream(get_fn, ClientClass) -> FakeUpstream wired into the app"""

    def _make(get_fn, client_cls):
        fake = FakeUpstream()
        instance = client_cls("http://upstream.test", timeout=5, transport=fake.transport)
        app.dependency_overrides[get_fn] = lambda: instance
        return fake

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestingSession
    app.dependency_overrides.pop(get_db, None)
    engine.dispose()
