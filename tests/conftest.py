"""
Shared fixtures for the Folio tests.

The hosted backend is replaced at the HTTP seam: FakeBackend stands in for
the requests.Session inside BackendConfig and answers the PostgREST and
GoTrue calls from in-memory tables, so the real client, data access layer
and views all run unchanged.

Install test dependencies with: pip install -e ".[dev]"
"""

import json
import threading
import time
from urllib.parse import urlsplit

import pytest
import requests
from flask import Flask

from folio import Folio, BackendConfig

FAKE_URL = "https://folio-test.backend.local"
FAKE_KEY = "anon-test-key"

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse"


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.content = b"" if payload is None else json.dumps(payload).encode()

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


def _format(value):
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def _matches(row, column, condition):
    if condition == "is.null":
        return row.get(column) is None
    if condition.startswith("eq."):
        return row.get(column) is not None and _format(row.get(column)) == condition[3:]
    raise AssertionError(f"Unsupported filter {column}={condition}")


class FakeBackend:
    """In-memory PostgREST + GoTrue, spoken to through requests-style calls."""

    def __init__(self):
        self.tables = {"profile": [], "projects": [], "blog_posts": []}
        self.users = {ADMIN_EMAIL: ADMIN_PASSWORD}
        self.access_tokens = {}
        self.refresh_tokens = {}
        self.token_lifetime = 3600
        self.calls = []
        self.failures = {}
        self._counter = 0
        self._lock = threading.Lock()

    # ----- test helpers -----

    def _next(self):
        self._counter += 1
        return self._counter

    def _stamp(self):
        return f"2024-01-{(self._counter % 28) + 1:02d}T10:00:00+00:00"

    def add_project(self, **overrides):
        n = self._next()
        row = {
            "id": f"project-{n}",
            "title": f"Project {n}",
            "description": f"Description for project {n}",
            "tags": ["Python"],
            "url": None,
            "github_url": None,
            "image_url": None,
            "display_order": n,
            "is_visible": True,
            "created_at": self._stamp(),
            "updated_at": self._stamp(),
        }
        row.update(overrides)
        self.tables["projects"].append(row)
        return row

    def add_post(self, **overrides):
        n = self._next()
        row = {
            "id": f"post-{n}",
            "title": f"Post {n}",
            "slug": f"post-{n}",
            "description": f"Summary of post {n}",
            "content": f"# Post {n}\n\nBody text.",
            "read_time": 5,
            "published_at": self._stamp(),
            "is_published": True,
            "created_at": self._stamp(),
            "updated_at": self._stamp(),
        }
        row.update(overrides)
        if not row["is_published"] and "published_at" not in overrides:
            row["published_at"] = None
        self.tables["blog_posts"].append(row)
        return row

    def set_profile(self, **overrides):
        row = {
            "id": "profile-1",
            "name": "Ada Lovelace",
            "initials": "AL",
            "tagline": "Analytical engine enthusiast",
            "about_text": "I write programs for machines that do not exist yet.",
            "is_available_for_work": True,
            "github_url": "https://github.com/ada",
            "linkedin_url": None,
            "email": "ada@example.com",
            "created_at": "2024-01-01T09:00:00+00:00",
            "updated_at": "2024-01-01T09:00:00+00:00",
        }
        row.update(overrides)
        self.tables["profile"] = [row]
        return row

    def fail(self, method, path, message="Internal error", status=500, code=None, transport=False):
        """Make every matching call fail until heal() is called."""
        self.failures[(method, path)] = (message, status, code, transport)

    def heal(self):
        self.failures.clear()

    def revoke_refresh_tokens(self):
        self.refresh_tokens.clear()

    def row(self, table, row_id):
        return next((r for r in self.tables[table] if r["id"] == row_id), None)

    def calls_to(self, method, path):
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

    # ----- requests.Session surface -----

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = urlsplit(url).path
        headers = headers or {}
        with self._lock:
            self.calls.append({"method": method, "path": path, "params": params,
                               "json": json, "headers": dict(headers)})
            failure = self.failures.get((method, path))
            if failure is not None:
                message, status, code, transport = failure
                if transport:
                    raise requests.ConnectionError(message)
                return FakeResponse(status, {"message": message, "code": code})

            if headers.get("apikey") != FAKE_KEY:
                return FakeResponse(401, {"message": "Invalid API key"})
            token = headers.get("Authorization", "").replace("Bearer ", "", 1)

            if path.startswith("/auth/v1/"):
                return self._auth(method, path[len("/auth/v1/"):], dict(params or {}), json or {}, token)
            if path.startswith("/rest/v1/"):
                return self._rest(method, path[len("/rest/v1/"):], list(params or []),
                                  json, headers.get("Prefer", ""), token)
        return FakeResponse(404, {"message": f"No route {path}"})

    # ----- GoTrue -----

    def _issue(self, email):
        n = self._next()
        access, refresh = f"access-{n}", f"refresh-{n}"
        self.access_tokens[access] = email
        self.refresh_tokens[refresh] = email
        return FakeResponse(200, {
            "access_token": access,
            "refresh_token": refresh,
            "token_type": "bearer",
            "expires_in": self.token_lifetime,
            "expires_at": int(time.time()) + self.token_lifetime,
            "user": {"id": f"user-{email}", "email": email},
        })

    def _auth(self, method, route, params, body, token):
        if method == "POST" and route == "token":
            grant = params.get("grant_type")
            if grant == "password":
                email = body.get("email")
                if self.users.get(email) != body.get("password"):
                    return FakeResponse(400, {"error": "invalid_grant",
                                              "error_description": "Invalid login credentials"})
                return self._issue(email)
            if grant == "refresh_token":
                email = self.refresh_tokens.pop(body.get("refresh_token"), None)
                if email is None:
                    return FakeResponse(400, {"error": "invalid_grant",
                                              "error_description": "Invalid Refresh Token: Refresh Token Not Found"})
                return self._issue(email)
        if method == "POST" and route == "logout":
            self.access_tokens.pop(token, None)
            return FakeResponse(204)
        return FakeResponse(404, {"message": f"No auth route {route}"})

    # ----- PostgREST -----

    def _rest(self, method, table, params, body, prefer, token):
        if table not in self.tables:
            return FakeResponse(404, {"code": "42P01", "message": f'relation "{table}" does not exist'})

        filters = [(k, v) for k, v in params if k not in ("select", "order")]
        order = next((v for k, v in params if k == "order"), None)
        representation = "return=representation" in prefer
        authenticated = token in self.access_tokens

        if method != "GET" and not authenticated:
            return FakeResponse(401, {"code": "42501",
                                      "message": f'new row violates row-level security policy for table "{table}"'})

        rows = self.tables[table]
        selected = [r for r in rows if all(_matches(r, k, v) for k, v in filters)]

        if method == "GET":
            if order:
                column, direction = order.rsplit(".", 1)
                selected = sorted(
                    selected,
                    key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else 0),
                    reverse=(direction == "desc"),
                )
            return FakeResponse(200, [dict(r) for r in selected])

        if method == "POST":
            values = dict(body)
            if table == "blog_posts" and any(r["slug"] == values.get("slug") for r in rows):
                return FakeResponse(409, {"code": "23505",
                                          "message": 'duplicate key value violates unique constraint "blog_posts_slug_key"'})
            n = self._next()
            values.setdefault("id", f"{table}-{n}")
            values["created_at"] = self._stamp()
            values["updated_at"] = self._stamp()
            rows.append(values)
            return FakeResponse(201, [dict(values)] if representation else None)

        if method == "PATCH":
            for r in selected:
                r.update(body)
                r["updated_at"] = self._stamp()
            return FakeResponse(200 if representation else 204,
                                [dict(r) for r in selected] if representation else None)

        if method == "DELETE":
            self.tables[table] = [r for r in rows if r not in selected]
            return FakeResponse(200 if representation else 204,
                                [dict(r) for r in selected] if representation else None)

        return FakeResponse(405, {"message": f"Method {method} not allowed"})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def backend():
    """The in-memory backend, empty apart from one admin user."""
    return FakeBackend()


@pytest.fixture
def backend_config(backend):
    """A real BackendConfig whose HTTP session is the fake backend."""
    return BackendConfig(FAKE_URL, FAKE_KEY, http=backend)


@pytest.fixture
def app(backend_config):
    """Fully initialised Flask app with every Folio module registered."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["FOLIO_SECURE_COOKIES"] = False
    Folio(app, backend=backend_config)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def folio(app):
    return app.extensions["folio"]


@pytest.fixture
def admin_client(client):
    """A test client that has already signed in as the admin."""
    response = client.post("/admin/login", data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 302
    return client


@pytest.fixture
def workspace_of(folio):
    """Look up the AdminWorkspace bound to a test client's cookie."""
    def lookup(test_client):
        with test_client.session_transaction() as sess:
            return folio.workspaces.get(sess.get("folio_workspace"))
    return lookup
