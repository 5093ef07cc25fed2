"""CLI tests.

Learn: The CLI is a thin httpx client. Tests swap its client factory for
one backed by httpx.MockTransport and check what is sent and printed.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from taskboard.cli import main as cli

LIST_ID = "7d4b3f0e-1c2a-4e5f-9a8b-0c1d2e3f4a5b"
TODO_ID = "0a9b8c7d-6e5f-4a3b-2c1d-0e9f8a7b6c5d"


@pytest.fixture()
def api(monkeypatch):
    """Record requests and answer them from a route table."""
    calls: list[httpx.Request] = []
    routes: dict[tuple[str, str], httpx.Response] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return routes.get(
            (request.method, request.url.path),
            httpx.Response(404, json={"detail": "Not found"}),
        )

    def fake_client(token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return httpx.AsyncClient(
            base_url="http://test",
            headers=headers,
            transport=httpx.MockTransport(handler),
        )

    monkeypatch.setattr(cli, "_client", fake_client)
    return routes, calls


def test_lists_requires_token(monkeypatch):
    monkeypatch.delenv("TASKBOARD_TOKEN", raising=False)
    result = CliRunner().invoke(cli.main, ["lists"])
    assert result.exit_code == 1
    assert "--token required" in result.output


def test_lists_prints_table(api):
    routes, calls = api
    routes[("GET", "/api/v1/task-lists")] = httpx.Response(
        200,
        json=[{"id": LIST_ID, "title": "Groceries", "progress": 0.5, "user_ids": ["a", "b"]}],
    )

    result = CliRunner().invoke(cli.main, ["lists", "--token", "tok"])

    assert result.exit_code == 0, result.output
    assert "Groceries" in result.output
    assert "50%" in result.output
    assert calls[0].headers["Authorization"] == "Bearer tok"


def test_show_renders_checkboxes(api):
    routes, _ = api
    routes[("GET", f"/api/v1/task-lists/{LIST_ID}")] = httpx.Response(
        200,
        json={
            "id": LIST_ID,
            "title": "Groceries",
            "progress": 0.5,
            "user_ids": ["a"],
            "users": [{"id": "a", "name": "Alice", "email": "a@example.com"}],
            "todos": [
                {"id": "1", "content": "Milk", "is_completed": True},
                {"id": "2", "content": "Eggs", "is_completed": False},
            ],
        },
    )

    result = CliRunner().invoke(cli.main, ["show", LIST_ID, "--token", "tok"])

    assert result.exit_code == 0, result.output
    assert "[x] Milk" in result.output
    assert "[ ] Eggs" in result.output
    assert "Shared with: Alice" in result.output


def test_check_sends_completion(api):
    routes, calls = api
    routes[("PATCH", f"/api/v1/todos/{TODO_ID}")] = httpx.Response(
        200, json={"id": TODO_ID, "content": "Milk", "is_completed": True}
    )

    result = CliRunner().invoke(cli.main, ["check", TODO_ID], env={"TASKBOARD_TOKEN": "tok"})

    assert result.exit_code == 0, result.output
    assert json.loads(calls[0].content) == {"is_completed": True}
    assert "[x] Milk" in result.output


def test_api_error_is_reported(api):
    routes, _ = api
    routes[("POST", f"/api/v1/task-lists/{LIST_ID}/users")] = httpx.Response(
        403, json={"detail": "You are not a collaborator on this task list"}
    )

    result = CliRunner().invoke(
        cli.main, ["share", LIST_ID, "someone", "--token", "tok"]
    )

    assert result.exit_code == 1
    assert "Error (403): You are not a collaborator on this task list" in result.output


def test_sign_in_prints_token(api):
    routes, calls = api
    routes[("POST", "/api/v1/auth/sign-in")] = httpx.Response(
        200, json={"user": {"id": "a", "name": "Alice", "email": "a@example.com"}, "token": "jwt-123"}
    )

    result = CliRunner().invoke(
        cli.main, ["sign-in", "a@example.com", "--password", "password_123"]
    )

    assert result.exit_code == 0, result.output
    assert result.output.strip().endswith("jwt-123")
    assert json.loads(calls[0].content)["email"] == "a@example.com"
