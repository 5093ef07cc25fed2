"""Taskboard CLI: run the server and work with task lists from a terminal.

Usage:
    taskboard serve                              # Run the API with uvicorn
    taskboard init-db                            # Create tables (development)
    taskboard sign-up ada@example.com "Ada"      # Create an account, print token
    taskboard sign-in ada@example.com            # Print a fresh token
    taskboard lists                              # Task lists I collaborate on
    taskboard show <list-id>                     # Items in a list
    taskboard create "Groceries"                 # New task list
    taskboard rename <list-id> "Weekend"         # Rename a list
    taskboard share <list-id> <user-id>          # Add a collaborator
    taskboard delete <list-id>                   # Delete a list
    taskboard add <list-id> "Milk"               # Add an item
    taskboard check <todo-id>                    # Mark an item done
    taskboard uncheck <todo-id>                  # Mark an item not done
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("TASKBOARD_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Taskboard backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via CliRunner inside
    an async test) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _require_token(token: Optional[str]) -> str:
    if not token:
        click.secho(
            "Error: --token required (or set TASKBOARD_TOKEN env var). "
            "Get one with: taskboard sign-in <email>",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return token


def _check(r: httpx.Response) -> dict | list:
    """Return the JSON body, or print the API's error and exit."""
    if r.is_success:
        return r.json()
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    if not isinstance(detail, str):
        detail = json.dumps(detail)
    click.secho(f"Error ({r.status_code}): {detail}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "-"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _progress_bar(progress: float, width: int = 20) -> str:
    filled = round(progress * width)
    return "[" + "#" * filled + "." * (width - filled) + f"] {progress:.0%}"


token_option = click.option(
    "--token",
    envvar="TASKBOARD_TOKEN",
    help="Bearer token (or set TASKBOARD_TOKEN)",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="taskboard")
def main():
    """Taskboard: shared task lists and to-dos."""


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Port (default from settings)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from taskboard.config import settings

    uvicorn.run(
        "taskboard.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db():
    """Create all tables directly from the models (development only)."""
    from taskboard.db.engine import engine, init_models

    async def _init():
        await init_models(engine)
        await engine.dispose()

    _run(_init())
    click.secho("Tables created.", fg="green")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@main.command("sign-up")
@click.argument("email")
@click.argument("name")
@click.password_option()
@click.option("--avatar", help="Avatar URL")
def sign_up(email: str, name: str, password: str, avatar: Optional[str]):
    """Create an account and print its token."""
    _run(_sign_up_impl(email, name, password, avatar))


async def _sign_up_impl(email: str, name: str, password: str, avatar: Optional[str]):
    body = {"email": email, "name": name, "password": password}
    if avatar:
        body["avatar"] = avatar
    async with _client() as c:
        data = _check(await c.post("/api/v1/auth/sign-up", json=body))
    click.secho(f"Welcome, {data['user']['name']} ({data['user']['id']})", fg="green")
    click.echo(data["token"])


@main.command("sign-in")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def sign_in(email: str, password: str):
    """Sign in and print a fresh token."""
    _run(_sign_in_impl(email, password))


async def _sign_in_impl(email: str, password: str):
    async with _client() as c:
        data = _check(
            await c.post(
                "/api/v1/auth/sign-in", json={"email": email, "password": password}
            )
        )
    click.echo(data["token"])


# ---------------------------------------------------------------------------
# Task lists
# ---------------------------------------------------------------------------


@main.command()
@token_option
def lists(token: Optional[str]):
    """List the task lists you collaborate on."""
    _run(_lists_impl(_require_token(token)))


async def _lists_impl(token: str):
    async with _client(token) as c:
        task_lists = _check(await c.get("/api/v1/task-lists"))

    if not task_lists:
        click.echo("No task lists yet. Create one with: taskboard create <title>")
        return

    rows = [
        {
            "id": tl["id"],
            "title": tl["title"],
            "progress": f"{tl['progress']:.0%}",
            "users": len(tl["user_ids"]),
        }
        for tl in task_lists
    ]
    click.secho(f"Task lists ({len(rows)}):", bold=True)
    click.echo()
    _print_table(rows, [
        ("ID", "id", 36),
        ("Title", "title", 40),
        ("Done", "progress", 5),
        ("Users", "users", 5),
    ])


@main.command()
@click.argument("task_list_id")
@token_option
def show(task_list_id: str, token: Optional[str]):
    """Show a task list with its items."""
    _run(_show_impl(task_list_id, _require_token(token)))


async def _show_impl(task_list_id: str, token: str):
    async with _client(token) as c:
        tl = _check(await c.get(f"/api/v1/task-lists/{task_list_id}"))

    click.secho(tl["title"], bold=True)
    click.echo(_progress_bar(tl["progress"]))
    click.echo("Shared with: " + ", ".join(u["name"] for u in tl["users"]))
    click.echo()
    if not tl["todos"]:
        click.echo("  (no items)")
    for todo in tl["todos"]:
        box = click.style("[x]", fg="green") if todo["is_completed"] else "[ ]"
        click.echo(f"  {box} {todo['content']}  ({todo['id']})")


@main.command()
@click.argument("title")
@token_option
def create(title: str, token: Optional[str]):
    """Create a new task list."""
    _run(_create_impl(title, _require_token(token)))


async def _create_impl(title: str, token: str):
    async with _client(token) as c:
        tl = _check(await c.post("/api/v1/task-lists", json={"title": title}))
    click.secho(f"Created '{tl['title']}' ({tl['id']})", fg="green")


@main.command()
@click.argument("task_list_id")
@click.argument("title")
@token_option
def rename(task_list_id: str, title: str, token: Optional[str]):
    """Rename a task list."""
    _run(_rename_impl(task_list_id, title, _require_token(token)))


async def _rename_impl(task_list_id: str, title: str, token: str):
    async with _client(token) as c:
        tl = _check(
            await c.patch(f"/api/v1/task-lists/{task_list_id}", json={"title": title})
        )
    click.secho(f"Renamed to '{tl['title']}'", fg="green")


@main.command()
@click.argument("task_list_id")
@click.argument("user_id")
@token_option
def share(task_list_id: str, user_id: str, token: Optional[str]):
    """Add a collaborator to a task list."""
    _run(_share_impl(task_list_id, user_id, _require_token(token)))


async def _share_impl(task_list_id: str, user_id: str, token: str):
    async with _client(token) as c:
        tl = _check(
            await c.post(
                f"/api/v1/task-lists/{task_list_id}/users", json={"user_id": user_id}
            )
        )
    click.secho(
        f"'{tl['title']}' is shared with: " + ", ".join(u["name"] for u in tl["users"]),
        fg="green",
    )


@main.command()
@click.argument("task_list_id")
@token_option
@click.confirmation_option(prompt="Delete this task list and all its items?")
def delete(task_list_id: str, token: Optional[str]):
    """Delete a task list."""
    _run(_delete_impl(task_list_id, _require_token(token)))


async def _delete_impl(task_list_id: str, token: str):
    async with _client(token) as c:
        _check(await c.delete(f"/api/v1/task-lists/{task_list_id}"))
    click.secho("Deleted.", fg="green")


# ---------------------------------------------------------------------------
# To-dos
# ---------------------------------------------------------------------------


@main.command()
@click.argument("task_list_id")
@click.argument("content")
@token_option
def add(task_list_id: str, content: str, token: Optional[str]):
    """Add an item to a task list."""
    _run(_add_impl(task_list_id, content, _require_token(token)))


async def _add_impl(task_list_id: str, content: str, token: str):
    async with _client(token) as c:
        todo = _check(
            await c.post(
                f"/api/v1/task-lists/{task_list_id}/todos", json={"content": content}
            )
        )
    click.secho(f"Added ({todo['id']})", fg="green")


@main.command()
@click.argument("todo_id")
@token_option
def check(todo_id: str, token: Optional[str]):
    """Mark an item as done."""
    _run(_set_completed_impl(todo_id, True, _require_token(token)))


@main.command()
@click.argument("todo_id")
@token_option
def uncheck(todo_id: str, token: Optional[str]):
    """Mark an item as not done."""
    _run(_set_completed_impl(todo_id, False, _require_token(token)))


async def _set_completed_impl(todo_id: str, is_completed: bool, token: str):
    async with _client(token) as c:
        todo = _check(
            await c.patch(f"/api/v1/todos/{todo_id}", json={"is_completed": is_completed})
        )
    mark = "[x]" if todo["is_completed"] else "[ ]"
    click.echo(f"{mark} {todo['content']}")


if __name__ == "__main__":
    main()
