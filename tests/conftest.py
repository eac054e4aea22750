from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from todo_client.reconciler import TaskBoard
from todo_client.session import Session

from .fake_remote import BASE_URL, create_app, issue_token


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep developer TODO_* variables from leaking into tests.
    for name in (
        "TODO_API_BASE_URL",
        "TODO_API_TIMEOUT",
        "TODO_LOG_LEVEL",
        "TODO_SERIALIZE_TASK_OPS",
        "TODO_DISCARD_STALE_LOADS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def remote_app():
    return create_app()


@pytest.fixture()
def transport(remote_app) -> httpx.ASGITransport:
    return httpx.ASGITransport(app=remote_app)


@pytest.fixture()
def session(remote_app) -> Session:
    token = issue_token(remote_app, "ada@example.com", "secret1", "ada")
    return Session(token=token, username="ada")


@pytest_asyncio.fixture()
async def board(session: Session, transport: httpx.ASGITransport):
    board = TaskBoard.connect(session, base_url=BASE_URL, transport=transport)
    yield board
    await board.close()
