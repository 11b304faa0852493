import os
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable

import databases
import httpx
import pytest
import sqlalchemy
from fastapi import FastAPI, HTTPException

from devflow import accounts
from devflow.common.tables import create_all
from devflow.devflow import User
from devflow.web.app import build_app
from devflow.web.auth import Auth

AI_URL = "http://ai.test/answers"


@pytest.fixture(autouse=True)
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    test_database_url = os.environ.get("TEST_DATABASE_URL")
    if test_database_url is not None:
        return test_database_url
    return f"sqlite:///{tmp_path / 'devflow.db'}"


# NOTE: Each test gets a fresh SQLite file. When TEST_DATABASE_URL points at a
# shared database, everything a test writes is rolled back instead.
@pytest.fixture
async def database(database_url: str) -> AsyncIterator[databases.Database]:
    create_all(database_url)
    force_rollback = "TEST_DATABASE_URL" in os.environ
    database = databases.Database(database_url, force_rollback=force_rollback)
    await database.connect()
    assert database.is_connected
    yield database
    await database.disconnect()
    assert not database.is_connected


@pytest.fixture
def auth() -> Auth:
    return Auth.from_secret("test-session-secret", max_age=3600, secure=False)


def build_ai_app() -> FastAPI:
    app = FastAPI()

    @app.post("/answers")
    async def answers(body: dict[str, str]) -> dict[str, str]:
        return {"data": f"  To answer <br>{body['question']}: use a generator.<br> "}

    @app.post("/broken")
    async def broken() -> dict[str, str]:
        raise HTTPException(status_code=500, detail="model overloaded")

    @app.post("/rejects")
    async def rejects() -> dict[str, str]:
        raise HTTPException(status_code=400, detail="bad prompt")

    return app


@pytest.fixture
async def ai_client() -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=build_ai_app())
    async with httpx.AsyncClient(
        transport=transport, base_url="http://ai.test"
    ) as client:
        yield client


@pytest.fixture
async def api(
    database: databases.Database, auth: Auth, ai_client: httpx.AsyncClient
) -> AsyncIterator[httpx.AsyncClient]:
    app = build_app(database, auth, ai_client, AI_URL)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://devflow.test"
    ) as api:
        yield api


CountRows = Callable[[sqlalchemy.Table], Awaitable[int]]


@pytest.fixture
def count_rows(database: databases.Database) -> CountRows:
    async def _count_rows(table: sqlalchemy.Table) -> int:
        count = await database.fetch_val(
            query=sqlalchemy.select(sqlalchemy.func.count()).select_from(table)
        )
        return int(count)

    return _count_rows


@pytest.fixture
async def user_ana(database: databases.Database) -> User:
    result = await accounts.sign_up_with_credentials(
        database,
        {
            "name": "Ana",
            "username": "ana",
            "email": "a@x.com",
            "password": "secret123",
        },
    )
    return result.user


@pytest.fixture
async def user_bob(database: databases.Database) -> User:
    result = await accounts.sign_up_with_credentials(
        database,
        {
            "name": "Bob Stone",
            "username": "bob",
            "email": "bob@x.com",
            "password": "hunter22",
        },
    )
    return result.user
