from typing import AsyncIterator
from unittest import mock

import databases
import httpx
import pytest

from devflow.devflow import User
from devflow.web.app import build_app, serve
from devflow.web.auth import SESSION_COOKIE, Auth
from devflow.web.config import THIRTY_DAYS, load_config
from devflow.web.tracing import traces_sampler

ANA = {
    "name": "Ana",
    "username": "ana",
    "email": "a@x.com",
    "password": "secret123",
}

QUESTION = {
    "title": "How do I read a file lazily?",
    "content": "My log files are huge and readlines() eats all the memory.",
    "tags": ["python", "io"],
}

ANSWER = (
    "Iterate over the file object itself. Python reads it line by line, so "
    "only one line is held in memory at a time, no matter how big the file is."
)


@pytest.fixture
async def signed_in(api: httpx.AsyncClient, user_ana: User) -> httpx.AsyncClient:
    response = await api.post(
        "/api/auth/sign-in", json={"email": "a@x.com", "password": "secret123"}
    )
    assert response.status_code == 200
    return api


async def test_health(api: httpx.AsyncClient) -> None:
    response = await api.get("/health")
    assert 200 == response.status_code


async def test_sign_up(api: httpx.AsyncClient) -> None:
    response = await api.post("/api/auth/sign-up", json=ANA)
    assert 200 == response.status_code
    assert response.json() == {"success": True, "data": {"loginRequired": False}}
    assert SESSION_COOKIE in response.cookies

    response = await api.get("/api/users/me")
    assert 200 == response.status_code
    me = response.json()["data"]
    assert me["username"] == "ana"
    assert me["email"] == "a@x.com"
    assert "password" not in me


async def test_sign_up_conflict(api: httpx.AsyncClient) -> None:
    await api.post("/api/auth/sign-up", json=ANA)

    response = await api.post("/api/auth/sign-up", json=ANA)
    assert 409 == response.status_code
    assert response.json() == {
        "success": False,
        "error": {"message": "User already exists"},
    }


async def test_sign_up_validation(api: httpx.AsyncClient) -> None:
    response = await api.post(
        "/api/auth/sign-up", json={**ANA, "email": "not-an-email", "password": "1"}
    )
    assert 400 == response.status_code
    body = response.json()
    assert body["success"] is False
    assert set(body["error"]["fieldErrors"]) == {"email", "password"}

    response = await api.post("/api/auth/sign-up", content=b"nope")
    assert 400 == response.status_code
    assert response.json()["success"] is False


async def test_sign_in_and_out(api: httpx.AsyncClient, user_ana: User) -> None:
    response = await api.post(
        "/api/auth/sign-in", json={"email": "a@x.com", "password": "wrong-one"}
    )
    assert 401 == response.status_code
    assert response.json()["error"]["message"] == "Password does not match"

    response = await api.post(
        "/api/auth/sign-in", json={"email": "who@x.com", "password": "secret123"}
    )
    assert 404 == response.status_code

    response = await api.post(
        "/api/auth/sign-in", json={"email": "a@x.com", "password": "secret123"}
    )
    assert 200 == response.status_code
    assert response.json()["data"]["id"] == user_ana.id

    response = await api.get("/api/users/me")
    assert 200 == response.status_code

    response = await api.post("/api/auth/sign-out")
    assert 200 == response.status_code

    response = await api.get("/api/users/me")
    assert 401 == response.status_code


async def test_forged_session(api: httpx.AsyncClient, user_ana: User) -> None:
    other = Auth.from_secret("some-other-secret", max_age=3600, secure=False)
    api.cookies.set(SESSION_COOKIE, other.issue(user_ana.id))
    response = await api.get("/api/users/me")
    assert 401 == response.status_code


async def test_session_for_deleted_user(api: httpx.AsyncClient, auth: Auth) -> None:
    api.cookies.set(SESSION_COOKIE, auth.issue(999))
    response = await api.get("/api/users/me")
    assert 401 == response.status_code


async def test_oauth_sign_in_and_account_lookup(api: httpx.AsyncClient) -> None:
    response = await api.post(
        "/api/auth/signin-with-oauth",
        json={
            "provider": "github",
            "providerAccountId": "123",
            "user": {
                "name": "Octo Cat",
                "username": "octocat",
                "email": "octo@x.com",
                "image": None,
            },
        },
    )
    assert 200 == response.status_code
    assert response.json() == {"success": True, "data": None}

    response = await api.get("/api/accounts/provider/123")
    assert 200 == response.status_code
    account = response.json()["data"]
    assert account["provider"] == "github"
    assert account["providerAccountId"] == "123"
    assert isinstance(account["userId"], int)

    response = await api.get("/api/accounts/provider/456")
    assert 404 == response.status_code
    assert response.json()["error"]["message"] == "Account not found"


async def test_questions(api: httpx.AsyncClient, signed_in: httpx.AsyncClient) -> None:
    response = await signed_in.post("/api/questions", json=QUESTION)
    assert 201 == response.status_code
    question = response.json()["data"]
    assert question["author"]["username"] == "ana"
    assert sorted(tag["name"] for tag in question["tags"]) == ["io", "python"]

    response = await api.get(f"/api/questions/{question['id']}")
    assert 200 == response.status_code
    assert response.json()["data"]["views"] == 1
    response = await api.get(f"/api/questions/{question['id']}")
    assert response.json()["data"]["views"] == 2

    response = await api.get("/api/questions", params={"pageSize": 1})
    assert 200 == response.status_code
    page = response.json()["data"]
    assert [q["id"] for q in page["items"]] == [question["id"]]
    assert page["is_next"] is False

    response = await api.get("/api/questions", params={"filter": "hottest"})
    assert 400 == response.status_code
    assert "filter" in response.json()["error"]["fieldErrors"]

    response = await api.get("/api/questions/999")
    assert 404 == response.status_code

    response = await api.get("/api/tags", params={"filter": "name"})
    assert [tag["name"] for tag in response.json()["data"]["items"]] == [
        "io",
        "python",
    ]


async def test_questions_require_sign_in(api: httpx.AsyncClient) -> None:
    response = await api.post("/api/questions", json=QUESTION)
    assert 401 == response.status_code
    assert response.json() == {
        "success": False,
        "error": {"message": "Unauthorized"},
    }


async def test_question_validation(signed_in: httpx.AsyncClient) -> None:
    response = await signed_in.post("/api/questions", json={**QUESTION, "tags": []})
    assert 400 == response.status_code
    assert "tags" in response.json()["error"]["fieldErrors"]


async def test_answers(signed_in: httpx.AsyncClient) -> None:
    response = await signed_in.post("/api/questions", json=QUESTION)
    question_id = response.json()["data"]["id"]

    response = await signed_in.post(
        f"/api/questions/{question_id}/answers", json={"content": ANSWER}
    )
    assert 201 == response.status_code
    answer = response.json()["data"]
    assert answer["question_id"] == question_id

    response = await signed_in.get(f"/api/questions/{question_id}/answers")
    assert 200 == response.status_code
    assert [a["id"] for a in response.json()["data"]["items"]] == [answer["id"]]

    response = await signed_in.post(
        f"/api/questions/{question_id}/answers", json={"content": "short"}
    )
    assert 400 == response.status_code

    response = await signed_in.post(
        "/api/questions/999/answers", json={"content": ANSWER}
    )
    assert 404 == response.status_code

    response = await signed_in.get("/api/questions/999/answers")
    assert 404 == response.status_code


async def test_ai_answers(api: httpx.AsyncClient, signed_in: httpx.AsyncClient) -> None:
    response = await signed_in.post(
        "/api/ai/answers",
        json={"question": QUESTION["title"], "content": QUESTION["content"]},
    )
    assert 200 == response.status_code
    assert response.json()["data"].endswith("use a generator.")

    api.cookies.clear()
    response = await api.post(
        "/api/ai/answers",
        json={"question": QUESTION["title"], "content": QUESTION["content"]},
    )
    assert 401 == response.status_code


@pytest.fixture
async def api_without_ai(
    database: databases.Database, auth: Auth
) -> AsyncIterator[httpx.AsyncClient]:
    app = build_app(database, auth)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://devflow.test"
    ) as api:
        yield api


async def test_ai_answers_not_configured(
    api_without_ai: httpx.AsyncClient, auth: Auth, user_ana: User
) -> None:
    api_without_ai.cookies.set(SESSION_COOKIE, auth.issue(user_ana.id))
    response = await api_without_ai.post(
        "/api/ai/answers",
        json={"question": QUESTION["title"], "content": QUESTION["content"]},
    )
    assert 503 == response.status_code
    assert response.json()["error"]["message"] == "AI answers are not available."


def test_traces_sampler() -> None:
    sample = traces_sampler(0.25)
    assert sample({"asgi_scope": {"path": "/health"}}) == 0.0
    assert sample({"asgi_scope": {"path": "/api/accounts/provider/a@x.com"}}) == 0.0
    assert sample({"asgi_scope": {"path": "/api/questions"}}) == 0.25
    assert sample({}) == 0.25


def test_load_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///devflow.db")
    monkeypatch.setenv("SESSION_SECRET", "s3cret")
    monkeypatch.setenv("SECURE_COOKIES", "false")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.delenv("AI_ANSWER_URL", raising=False)
    monkeypatch.delenv("SENTRY_TRACES_SAMPLE_RATE", raising=False)
    config = load_config()
    assert config.database_url == "sqlite:///devflow.db"
    assert config.secure_cookies is False
    assert config.session_max_age == THIRTY_DAYS
    assert config.ai_answer_url is None
    assert config.sentry_traces_sample_rate == 1.0
    assert config.port == 9000


def test_serve(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///devflow.db")
    monkeypatch.setenv("SESSION_SECRET", "s3cret")
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "9000")
    with mock.patch("devflow.web.app.uvicorn.run") as run:
        serve()
    run.assert_called_once_with(
        "devflow.web.app:get_app", factory=True, host="0.0.0.0", port=9000
    )
