import logging
from typing import Any

import databases
import httpx
import uvicorn
from fastapi import Body, Depends, FastAPI, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from devflow import accounts, ai, questions, users
from devflow.common import Page
from devflow.devflow import Answer, Question, Tag, User
from devflow.errors import (
    DevflowError,
    NotFoundError,
    RequestError,
    UnauthorizedError,
    ValidationError,
    field_errors_from_pydantic,
)

from .auth import Auth, AuthUser
from .config import load_config
from .schemas import AccountData, ActionResponse, ErrorDetail, ErrorResponse, SignUpData
from .tracing import setup_tracing

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: ErrorDetail) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error).model_dump(
            by_alias=True, exclude_none=True
        ),
    )


def build_app(
    database: databases.Database,
    auth: Auth,
    ai_client: httpx.AsyncClient | None = None,
    ai_url: str | None = None,
) -> FastAPI:
    app = FastAPI()

    @app.exception_handler(DevflowError)
    async def handle_devflow_error(request: Request, e: DevflowError) -> JSONResponse:
        field_errors = e.field_errors if isinstance(e, ValidationError) else None
        return error_response(
            e.status_code, ErrorDetail(message=e.message, field_errors=field_errors)
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, e: RequestValidationError
    ) -> JSONResponse:
        field_errors = field_errors_from_pydantic(list(e.errors()))
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ErrorDetail(
                message=ValidationError.format_message(field_errors),
                field_errors=field_errors,
            ),
        )

    async def current_user(request: Request) -> AuthUser:
        user_id = auth.user_id(request)
        try:
            user = await users.get_user_by_id(database, user_id)
        except NotFoundError as e:
            raise UnauthorizedError() from e
        return AuthUser(user_id=user.id, username=user.username)

    @app.get("/health")
    async def check_health() -> Response:
        return Response(status_code=200)

    @app.post("/api/auth/sign-up")
    async def sign_up(
        response: Response, payload: dict[str, Any] = Body(...)
    ) -> ActionResponse[SignUpData]:
        async def establish_session(user: User) -> None:
            auth.sign_in(response, user.id)

        result = await accounts.sign_up_with_credentials(
            database, payload, establish_session
        )
        return ActionResponse(
            data=SignUpData(login_required=not result.session_established)
        )

    @app.post("/api/auth/sign-in")
    async def sign_in(
        response: Response, payload: dict[str, Any] = Body(...)
    ) -> ActionResponse[User]:
        user = await accounts.sign_in_with_credentials(database, payload)
        auth.sign_in(response, user.id)
        return ActionResponse(data=user)

    @app.post("/api/auth/sign-out")
    async def sign_out(response: Response) -> ActionResponse[None]:
        auth.sign_out(response)
        return ActionResponse()

    @app.post("/api/auth/signin-with-oauth")
    async def sign_in_with_oauth(
        payload: dict[str, Any] = Body(...)
    ) -> ActionResponse[None]:
        await accounts.sign_in_with_oauth(database, payload)
        return ActionResponse()

    @app.get("/api/accounts/provider/{provider_account_id}")
    async def get_account_by_provider(
        provider_account_id: str,
    ) -> ActionResponse[AccountData]:
        account = await accounts.get_account_by_provider(database, provider_account_id)
        return ActionResponse(
            data=AccountData(
                user_id=account.user_id,
                provider=account.provider,
                provider_account_id=account.provider_account_id,
            )
        )

    @app.get("/api/users/me")
    async def get_me(user: AuthUser = Depends(current_user)) -> ActionResponse[User]:
        return ActionResponse(data=await users.get_user_by_id(database, user.user_id))

    @app.get("/api/questions")
    async def list_questions(
        page: int = 1,
        page_size: int = Query(10, alias="pageSize"),
        query: str | None = None,
        filter: str | None = None,
    ) -> ActionResponse[Page[Question]]:
        result = await questions.list_questions(
            database,
            {"page": page, "page_size": page_size, "query": query, "filter": filter},
        )
        return ActionResponse(data=result)

    @app.post("/api/questions", status_code=status.HTTP_201_CREATED)
    async def create_question(
        payload: dict[str, Any] = Body(...),
        user: AuthUser = Depends(current_user),
    ) -> ActionResponse[Question]:
        question = await questions.create_question(database, user.user_id, payload)
        return ActionResponse(data=question)

    @app.get("/api/questions/{question_id}")
    async def get_question(question_id: int) -> ActionResponse[Question]:
        await questions.increment_views(database, question_id)
        question = await questions.get_question(database, question_id)
        return ActionResponse(data=question)

    @app.get("/api/questions/{question_id}/answers")
    async def list_answers(
        question_id: int,
        page: int = 1,
        page_size: int = Query(10, alias="pageSize"),
        filter: str | None = None,
    ) -> ActionResponse[Page[Answer]]:
        result = await questions.list_answers(
            database,
            question_id,
            {"page": page, "page_size": page_size, "filter": filter},
        )
        return ActionResponse(data=result)

    @app.post(
        "/api/questions/{question_id}/answers", status_code=status.HTTP_201_CREATED
    )
    async def create_answer(
        question_id: int,
        payload: dict[str, Any] = Body(...),
        user: AuthUser = Depends(current_user),
    ) -> ActionResponse[Answer]:
        answer = await questions.create_answer(
            database, user.user_id, question_id, payload
        )
        return ActionResponse(data=answer)

    @app.get("/api/tags")
    async def list_tags(
        page: int = 1,
        page_size: int = Query(10, alias="pageSize"),
        query: str | None = None,
        filter: str | None = None,
    ) -> ActionResponse[Page[Tag]]:
        result = await questions.list_tags(
            database,
            {"page": page, "page_size": page_size, "query": query, "filter": filter},
        )
        return ActionResponse(data=result)

    @app.post("/api/ai/answers")
    async def generate_ai_answer(
        payload: dict[str, Any] = Body(...),
        user: AuthUser = Depends(current_user),
    ) -> ActionResponse[str]:
        if ai_client is None or ai_url is None:
            raise RequestError(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "AI answers are not available.",
            )
        answer = await ai.generate_answer(ai_client, ai_url, payload)
        return ActionResponse(data=answer)

    return app


def get_app() -> FastAPI:
    config = load_config()
    setup_tracing(config)

    database = databases.Database(config.database_url)
    auth = Auth.from_secret(
        config.session_secret,
        max_age=config.session_max_age,
        secure=config.secure_cookies,
    )
    ai_client = httpx.AsyncClient(timeout=30.0)

    app = build_app(database, auth, ai_client, config.ai_answer_url)

    @app.on_event("startup")
    async def startup() -> None:
        await database.connect()

    @app.on_event("shutdown")
    async def shutdown() -> None:
        await database.disconnect()
        await ai_client.aclose()

    return app


def serve() -> None:
    logging.basicConfig(level=logging.INFO)
    config = load_config()
    uvicorn.run(
        "devflow.web.app:get_app", factory=True, host=config.host, port=config.port
    )
