import logging
from typing import Any, Awaitable, Callable, Mapping

from databases import Database
from fastapi.concurrency import run_in_threadpool

from devflow import users
from devflow.common import slugify, transaction
from devflow.devflow import Account, User
from devflow.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    validate,
)
from devflow.users import repo as users_repo

from . import passwords, repo
from .schemas import SignInParams, SignInWithOAuthParams, SignUpParams, SignUpResult

logger = logging.getLogger(__name__)

EstablishSession = Callable[[User], Awaitable[None]]


async def sign_up_with_credentials(
    database: Database,
    params: SignUpParams | Mapping[str, Any],
    establish_session: EstablishSession | None = None,
) -> SignUpResult:
    """
    Creates a user and their credentials account, or nothing at all.

    The session is only established once the transaction has committed. If
    that step fails the user still exists; the result says so and the caller
    should send them to sign in rather than report an error.
    """
    data = validate(SignUpParams, params)

    async with transaction(database, "sign up") as connection:
        if await users_repo.get_user_by_email(connection, data.email) is not None:
            raise ConflictError("User already exists")

        taken = await users_repo.get_user_by_username(connection, data.username)
        if taken is not None:
            raise ConflictError("Username already exists")

        hashed_password = await run_in_threadpool(
            passwords.hash_password, data.password
        )

        user = await users_repo.create_user(
            connection,
            name=data.name,
            username=data.username,
            email=data.email,
        )
        await repo.create_account(
            connection,
            user_id=user.id,
            name=data.name,
            provider="credentials",
            provider_account_id=data.email,
            password=hashed_password,
        )

    logger.info("user %s signed up", user.id)

    if establish_session is None:
        return SignUpResult(user=user, session_established=False)

    try:
        await establish_session(user)
    except Exception:
        logger.warning(
            "user %s signed up but the session could not be established",
            user.id,
            exc_info=True,
        )
        return SignUpResult(user=user, session_established=False)

    return SignUpResult(user=user, session_established=True)


async def sign_in_with_credentials(
    database: Database, params: SignInParams | Mapping[str, Any]
) -> User:
    data = validate(SignInParams, params)

    async with database.connection() as connection:
        account = await repo.get_account_by_provider_account_id(
            connection, data.email, provider="credentials"
        )
        if account is None:
            raise NotFoundError("Account")

        user = await users_repo.get_user_by_id(connection, account.user_id)
        if user is None:
            raise NotFoundError("User")

        hashed_password = await repo.get_password_hash(connection, data.email)

    if hashed_password is None or not await run_in_threadpool(
        passwords.verify_password, data.password, hashed_password
    ):
        raise UnauthorizedError("Password does not match")

    return user


async def sign_in_with_oauth(
    database: Database, params: SignInWithOAuthParams | Mapping[str, Any]
) -> User:
    """
    Makes sure a user exists for the profile's email and that the provider
    account is linked to them. Calling it again with the same profile is a
    no-op apart from picking up name and image changes.
    """
    data = validate(SignInWithOAuthParams, params)
    name = data.user.name
    email = data.user.email
    image = str(data.user.image) if data.user.image is not None else None

    async with transaction(database, "oauth sign in") as connection:
        user = await users_repo.get_user_by_email(connection, email)

        if user is None:
            base = (
                slugify(data.user.username)
                or slugify(email.split("@")[0])
                or "user"
            )
            username = await users.unique_username(connection, base)
            user = await users_repo.create_user(
                connection,
                name=name,
                username=username,
                email=email,
                image=image,
            )
            logger.info("created user %s from %s", user.id, data.provider)
        else:
            delta = users.profile_delta(user, name, image)
            if await users_repo.update_user(connection, user.id, delta):
                user = user.model_copy(update=dict(delta))

        account = await repo.get_account(
            connection, user.id, data.provider, data.provider_account_id
        )
        if account is None:
            await repo.create_account(
                connection,
                user_id=user.id,
                name=name,
                image=image,
                provider=data.provider,
                provider_account_id=data.provider_account_id,
            )
            logger.info("linked %s account to user %s", data.provider, user.id)

    return user


async def get_account_by_provider(
    database: Database, provider_account_id: str
) -> Account:
    async with database.connection() as connection:
        account = await repo.get_account_by_provider_account_id(
            connection, provider_account_id
        )
    if account is None:
        raise NotFoundError("Account")
    return account
