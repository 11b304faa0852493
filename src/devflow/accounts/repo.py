import sqlalchemy
from databases.core import Connection
from databases.interfaces import Record
from sentry_sdk.tracing import trace

from devflow.devflow import Account, Provider

from . import tables


def _account(account: Record) -> Account:
    return Account(
        id=account["id"],
        user_id=account["user_id"],
        name=account["name"],
        image=account["image"],
        provider=account["provider"],
        provider_account_id=account["provider_account_id"],
    )


@trace
async def get_account(
    connection: Connection, user_id: int, provider: Provider, provider_account_id: str
) -> Account | None:
    account = await connection.fetch_one(
        query=tables.accounts.select().where(
            (tables.accounts.c.user_id == user_id)
            & (tables.accounts.c.provider == provider)
            & (tables.accounts.c.provider_account_id == provider_account_id)
        )
    )
    if account is None:
        return None
    return _account(account)


@trace
async def get_account_by_provider_account_id(
    connection: Connection,
    provider_account_id: str,
    provider: Provider | None = None,
) -> Account | None:
    query = tables.accounts.select().where(
        tables.accounts.c.provider_account_id == provider_account_id
    )
    if provider is not None:
        query = query.where(tables.accounts.c.provider == provider)
    account = await connection.fetch_one(query=query.order_by(tables.accounts.c.id))
    if account is None:
        return None
    return _account(account)


@trace
async def get_password_hash(
    connection: Connection, provider_account_id: str
) -> str | None:
    password = await connection.fetch_val(
        query=sqlalchemy.select(tables.accounts.c.password).where(
            (tables.accounts.c.provider == "credentials")
            & (tables.accounts.c.provider_account_id == provider_account_id)
        )
    )
    if password is None:
        return None
    return str(password)


async def create_account(
    connection: Connection,
    user_id: int,
    name: str,
    provider: Provider,
    provider_account_id: str,
    image: str | None = None,
    password: str | None = None,
) -> Account:
    account_id: int = await connection.execute(
        query=tables.accounts.insert().values(
            user_id=user_id,
            name=name,
            image=image,
            password=password,
            provider=provider,
            provider_account_id=provider_account_id,
            created_at=sqlalchemy.func.now(),
        )
    )
    return Account(
        id=account_id,
        user_id=user_id,
        name=name,
        image=image,
        provider=provider,
        provider_account_id=provider_account_id,
    )
