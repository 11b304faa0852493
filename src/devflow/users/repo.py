import sqlalchemy
from databases.core import Connection
from databases.interfaces import Record
from sentry_sdk.tracing import trace

from devflow.devflow import Author, User

from . import tables
from .schemas import ProfileUpdate


def _user(user: Record) -> User:
    return User(
        id=user["id"],
        name=user["name"],
        username=user["username"],
        email=user["email"],
        image=user["image"],
    )


def author(record: Record) -> Author:
    return Author(
        id=record["author_id"],
        name=record["author_name"],
        username=record["author_username"],
        image=record["author_image"],
    )


author_columns = [
    tables.users.c.id.label("author_id"),
    tables.users.c.name.label("author_name"),
    tables.users.c.username.label("author_username"),
    tables.users.c.image.label("author_image"),
]


@trace
async def get_user_by_id(connection: Connection, user_id: int) -> User | None:
    user = await connection.fetch_one(
        query=tables.users.select().where(tables.users.c.id == user_id)
    )
    if user is None:
        return None
    return _user(user)


@trace
async def get_user_by_email(connection: Connection, email: str) -> User | None:
    user = await connection.fetch_one(
        query=tables.users.select().where(tables.users.c.email == email)
    )
    if user is None:
        return None
    return _user(user)


@trace
async def get_user_by_username(connection: Connection, username: str) -> User | None:
    user = await connection.fetch_one(
        query=tables.users.select().where(tables.users.c.username == username)
    )
    if user is None:
        return None
    return _user(user)


async def create_user(
    connection: Connection,
    name: str,
    username: str,
    email: str,
    image: str | None = None,
) -> User:
    user_id: int = await connection.execute(
        query=tables.users.insert().values(
            name=name,
            username=username,
            email=email,
            image=image,
            created_at=sqlalchemy.func.now(),
            updated_at=sqlalchemy.func.now(),
        )
    )
    return User(id=user_id, name=name, username=username, email=email, image=image)


async def update_user(
    connection: Connection, user_id: int, changes: ProfileUpdate
) -> bool:
    """
    Writes only the given fields, in a single statement.
    An empty change set doesn't touch the database at all.
    """
    if not changes:
        return False
    await connection.execute(
        query=tables.users.update()
        .where(tables.users.c.id == user_id)
        .values(**changes, updated_at=sqlalchemy.func.now())
    )
    return True
