from databases import Database
from databases.core import Connection

from devflow.devflow import User
from devflow.errors import NotFoundError

from . import repo
from .schemas import ProfileUpdate


def profile_delta(user: User, name: str, image: str | None) -> ProfileUpdate:
    delta: ProfileUpdate = {}
    if user.name != name:
        delta["name"] = name
    if user.image != image:
        delta["image"] = image
    return delta


async def unique_username(connection: Connection, base: str) -> str:
    username = base
    counter = 1
    while await repo.get_user_by_username(connection, username) is not None:
        username = f"{base}-{counter}"
        counter += 1
    return username


async def get_user_by_id(database: Database, user_id: int) -> User:
    async with database.connection() as connection:
        user = await repo.get_user_by_id(connection, user_id)
    if user is None:
        raise NotFoundError("User")
    return user
