from typing import TypedDict


class ProfileUpdate(TypedDict, total=False):
    name: str
    image: str | None
