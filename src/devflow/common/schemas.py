from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PageParams(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)
    query: str | None = None
    filter: str | None = None


class Page(BaseModel, Generic[T]):
    items: list[T]
    is_next: bool
