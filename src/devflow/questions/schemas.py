from typing import Literal

from pydantic import BaseModel, Field, field_validator

from devflow.common import PageParams


class QuestionCreate(BaseModel):
    title: str = Field(min_length=5, max_length=100)
    content: str = Field(min_length=1)
    tags: list[str] = Field(min_length=1, max_length=3)

    @field_validator("tags")
    @classmethod
    def tag_lengths(cls, v: list[str]) -> list[str]:
        tags = [tag.strip() for tag in v]
        for tag in tags:
            if not 1 <= len(tag) <= 15:
                raise ValueError("Tags must be between 1 and 15 characters.")
        # keep the first spelling of each tag
        unique: dict[str, str] = {}
        for tag in tags:
            unique.setdefault(tag.lower(), tag)
        return list(unique.values())


class AnswerCreate(BaseModel):
    content: str = Field(min_length=100)


class QuestionPageParams(PageParams):
    filter: Literal["newest", "unanswered", "popular"] | None = None


class AnswerPageParams(PageParams):
    filter: Literal["latest", "oldest", "popular"] | None = None


class TagPageParams(PageParams):
    filter: Literal["popular", "recent", "oldest", "name"] | None = None
