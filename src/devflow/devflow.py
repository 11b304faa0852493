from datetime import datetime
from typing import Literal

from pydantic import BaseModel

OAuthProvider = Literal["github", "google"]
Provider = Literal["credentials", "github", "google"]

ActionType = Literal["question", "answer"]


class User(BaseModel):
    id: int
    name: str
    username: str
    email: str
    image: str | None = None


class Author(BaseModel):
    id: int
    name: str
    username: str
    image: str | None = None


class Account(BaseModel):
    id: int
    user_id: int
    name: str
    image: str | None = None
    provider: Provider
    provider_account_id: str


class Tag(BaseModel):
    id: int
    name: str
    questions: int


class TagRef(BaseModel):
    id: int
    name: str


class Question(BaseModel):
    id: int
    title: str
    content: str
    tags: list[TagRef]
    author: Author
    views: int
    answers: int
    upvotes: int
    downvotes: int
    created_at: datetime


class Answer(BaseModel):
    id: int
    question_id: int
    content: str
    author: Author
    upvotes: int
    downvotes: int
    created_at: datetime


class Interaction(BaseModel):
    id: int
    user_id: int
    action: str
    action_id: int
    action_type: ActionType
