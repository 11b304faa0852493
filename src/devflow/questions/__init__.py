from . import tables
from .schemas import (
    AnswerCreate,
    AnswerPageParams,
    QuestionCreate,
    QuestionPageParams,
    TagPageParams,
)
from .service import (
    create_answer,
    create_question,
    get_question,
    increment_views,
    list_answers,
    list_questions,
    list_tags,
)

__all__ = [
    "tables",
    "AnswerCreate",
    "AnswerPageParams",
    "QuestionCreate",
    "QuestionPageParams",
    "TagPageParams",
    "create_answer",
    "create_question",
    "get_question",
    "increment_views",
    "list_answers",
    "list_questions",
    "list_tags",
]
