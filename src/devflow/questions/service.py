import logging
from typing import Any, Mapping

from databases import Database

from devflow.common import Page, transaction
from devflow.devflow import Answer, Question, Tag
from devflow.errors import NotFoundError, validate

from . import repo
from .schemas import (
    AnswerCreate,
    AnswerPageParams,
    QuestionCreate,
    QuestionPageParams,
    TagPageParams,
)

logger = logging.getLogger(__name__)


async def create_question(
    database: Database, author_id: int, params: QuestionCreate | Mapping[str, Any]
) -> Question:
    data = validate(QuestionCreate, params)

    async with transaction(database, "create question") as connection:
        question_id = await repo.create_question(
            connection, author_id, data.title, data.content
        )
        for name in data.tags:
            tag = await repo.get_tag_by_name(connection, name)
            if tag is None:
                tag = await repo.create_tag(connection, name)
            await repo.tag_question(connection, tag.id, question_id)
        await repo.create_interaction(
            connection, author_id, "post", question_id, "question"
        )
        question = await repo.get_question_by_id(connection, question_id)

    assert question is not None
    logger.info("user %s asked question %s", author_id, question_id)
    return question


async def get_question(database: Database, question_id: int) -> Question:
    async with database.connection() as connection:
        question = await repo.get_question_by_id(connection, question_id)
    if question is None:
        raise NotFoundError("Question")
    return question


async def increment_views(database: Database, question_id: int) -> int:
    async with transaction(database, "increment views") as connection:
        views = await repo.increment_views(connection, question_id)
        if views is None:
            raise NotFoundError("Question")
    return views


async def list_questions(
    database: Database, params: QuestionPageParams | Mapping[str, Any]
) -> Page[Question]:
    data = validate(QuestionPageParams, params)
    async with database.connection() as connection:
        questions, total = await repo.list_questions(
            connection, data.page, data.page_size, data.query, data.filter
        )
    is_next = total > (data.page - 1) * data.page_size + len(questions)
    return Page[Question](items=questions, is_next=is_next)


async def create_answer(
    database: Database,
    author_id: int,
    question_id: int,
    params: AnswerCreate | Mapping[str, Any],
) -> Answer:
    data = validate(AnswerCreate, params)

    async with transaction(database, "create answer") as connection:
        if not await repo.question_exists(connection, question_id):
            raise NotFoundError("Question")
        answer = await repo.create_answer(
            connection, author_id, question_id, data.content
        )
        await repo.create_interaction(
            connection, author_id, "post", answer.id, "answer"
        )

    logger.info("user %s answered question %s", author_id, question_id)
    return answer


async def list_answers(
    database: Database,
    question_id: int,
    params: AnswerPageParams | Mapping[str, Any],
) -> Page[Answer]:
    data = validate(AnswerPageParams, params)
    async with database.connection() as connection:
        if not await repo.question_exists(connection, question_id):
            raise NotFoundError("Question")
        answers, total = await repo.list_answers(
            connection, question_id, data.page, data.page_size, data.filter
        )
    is_next = total > (data.page - 1) * data.page_size + len(answers)
    return Page[Answer](items=answers, is_next=is_next)


async def list_tags(
    database: Database, params: TagPageParams | Mapping[str, Any]
) -> Page[Tag]:
    data = validate(TagPageParams, params)
    async with database.connection() as connection:
        tags, total = await repo.list_tags(
            connection, data.page, data.page_size, data.query, data.filter
        )
    is_next = total > (data.page - 1) * data.page_size + len(tags)
    return Page[Tag](items=tags, is_next=is_next)
