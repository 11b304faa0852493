import sqlalchemy
from databases.core import Connection
from databases.interfaces import Record
from sentry_sdk.tracing import trace

from devflow.common import offset
from devflow.devflow import ActionType, Answer, Interaction, Question, Tag, TagRef
from devflow.users import tables as users_tables
from devflow.users.repo import author, author_columns

from . import tables

_question_columns = [
    tables.questions.c.id,
    tables.questions.c.title,
    tables.questions.c.content,
    tables.questions.c.views,
    tables.questions.c.answers,
    tables.questions.c.upvotes,
    tables.questions.c.downvotes,
    tables.questions.c.created_at,
    *author_columns,
]

_questions_with_authors = tables.questions.join(
    users_tables.users, users_tables.users.c.id == tables.questions.c.author_id
)

_answer_columns = [
    tables.answers.c.id,
    tables.answers.c.question_id,
    tables.answers.c.content,
    tables.answers.c.upvotes,
    tables.answers.c.downvotes,
    tables.answers.c.created_at,
    *author_columns,
]

_answers_with_authors = tables.answers.join(
    users_tables.users, users_tables.users.c.id == tables.answers.c.author_id
)


def _question(question: Record, tags: list[TagRef]) -> Question:
    return Question(
        id=question["id"],
        title=question["title"],
        content=question["content"],
        tags=tags,
        author=author(question),
        views=question["views"],
        answers=question["answers"],
        upvotes=question["upvotes"],
        downvotes=question["downvotes"],
        created_at=question["created_at"],
    )


def _answer(answer: Record) -> Answer:
    return Answer(
        id=answer["id"],
        question_id=answer["question_id"],
        content=answer["content"],
        author=author(answer),
        upvotes=answer["upvotes"],
        downvotes=answer["downvotes"],
        created_at=answer["created_at"],
    )


def _tag(tag: Record) -> Tag:
    return Tag(id=tag["id"], name=tag["name"], questions=tag["questions"])


async def _tags_for_questions(
    connection: Connection, question_ids: list[int]
) -> dict[int, list[TagRef]]:
    tags_by_question: dict[int, list[TagRef]] = {
        question_id: [] for question_id in question_ids
    }
    if not question_ids:
        return tags_by_question
    rows = await connection.fetch_all(
        query=sqlalchemy.select(
            tables.tag_questions.c.question_id,
            tables.tags.c.id,
            tables.tags.c.name,
        )
        .select_from(
            tables.tags.join(
                tables.tag_questions,
                tables.tag_questions.c.tag_id == tables.tags.c.id,
            )
        )
        .where(tables.tag_questions.c.question_id.in_(question_ids))
        .order_by(tables.tags.c.name)
    )
    for row in rows:
        tags_by_question[row["question_id"]].append(
            TagRef(id=row["id"], name=row["name"])
        )
    return tags_by_question


async def create_question(
    connection: Connection, author_id: int, title: str, content: str
) -> int:
    question_id: int = await connection.execute(
        query=tables.questions.insert().values(
            title=title,
            content=content,
            author_id=author_id,
            views=0,
            upvotes=0,
            downvotes=0,
            answers=0,
            created_at=sqlalchemy.func.now(),
            updated_at=sqlalchemy.func.now(),
        )
    )
    return question_id


@trace
async def get_tag_by_name(connection: Connection, name: str) -> Tag | None:
    tag = await connection.fetch_one(
        query=tables.tags.select().where(
            sqlalchemy.func.lower(tables.tags.c.name) == name.lower()
        )
    )
    if tag is None:
        return None
    return _tag(tag)


async def create_tag(connection: Connection, name: str) -> Tag:
    tag_id: int = await connection.execute(
        query=tables.tags.insert().values(
            name=name,
            questions=0,
            created_at=sqlalchemy.func.now(),
        )
    )
    return Tag(id=tag_id, name=name, questions=0)


async def tag_question(connection: Connection, tag_id: int, question_id: int) -> None:
    await connection.execute(
        query=tables.tag_questions.insert().values(
            tag_id=tag_id, question_id=question_id
        )
    )
    await connection.execute(
        query=tables.tags.update()
        .where(tables.tags.c.id == tag_id)
        .values(questions=tables.tags.c.questions + 1)
    )


@trace
async def get_question_by_id(
    connection: Connection, question_id: int
) -> Question | None:
    question = await connection.fetch_one(
        query=sqlalchemy.select(*_question_columns)
        .select_from(_questions_with_authors)
        .where(tables.questions.c.id == question_id)
    )
    if question is None:
        return None
    tags = await _tags_for_questions(connection, [question_id])
    return _question(question, tags[question_id])


@trace
async def question_exists(connection: Connection, question_id: int) -> bool:
    found = await connection.fetch_val(
        query=sqlalchemy.select(tables.questions.c.id).where(
            tables.questions.c.id == question_id
        )
    )
    return found is not None


async def increment_views(connection: Connection, question_id: int) -> int | None:
    await connection.execute(
        query=tables.questions.update()
        .where(tables.questions.c.id == question_id)
        .values(views=tables.questions.c.views + 1)
    )
    views = await connection.fetch_val(
        query=sqlalchemy.select(tables.questions.c.views).where(
            tables.questions.c.id == question_id
        )
    )
    if views is None:
        return None
    return int(views)


@trace
async def list_questions(
    connection: Connection,
    page: int,
    page_size: int,
    query: str | None,
    filter: str | None,
) -> tuple[list[Question], int]:
    conditions = []
    if query:
        conditions.append(
            sqlalchemy.or_(
                tables.questions.c.title.icontains(query, autoescape=True),
                tables.questions.c.content.icontains(query, autoescape=True),
            )
        )
    match filter:
        case "unanswered":
            conditions.append(tables.questions.c.answers == 0)
            order_by = [tables.questions.c.created_at.desc()]
        case "popular":
            order_by = [tables.questions.c.upvotes.desc()]
        case _:
            order_by = [tables.questions.c.created_at.desc()]
    order_by.append(tables.questions.c.id.desc())

    total = await connection.fetch_val(
        query=sqlalchemy.select(sqlalchemy.func.count())
        .select_from(tables.questions)
        .where(*conditions)
    )
    rows = await connection.fetch_all(
        query=sqlalchemy.select(*_question_columns)
        .select_from(_questions_with_authors)
        .where(*conditions)
        .order_by(*order_by)
        .limit(page_size)
        .offset(offset(page, page_size))
    )
    tags = await _tags_for_questions(connection, [row["id"] for row in rows])
    return [_question(row, tags[row["id"]]) for row in rows], int(total)


async def create_answer(
    connection: Connection, author_id: int, question_id: int, content: str
) -> Answer:
    answer_id: int = await connection.execute(
        query=tables.answers.insert().values(
            question_id=question_id,
            author_id=author_id,
            content=content,
            upvotes=0,
            downvotes=0,
            created_at=sqlalchemy.func.now(),
        )
    )
    await connection.execute(
        query=tables.questions.update()
        .where(tables.questions.c.id == question_id)
        .values(answers=tables.questions.c.answers + 1)
    )
    answer = await connection.fetch_one(
        query=sqlalchemy.select(*_answer_columns)
        .select_from(_answers_with_authors)
        .where(tables.answers.c.id == answer_id)
    )
    assert answer is not None
    return _answer(answer)


@trace
async def list_answers(
    connection: Connection,
    question_id: int,
    page: int,
    page_size: int,
    filter: str | None,
) -> tuple[list[Answer], int]:
    match filter:
        case "oldest":
            order_by = [tables.answers.c.created_at.asc(), tables.answers.c.id.asc()]
        case "popular":
            order_by = [tables.answers.c.upvotes.desc(), tables.answers.c.id.desc()]
        case _:
            order_by = [tables.answers.c.created_at.desc(), tables.answers.c.id.desc()]

    condition = tables.answers.c.question_id == question_id
    total = await connection.fetch_val(
        query=sqlalchemy.select(sqlalchemy.func.count())
        .select_from(tables.answers)
        .where(condition)
    )
    rows = await connection.fetch_all(
        query=sqlalchemy.select(*_answer_columns)
        .select_from(_answers_with_authors)
        .where(condition)
        .order_by(*order_by)
        .limit(page_size)
        .offset(offset(page, page_size))
    )
    return [_answer(row) for row in rows], int(total)


@trace
async def list_tags(
    connection: Connection,
    page: int,
    page_size: int,
    query: str | None,
    filter: str | None,
) -> tuple[list[Tag], int]:
    conditions = []
    if query:
        conditions.append(tables.tags.c.name.icontains(query, autoescape=True))
    match filter:
        case "popular":
            order_by = [tables.tags.c.questions.desc(), tables.tags.c.id.asc()]
        case "name":
            order_by = [tables.tags.c.name.asc()]
        case "oldest":
            order_by = [tables.tags.c.created_at.asc(), tables.tags.c.id.asc()]
        case _:
            order_by = [tables.tags.c.created_at.desc(), tables.tags.c.id.desc()]

    total = await connection.fetch_val(
        query=sqlalchemy.select(sqlalchemy.func.count())
        .select_from(tables.tags)
        .where(*conditions)
    )
    rows = await connection.fetch_all(
        query=tables.tags.select()
        .where(*conditions)
        .order_by(*order_by)
        .limit(page_size)
        .offset(offset(page, page_size))
    )
    return [_tag(row) for row in rows], int(total)


async def create_interaction(
    connection: Connection,
    user_id: int,
    action: str,
    action_id: int,
    action_type: ActionType,
) -> int:
    interaction_id: int = await connection.execute(
        query=tables.interactions.insert().values(
            user_id=user_id,
            action=action,
            action_id=action_id,
            action_type=action_type,
            created_at=sqlalchemy.func.now(),
        )
    )
    return interaction_id


@trace
async def list_interactions(connection: Connection, user_id: int) -> list[Interaction]:
    rows = await connection.fetch_all(
        query=tables.interactions.select()
        .where(tables.interactions.c.user_id == user_id)
        .order_by(tables.interactions.c.id)
    )
    return [
        Interaction(
            id=row["id"],
            user_id=row["user_id"],
            action=row["action"],
            action_id=row["action_id"],
            action_type=row["action_type"],
        )
        for row in rows
    ]
