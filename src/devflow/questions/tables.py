import sqlalchemy

from devflow.common.tables import Id, metadata

action_type = sqlalchemy.Enum("question", "answer", name="action_type")

questions = sqlalchemy.Table(
    "questions",
    metadata,
    sqlalchemy.Column("id", Id, primary_key=True),
    sqlalchemy.Column("title", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("content", sqlalchemy.Text, nullable=False),
    sqlalchemy.Column(
        "author_id", Id, sqlalchemy.ForeignKey("users.id"), nullable=False, index=True
    ),
    sqlalchemy.Column("views", sqlalchemy.Integer, nullable=False, server_default="0"),
    sqlalchemy.Column("upvotes", sqlalchemy.Integer, nullable=False, server_default="0"),
    sqlalchemy.Column("downvotes", sqlalchemy.Integer, nullable=False, server_default="0"),
    sqlalchemy.Column("answers", sqlalchemy.Integer, nullable=False, server_default="0"),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime(timezone=True), nullable=False),
    sqlalchemy.Column("updated_at", sqlalchemy.DateTime(timezone=True), nullable=False),
)

tags = sqlalchemy.Table(
    "tags",
    metadata,
    sqlalchemy.Column("id", Id, primary_key=True),
    sqlalchemy.Column("name", sqlalchemy.String, nullable=False, unique=True),
    sqlalchemy.Column("questions", sqlalchemy.Integer, nullable=False, server_default="0"),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime(timezone=True), nullable=False),
)

tag_questions = sqlalchemy.Table(
    "tag_questions",
    metadata,
    sqlalchemy.Column(
        "tag_id", Id, sqlalchemy.ForeignKey("tags.id"), nullable=False, primary_key=True
    ),
    sqlalchemy.Column(
        "question_id",
        Id,
        sqlalchemy.ForeignKey("questions.id"),
        nullable=False,
        primary_key=True,
    ),
)

answers = sqlalchemy.Table(
    "answers",
    metadata,
    sqlalchemy.Column("id", Id, primary_key=True),
    sqlalchemy.Column(
        "question_id",
        Id,
        sqlalchemy.ForeignKey("questions.id"),
        nullable=False,
        index=True,
    ),
    sqlalchemy.Column(
        "author_id", Id, sqlalchemy.ForeignKey("users.id"), nullable=False, index=True
    ),
    sqlalchemy.Column("content", sqlalchemy.Text, nullable=False),
    sqlalchemy.Column("upvotes", sqlalchemy.Integer, nullable=False, server_default="0"),
    sqlalchemy.Column("downvotes", sqlalchemy.Integer, nullable=False, server_default="0"),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime(timezone=True), nullable=False),
)

interactions = sqlalchemy.Table(
    "interactions",
    metadata,
    sqlalchemy.Column("id", Id, primary_key=True),
    sqlalchemy.Column(
        "user_id", Id, sqlalchemy.ForeignKey("users.id"), nullable=False, index=True
    ),
    sqlalchemy.Column("action", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("action_id", Id, nullable=False),
    sqlalchemy.Column("action_type", action_type, nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime(timezone=True), nullable=False),
)
