import sqlalchemy

from devflow.common.tables import Id, metadata

provider = sqlalchemy.Enum("credentials", "github", "google", name="provider")

accounts = sqlalchemy.Table(
    "accounts",
    metadata,
    sqlalchemy.Column("id", Id, primary_key=True),
    sqlalchemy.Column(
        "user_id",
        Id,
        sqlalchemy.ForeignKey("users.id"),
        nullable=False,
        index=True,
    ),
    sqlalchemy.Column("name", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("image", sqlalchemy.String),
    sqlalchemy.Column("password", sqlalchemy.String),
    sqlalchemy.Column("provider", provider, nullable=False),
    sqlalchemy.Column("provider_account_id", sqlalchemy.String, nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime(timezone=True), nullable=False),
    sqlalchemy.UniqueConstraint("provider", "provider_account_id"),
)
