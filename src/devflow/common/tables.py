import sqlalchemy

metadata = sqlalchemy.MetaData()

# SQLite only autoincrements an INTEGER PRIMARY KEY.
Id = sqlalchemy.BigInteger().with_variant(sqlalchemy.Integer(), "sqlite")


def create_all(database_url: str) -> None:
    engine = sqlalchemy.create_engine(database_url)
    try:
        metadata.create_all(engine)
    finally:
        engine.dispose()
