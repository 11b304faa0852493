import logging
import os

from devflow.common.tables import create_all

# Importing the table modules registers them on the shared metadata.
from devflow.accounts import tables as accounts_tables  # noqa: F401
from devflow.questions import tables as questions_tables  # noqa: F401
from devflow.users import tables as users_tables  # noqa: F401

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    database_url = os.environ.get("DATABASE_URL")
    assert database_url is not None, "DATABASE_URL is not set"
    logger.info("Creating tables")
    create_all(database_url)


if __name__ == "__main__":
    main()
