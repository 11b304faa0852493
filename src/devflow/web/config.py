import os
from dataclasses import dataclass

THIRTY_DAYS = 60 * 60 * 24 * 30


@dataclass(frozen=True)
class Config:
    database_url: str
    session_secret: str
    session_max_age: int = THIRTY_DAYS
    secure_cookies: bool = True
    ai_answer_url: str | None = None
    sentry_dsn: str | None = None
    sentry_environment: str | None = None
    sentry_traces_sample_rate: float = 1.0
    host: str = "127.0.0.1"
    port: int = 8000


def _flag(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


def load_config() -> Config:
    database_url = os.environ.get("DATABASE_URL")
    if database_url is None:
        database_url = os.environ.get("TEST_DATABASE_URL")
    assert database_url is not None, "DATABASE_URL is not set"

    session_secret = os.environ.get("SESSION_SECRET")
    assert session_secret, "SESSION_SECRET is not set"

    return Config(
        database_url=database_url,
        session_secret=session_secret,
        session_max_age=int(os.environ.get("SESSION_MAX_AGE", THIRTY_DAYS)),
        secure_cookies=_flag(os.environ.get("SECURE_COOKIES"), True),
        ai_answer_url=os.environ.get("AI_ANSWER_URL") or None,
        sentry_dsn=os.environ.get("SENTRY_DSN"),
        sentry_environment=os.environ.get("SENTRY_ENVIRONMENT"),
        sentry_traces_sample_rate=float(
            os.environ.get("SENTRY_TRACES_SAMPLE_RATE", "1.0")
        ),
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8000")),
    )
