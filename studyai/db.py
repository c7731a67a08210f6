from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.pool import StaticPool
import os

import studyai.models  # noqa: F401  registers the tables on SQLModel.metadata

# Prefer DATABASE_URL (e.g., Postgres). Fallback to local SQLite.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./studyai.db")


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    options = {"connect_args": {"check_same_thread": False}}
    # In-memory SQLite must share one connection across threads
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, echo=False, **_engine_options(DATABASE_URL))


def init_db() -> None:
    """Initializes the database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
