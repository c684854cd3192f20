from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from psychometric.config import database_url

DATABASE_URL = database_url()

# Section tasks write from worker threads, so SQLite must accept cross-thread use.
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    future=True,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

Base = declarative_base()


def init_db() -> None:
    from psychometric import db_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
