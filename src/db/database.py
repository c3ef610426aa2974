"""Generate database sessions"""

from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.db.schema import Base

IN_MEMORY_URL = "sqlite:///:memory:"


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine and make sure all tables exist.

    An in-memory SQLite database only lives as long as its connection, so all sessions share a single one.
    """
    if database_url == IN_MEMORY_URL:
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url, echo=echo)

    Base.metadata.create_all(bind=engine)
    return engine


def make_session_factory(database_url: str) -> sessionmaker[Session]:
    return sessionmaker(autoflush=False, bind=make_engine(database_url))
