"""
Database configuration and session management
"""

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, create_engine

from porchboard.core.config import get_settings
from porchboard.core.exceptions import Conflict

settings = get_settings()

# Pooled engine shared by all requests
engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=not settings.DATABASE_URL.startswith("sqlite"),
)


def get_session():
    """Dependency to get database session"""
    with Session(engine) as session:
        yield session


def commit_or_conflict(session: Session, message: str) -> None:
    """Commit, reporting a unique-constraint violation as Conflict"""
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict(message)
