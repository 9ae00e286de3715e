from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


def build_engine(database_url: str):
    """Create an engine for the given URL.

    SQLite connections are shared with the threadpool that runs password
    hashing, so the same-thread check is turned off for that dialect.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def build_session_factory(engine):
    # autocommit=False: Changes require explicit commit (prevents accidental commits)
    # autoflush=False: Don't auto-flush before queries
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Base class for all database models
Base = declarative_base()


def get_db(request: Request):
    """
    Dependency for getting database session.

    Sessions come from the factory create_app built for DATABASE_URL.
    The session is closed after the request completes (via finally block),
    which also rolls back anything left uncommitted.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
