"""
Database Configuration Module

This module handles the database configuration and connection setup for the back office.
It uses SQLAlchemy for ORM (Object-Relational Mapping) with PostgreSQL as the database.

The module includes:
- Database connection setup
- Session management
- Base model class definition
- Soft delete filter implementation
- Unit-of-work helper (atomic)
"""

from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session, with_loader_criteria, declarative_base

from config import DATABASE_URL

SQLALCHEMY_DATABASE_URL = DATABASE_URL

# SQLite is only used for local runs and tests; sessions are handed across
# FastAPI's threadpool so the same-thread check has to be off.
connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

# Create SQLAlchemy engine
# The engine is the entry point to the SQLAlchemy ORM
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)

# Create SessionLocal class
# autocommit=False means we need to explicitly commit transactions
# autoflush=False means we need to explicitly flush changes to the database
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class
# Base is the declarative base class that our ORM models will inherit from
Base = declarative_base()

@event.listens_for(Session, "do_orm_execute")
def add_soft_delete_filter(execute_state):
    """
    Event listener that automatically filters out "soft-deleted" records.

    This function adds a filter to all SELECT queries to exclude records
    where the 'deleted_at' field is not NULL. Relationship loads are left
    alone, so code that needs live rows only must query for them explicitly.

    Args:
        execute_state: The current execution state of the query
    """
    if (
        execute_state.is_select
        and not execute_state.is_relationship_load
    ):
        for entity in execute_state.statement.column_descriptions:
            if hasattr(entity['type'], 'deleted_at'):
                execute_state.statement = execute_state.statement.options(
                    with_loader_criteria(
                        entity['type'],
                        lambda cls: cls.deleted_at.is_(None),
                        include_aliases=True
                    )
                )

# Dependency to get database session
def get_db():
    """
    Dependency function that provides a database session.

    This function creates a new database session for each request and ensures
    that the session is properly closed after the request is completed.

    Yields:
        Session: A SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """
    Run a block as one unit of work on ``db``.

    Commits when the block finishes, rolls back and re-raises on any error,
    so a failed request never leaves partial rows behind.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
