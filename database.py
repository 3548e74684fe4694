"""Database configuration and utilities."""
from contextlib import contextmanager
from typing import Iterator

from loguru import logger
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import create_engine

from models import SQLModel


class StoreUnavailable(Exception):
    """The photo database could not be reached or queried."""


def make_engine(url: str) -> Engine:
    """Create the engine for the photo database."""
    connect_args = {}
    if url.startswith("sqlite"):
        # connections cross the FastAPI threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


@contextmanager
def get_connection(engine: Engine) -> Iterator[Connection]:
    """Get a database connection context manager."""
    try:
        conn = engine.connect()
    except SQLAlchemyError as exc:
        logger.exception("Could not connect to {}", engine.url)
        raise StoreUnavailable(str(exc)) from exc
    with conn:
        yield conn


def create_schema(engine: Engine) -> None:
    """Create the Shotwell tables. Only used to build throwaway libraries."""
    SQLModel.metadata.create_all(engine)
