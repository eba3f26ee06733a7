"""Database utilities for the notes inbox."""

from . import models
from .database import get_session, init_db, make_engine, make_sessionmaker
from .repositories import NoteRepo

__all__ = ["models", "get_session", "init_db", "make_engine", "make_sessionmaker", "NoteRepo"]
