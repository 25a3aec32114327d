"""Session Factory: engine + sessionmaker for the key-value table.

Invariants:
    - Tables are created on first use (create_all is idempotent)
    - expire_on_commit=False: rows stay readable after the session closes

Design Decisions:
    - No migrations tool: the schema is one key/value table whose shape never changes;
      entity structure lives inside the JSON value
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tasting.db.base import Base
import tasting.models  # noqa: F401


def create_storage_engine(storage_url: str) -> Engine:
    """Create the engine and make sure every model table exists."""
    engine = create_engine(storage_url, echo=False)
    Base.metadata.create_all(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, class_=Session, expire_on_commit=False)
