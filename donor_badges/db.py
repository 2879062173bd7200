# donor_badges/db.py
"""Engine setup and storage sessions for badge evaluation"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from donor_badges.config import settings
from donor_badges.db_config import DatabaseManager
from donor_badges.models.db import Base
from donor_badges.services.storage import StorageService

logger = logging.getLogger(__name__)

class Database:
    """Owns the engine for the badges, donations and user_badges tables"""

    def __init__(self):
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._engine

    def init(self, url: Optional[str] = None) -> None:
        """
        Connect and make sure the badge tables exist.

        Args:
            url: SQLAlchemy URL, defaults to the one resolved from settings

        Raises:
            ValueError: If the configured URL is malformed
            SQLAlchemyError: If the database cannot be reached
        """
        url = url or DatabaseManager.get_connection_string(settings)
        try:
            engine = create_engine(url)
            Base.metadata.create_all(engine)
        except SQLAlchemyError as e:
            logger.error(f"Database initialization failed: {e}")
            raise
        self._engine = engine
        self._sessions = sessionmaker(bind=engine)
        logger.info(f"Connected to {engine.dialect.name} database")

    def get_session(self) -> Session:
        """New session on the initialized engine; the caller closes it"""
        engine = self.engine
        return self._sessions(bind=engine)

    @contextmanager
    def storage(self) -> Iterator[StorageService]:
        """
        StorageService on a fresh session, closed on exit.

        StorageService commits its own writes, so nothing is committed here.
        """
        session = self.get_session()
        try:
            yield StorageService(session)
        finally:
            session.close()

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessions = None

# Global database instance
db = Database()
