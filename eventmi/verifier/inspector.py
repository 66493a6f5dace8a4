"""Read-only access to the events table, used as ground truth."""

import logging
from contextlib import contextmanager
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from eventmi.config import Settings
from eventmi.database import make_engine
from eventmi.models import Event
from eventmi.schemas import EventRecord
from eventmi.verifier.errors import StoreError

logger = logging.getLogger(__name__)


class StoreInspector:
    """Looks up event records directly in the store.

    Every call opens its own session and closes it before returning, also
    when the query fails. Nothing is ever committed. Missing records come
    back as None.
    """

    def __init__(self, engine):
        self.engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreInspector":
        return cls(make_engine(settings.database_url))

    def dispose(self):
        self.engine.dispose()

    @contextmanager
    def _session(self):
        session: Session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            logger.error("Store query failed: %s", exc)
            raise StoreError(f"Store query failed: {exc}") from exc
        except ValidationError as exc:
            logger.error("Store row does not match the event schema: %s", exc)
            raise StoreError(f"Malformed event row: {exc}") from exc
        finally:
            session.close()

    def get_by_id(self, event_id: int) -> Optional[EventRecord]:
        with self._session() as db:
            event = db.query(Event).filter(Event.id == event_id).first()
            return EventRecord.model_validate(event) if event else None

    def get_by_name(self, name: str) -> Optional[EventRecord]:
        """Return the lowest-id record with this name, if any."""
        with self._session() as db:
            event = db.query(Event).filter(Event.name == name).order_by(Event.id).first()
            return EventRecord.model_validate(event) if event else None

    def exists_by_name(self, name: str) -> bool:
        with self._session() as db:
            return db.query(Event.id).filter(Event.name == name).first() is not None

    def count(self) -> int:
        with self._session() as db:
            return db.query(Event).count()
