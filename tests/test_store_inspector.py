"""Tests for the read-only store inspector."""

from datetime import datetime

import pytest
from sqlalchemy import create_engine, text

from eventmi.models import Event
from eventmi.schemas import EventRecord
from eventmi.verifier.errors import StoreError
from eventmi.verifier.inspector import StoreInspector


def _insert(db, **overrides):
    data = {
        "name": "Stored Event",
        "start": datetime(2024, 9, 29, 9, 0),
        "end": datetime(2024, 9, 29, 19, 0),
        "place": "Sofia Tech Park",
    }
    data.update(overrides)
    event = Event(**data)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


class TestGetById:
    def test_found(self, db, inspector):
        event = _insert(db)
        record = inspector.get_by_id(event.id)
        assert isinstance(record, EventRecord)
        assert record.id == event.id
        assert record.name == "Stored Event"
        assert record.start == datetime(2024, 9, 29, 9, 0)
        assert record.place == "Sofia Tech Park"

    def test_not_found_is_none(self, inspector):
        assert inspector.get_by_id(99999) is None

    def test_snapshot_usable_after_session_closed(self, db, inspector):
        event = _insert(db)
        record = inspector.get_by_id(event.id)
        db.delete(event)
        db.commit()
        assert record.name == "Stored Event"
        assert inspector.get_by_id(event.id) is None


class TestGetByName:
    def test_found(self, db, inspector):
        event = _insert(db, name="Named")
        assert inspector.get_by_name("Named").id == event.id

    def test_not_found_is_none(self, inspector):
        assert inspector.get_by_name("Nobody") is None

    def test_duplicates_return_lowest_id(self, db, inspector):
        first = _insert(db, name="Twin", place="A")
        _insert(db, name="Twin", place="B")
        assert inspector.get_by_name("Twin").id == first.id


class TestExistsAndCount:
    def test_exists_by_name(self, db, inspector):
        _insert(db, name="Present")
        assert inspector.exists_by_name("Present") is True
        assert inspector.exists_by_name("Absent") is False

    def test_count(self, db, inspector):
        assert inspector.count() == 0
        _insert(db)
        _insert(db)
        assert inspector.count() == 2


class TestFailures:
    def test_query_failure_raises_store_error(self, tmp_path):
        # Empty database without the events table
        broken = StoreInspector(create_engine(f"sqlite:///{tmp_path / 'empty.db'}"))
        with pytest.raises(StoreError):
            broken.get_by_id(1)
        broken.dispose()

    def test_session_released_after_failure(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
        broken = StoreInspector(engine)
        with pytest.raises(StoreError):
            broken.count()
        assert engine.pool.checkedout() == 0
        engine.dispose()

    def test_malformed_row_raises_store_error(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'loose.db'}")
        with engine.begin() as conn:
            conn.execute(text(
                'CREATE TABLE events (id INTEGER PRIMARY KEY, name VARCHAR(50), '
                'start DATETIME, "end" DATETIME, place VARCHAR(50))'
            ))
            conn.execute(text(
                "INSERT INTO events (id, name, start, \"end\", place) "
                "VALUES (1, 'No Place', '2024-09-29 09:00:00.000000', '2024-09-29 19:00:00.000000', NULL)"
            ))
        loose = StoreInspector(engine)
        with pytest.raises(StoreError) as exc_info:
            loose.get_by_id(1)
        assert "Malformed event row" in str(exc_info.value)
        assert engine.pool.checkedout() == 0
        engine.dispose()
