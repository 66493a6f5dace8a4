"""Lifecycle scenarios for the event pages.

Each scenario drives the endpoint surface over HTTP and checks the outcome
against the store. Scenarios seed their own fixture records through the add
page, so they are independent of each other and of any pre-seeded data.
Fixture records are deleted again afterwards unless ``cleanup`` is off.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from eventmi.schemas import EventRecord
from eventmi.timestamps import to_wire_zone
from eventmi.verifier.client import EndpointClient, EndpointResponse
from eventmi.verifier.errors import (
    StoreInconsistency,
    UnexpectedRedirect,
    UnexpectedStatus,
    VerificationError,
)
from eventmi.verifier.inspector import StoreInspector
from eventmi.verifier.request_builder import RequestBuilder, RequestDescriptor

logger = logging.getLogger(__name__)

CREATION_FIXTURE = {
    "name": "DEV: Challenge Accepted",
    "start": datetime(2024, 9, 29, 9, 0),
    "end": datetime(2024, 9, 29, 19, 0),
    "place": "Sofia Tech Park",
}
SEED_NAME = "Verifier fixture"
MISMATCHED_BODY_ID = 456
MUTABLE_FIELDS = ("name", "start", "end", "place")

# scenario name -> description, in run order
SCENARIOS: dict[str, str] = {}


def scenario(description: str):
    """Register a harness method as a scenario."""

    def decorator(func: Callable):
        SCENARIOS[func.__name__] = description
        return func

    return decorator


@dataclass
class ScenarioResult:
    name: str
    passed: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None
    duration: float = 0.0


class VerificationHarness:
    """Runs the event lifecycle scenarios against one endpoint surface and store."""

    def __init__(
        self,
        client: EndpointClient,
        inspector: StoreInspector,
        builder: Optional[RequestBuilder] = None,
        cleanup: bool = True,
        unique_names: bool = True,
    ):
        self.client = client
        self.inspector = inspector
        self.builder = builder or RequestBuilder(client.settings.wire_timezone)
        self.cleanup = cleanup
        self.unique_names = unique_names
        self._seeded: list[int] = []

    # ============== Running ==============

    def run(self, name: str) -> ScenarioResult:
        """Run one scenario. Verification failures are captured in the result."""
        if name not in SCENARIOS:
            raise ValueError(f"Unknown scenario: {name}")

        started = time.monotonic()
        self._seeded = []
        try:
            getattr(self, name)()
        except VerificationError as exc:
            duration = time.monotonic() - started
            logger.warning("FAIL %s: %s", name, exc)
            return ScenarioResult(name, False, str(exc), type(exc).__name__, duration)
        finally:
            self._remove_seeded()

        duration = time.monotonic() - started
        logger.info("PASS %s (%.2fs)", name, duration)
        return ScenarioResult(name, True, duration=duration)

    def run_all(self, names: Optional[list[str]] = None) -> list[ScenarioResult]:
        if names is None:
            names = list(SCENARIOS)
        return [self.run(name) for name in names]

    # ============== Helpers ==============

    def _send(self, request: RequestDescriptor, expected_status: int) -> EndpointResponse:
        response = self.client.send(request)
        if response.status_code != expected_status:
            raise UnexpectedStatus(request.method, request.path, expected_status, response.status_code)
        return response

    def _unique(self, prefix: str) -> str:
        return f"{prefix} {uuid.uuid4().hex[:8]}"

    def _normalize(self, value: datetime) -> datetime:
        return to_wire_zone(value, self.builder.wire_timezone)

    def _assert_fields(self, record: EventRecord, expected: dict, context: str):
        mismatches = []
        for field in MUTABLE_FIELDS:
            actual = getattr(record, field)
            wanted = expected[field]
            if isinstance(wanted, datetime):
                actual, wanted = self._normalize(actual), self._normalize(wanted)
            if actual != wanted:
                mismatches.append(f"{field}: expected {wanted!r}, got {actual!r}")
        if mismatches:
            raise StoreInconsistency(f"{context}: " + "; ".join(mismatches))

    def _require_by_id(self, event_id: int, context: str) -> EventRecord:
        record = self.inspector.get_by_id(event_id)
        if record is None:
            raise StoreInconsistency(f"{context}: event {event_id} is not in the store")
        return record

    def seed_event(self, **overrides) -> EventRecord:
        """Create a fixture record through the add page and read it back."""
        fields = dict(CREATION_FIXTURE, name=self._unique(SEED_NAME))
        fields.update(overrides)
        self._send(self.builder.add_submit(**fields), 200)

        record = self.inspector.get_by_name(fields["name"])
        if record is None:
            raise StoreInconsistency(f"Seeded event {fields['name']!r} was not added to the store")
        self._seeded.append(record.id)
        return record

    def _remove_seeded(self):
        if not self.cleanup:
            return
        for event_id in self._seeded:
            try:
                self.client.send(self.builder.delete(event_id))
            except VerificationError as exc:
                logger.warning("Could not remove fixture event %s: %s", event_id, exc)
        self._seeded = []

    # ============== Scenarios ==============

    @scenario("GET /Event/All returns 200")
    def list_events(self):
        self._send(self.builder.list_events(), 200)

    @scenario("GET /Event/Add returns 200")
    def show_add_form(self):
        self._send(self.builder.add_form(), 200)

    @scenario("POST /Event/Add stores the submitted event")
    def submit_creation(self):
        # Suffixed by default so repeated runs against one store stay distinguishable
        name = CREATION_FIXTURE["name"]
        if self.unique_names:
            name = self._unique(name)
        fields = dict(CREATION_FIXTURE, name=name)
        self._send(self.builder.add_submit(**fields), 200)

        record = self.inspector.get_by_name(fields["name"])
        if record is None:
            raise StoreInconsistency(f"Event {fields['name']!r} was not added to the store")
        self._seeded.append(record.id)
        self._assert_fields(record, fields, "Created event")

    @scenario("GET /Event/Details/{id} returns 200")
    def show_details(self):
        record = self.seed_event()
        self._send(self.builder.details(record.id), 200)

    @scenario("GET /Event/Edit/{id} returns 200")
    def show_edit_form(self):
        record = self.seed_event()
        self._send(self.builder.edit_form(record.id), 200)

    @scenario("POST /Event/Edit/{id} with matching ids updates the event")
    def submit_edit(self):
        before = self.seed_event()
        fields = {
            "name": f"{before.name} Updated!",
            "start": before.start + timedelta(days=1),
            "end": before.end + timedelta(days=1, hours=1),
            "place": "Sofia Tech Park, Hall 2",
        }
        self._send(self.builder.edit_submit(before.id, **fields), 200)

        after = self._require_by_id(before.id, "Edited event")
        self._assert_fields(after, fields, "Edited event")

        by_name = self.inspector.get_by_name(fields["name"])
        if by_name is None or by_name.id != before.id:
            raise StoreInconsistency(f"Edited event changed identity: {before.id} -> {by_name and by_name.id}")

    @scenario("POST /Event/Edit/{id} with a different body id returns 404 and changes nothing")
    def submit_edit_id_mismatch(self):
        before = self.seed_event()
        body_id = MISMATCHED_BODY_ID if before.id != MISMATCHED_BODY_ID else before.id + MISMATCHED_BODY_ID
        request = self.builder.edit_submit(
            before.id,
            body_id=body_id,
            name=f"{before.name} Updated!",
            start=before.start,
            end=before.end,
            place=before.place,
        )
        self._send(request, 404)

        after = self._require_by_id(before.id, "Event after rejected edit")
        if after != before:
            raise StoreInconsistency(f"Rejected edit mutated event {before.id}: {before!r} -> {after!r}")

    @scenario("POST /Event/Edit/{id} with missing fields redisplays the form")
    def submit_edit_incomplete(self):
        before = self.seed_event()
        request = self.builder.edit_submit(before.id, name=before.name)
        response = self._send(request, 200)
        if response.redirected:
            raise UnexpectedRedirect(
                f"{request.method} {request.path}: incomplete form was accepted and redirected to {response.url}"
            )

        after = self._require_by_id(before.id, "Event after invalid edit")
        if after != before:
            raise StoreInconsistency(f"Invalid edit mutated event {before.id}: {before!r} -> {after!r}")

    @scenario("POST /Event/Delete/{id} removes the event")
    def submit_deletion(self):
        seeded = self.seed_event(name=self._unique("Event for Deleting"))
        record = self.inspector.get_by_name(seeded.name)
        if record is None:
            raise StoreInconsistency(f"Event {seeded.name!r} disappeared before deletion")

        self._send(self.builder.delete(record.id), 200)
        if self.inspector.get_by_id(record.id) is not None:
            raise StoreInconsistency(f"Event {record.id} is still in the store after deletion")

        # A repeated delete must still be answered; only transport failures count
        response = self.client.send(self.builder.delete(record.id))
        logger.debug("Repeated delete of %s answered %s", record.id, response.status_code)
        self._seeded.remove(record.id)
