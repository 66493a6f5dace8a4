"""Builds form-encoded requests for each event page operation."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

from eventmi.timestamps import format_wire_timestamp

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Wire field names, in the order forms post them
FORM_FIELDS = ("Id", "Name", "Start", "End", "Place")

# operation -> (method, path template, takes a body)
OPERATIONS = {
    "list": ("GET", "/Event/All", False),
    "add_form": ("GET", "/Event/Add", False),
    "add_submit": ("POST", "/Event/Add", True),
    "details": ("GET", "/Event/Details/{id}", False),
    "edit_form": ("GET", "/Event/Edit/{id}", False),
    "edit_submit": ("POST", "/Event/Edit/{id}", True),
    "delete": ("POST", "/Event/Delete/{id}", False),
}


@dataclass(frozen=True)
class RequestDescriptor:
    """A request ready for dispatch."""

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[str] = None


class RequestBuilder:
    """Construct requests for the event pages.

    Field values may use either the wire names (``Name``) or the snake_case
    record names (``name``). Datetimes are rendered as wire timestamps in
    ``wire_timezone``; strings go out verbatim so callers can send malformed
    input on purpose.
    """

    def __init__(self, wire_timezone: str = "UTC"):
        self.wire_timezone = wire_timezone

    def build(
        self,
        operation: str,
        event_id: Optional[int] = None,
        fields: Optional[Mapping[str, Any]] = None,
    ) -> RequestDescriptor:
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown operation: {operation}")
        method, template, has_body = OPERATIONS[operation]

        if "{id}" in template:
            if event_id is None:
                raise ValueError(f"Operation {operation} needs an event id")
            path = template.format(id=event_id)
        else:
            path = template

        if not has_body:
            return RequestDescriptor(method=method, path=path)

        body = urlencode(self.encode_fields(fields or {}))
        return RequestDescriptor(
            method=method,
            path=path,
            headers={"Content-Type": FORM_CONTENT_TYPE},
            body=body,
        )

    def encode_fields(self, fields: Mapping[str, Any]) -> list[tuple[str, str]]:
        """Map field values to ordered (wire name, text) pairs, skipping None."""
        by_wire_name = {}
        for key, value in fields.items():
            wire_name = key[:1].upper() + key[1:]
            if wire_name not in FORM_FIELDS:
                raise ValueError(f"Unknown form field: {key}")
            if value is None:
                continue
            by_wire_name[wire_name] = self._encode_value(value)
        return [(name, by_wire_name[name]) for name in FORM_FIELDS if name in by_wire_name]

    def _encode_value(self, value: Any) -> str:
        if isinstance(value, datetime):
            return format_wire_timestamp(value, self.wire_timezone)
        return str(value)

    # Convenience wrappers, one per operation

    def list_events(self) -> RequestDescriptor:
        return self.build("list")

    def add_form(self) -> RequestDescriptor:
        return self.build("add_form")

    def add_submit(self, **fields) -> RequestDescriptor:
        return self.build("add_submit", fields=fields)

    def details(self, event_id: int) -> RequestDescriptor:
        return self.build("details", event_id)

    def edit_form(self, event_id: int) -> RequestDescriptor:
        return self.build("edit_form", event_id)

    def edit_submit(self, path_id: int, body_id: Optional[int] = None, **fields) -> RequestDescriptor:
        """Edit request; ``body_id`` defaults to ``path_id`` and may differ from it."""
        fields["id"] = path_id if body_id is None else body_id
        return self.build("edit_submit", path_id, fields)

    def delete(self, event_id: int) -> RequestDescriptor:
        return self.build("delete", event_id)
