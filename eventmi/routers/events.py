"""Event pages served as HTML, routed the way the Eventmi MVC app routes them."""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import ValidationError
from sqlalchemy.orm import Session

from eventmi.config import get_settings
from eventmi.database import get_db
from eventmi.models import Event
from eventmi.schemas import EventForm, form_errors
from eventmi.timestamps import format_wire_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/Event", tags=["events"])

# Jinja2 template setup
templates_dir = Path(__file__).parent.parent / "templates" / "event"
jinja_env = Environment(
    loader=FileSystemLoader(str(templates_dir)),
    autoescape=select_autoescape(["html"]),
)


def _format_wire(value):
    """Render a datetime the way forms submit it."""
    if not value:
        return ""
    return format_wire_timestamp(value, get_settings().wire_timezone)

jinja_env.filters["wire"] = _format_wire


def _render(template: str, status_code: int = 200, **context) -> HTMLResponse:
    html = jinja_env.get_template(template).render(**context)
    return HTMLResponse(content=html, status_code=status_code)


def _redirect_to_all() -> RedirectResponse:
    # 303 so the follow-up request is a GET
    return RedirectResponse(url="/Event/All", status_code=303)


def _body_id(raw) -> int | None:
    """Parse the posted Id as a number; anything unparsable counts as no id."""
    try:
        return int(str(raw.get("Id", "")).strip())
    except ValueError:
        return None


def _get_event_or_404(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("/All", response_class=HTMLResponse)
def all_events(db: Session = Depends(get_db)):
    """List every event, soonest first."""
    events = db.query(Event).order_by(Event.start, Event.id).all()
    return _render("all.html", events=events)


@router.get("/Add", response_class=HTMLResponse)
def add_form():
    return _render("form.html", action="/Event/Add", title="Add Event", form={}, errors=[])


@router.post("/Add", response_class=HTMLResponse)
async def add_submit(request: Request, db: Session = Depends(get_db)):
    """Create an event, or redisplay the form when the input is invalid."""
    raw = dict(await request.form())
    try:
        form = EventForm.model_validate(raw)
    except ValidationError as exc:
        logger.info("Rejected event form: %s", exc.error_count())
        return _render("form.html", action="/Event/Add", title="Add Event", form=raw, errors=form_errors(exc))

    db_event = Event(name=form.name, start=form.start, end=form.end, place=form.place)
    db.add(db_event)
    db.commit()
    db.refresh(db_event)
    logger.info("Created event %s (%s)", db_event.id, db_event.name)
    return _redirect_to_all()


@router.get("/Details/{event_id}", response_class=HTMLResponse)
def details(event_id: int, db: Session = Depends(get_db)):
    event = _get_event_or_404(db, event_id)
    return _render("details.html", event=event)


@router.get("/Edit/{event_id}", response_class=HTMLResponse)
def edit_form(event_id: int, db: Session = Depends(get_db)):
    event = _get_event_or_404(db, event_id)
    form = {
        "Id": event.id,
        "Name": event.name,
        "Start": _format_wire(event.start),
        "End": _format_wire(event.end),
        "Place": event.place,
    }
    return _render("form.html", action=f"/Event/Edit/{event.id}", title="Edit Event", form=form, errors=[])


@router.post("/Edit/{event_id}", response_class=HTMLResponse)
async def edit_submit(event_id: int, request: Request, db: Session = Depends(get_db)):
    """Update an event.

    The body ``Id`` must match the path id, otherwise nothing is touched and
    the response is 404. Invalid input redisplays the form.
    """
    raw = dict(await request.form())
    if _body_id(raw) != event_id:
        logger.info("Edit of event %s rejected: body Id %r does not match", event_id, raw.get("Id"))
        raise HTTPException(status_code=404, detail="Event not found")

    try:
        form = EventForm.model_validate(raw)
    except ValidationError as exc:
        return _render(
            "form.html", action=f"/Event/Edit/{event_id}", title="Edit Event",
            form=raw, errors=form_errors(exc),
        )

    db_event = _get_event_or_404(db, event_id)
    db_event.name = form.name
    db_event.start = form.start
    db_event.end = form.end
    db_event.place = form.place
    db.commit()
    logger.info("Updated event %s", event_id)
    return _redirect_to_all()


@router.post("/Delete/{event_id}")
def delete_submit(event_id: int, db: Session = Depends(get_db)):
    """Delete an event. Deleting an unknown id is a no-op."""
    deleted = db.query(Event).filter(Event.id == event_id).delete()
    db.commit()
    if deleted:
        logger.info("Deleted event %s", event_id)
    return _redirect_to_all()
