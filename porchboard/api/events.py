"""
Events API endpoints - submission, public listing and moderation
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_
from sqlmodel import Session, select, col
from typing import List, Optional
from datetime import datetime
import json
import structlog
import uuid

from porchboard.core.config import get_settings
from porchboard.core.database import get_session
from porchboard.core.dependencies import get_current_identity, requires
from porchboard.core.exceptions import NotFound, ValidationError
from porchboard.core.permissions import Identity, Permission, require_permission, require_same_tenant
from porchboard.models.event import (
    MODERATION_DECISIONS,
    Event,
    EventStatus,
    InvalidTransition,
    initial_status_for,
)
from porchboard.models.user import User
from porchboard.schemas import (
    EventCreate,
    EventFilter,
    EventFlag,
    EventResponse,
    EventStatusUpdate,
    success,
)
from porchboard.schemas.event import CreatorSummary
from porchboard.services.storage import MediaStorage, get_media_storage

logger = structlog.get_logger(__name__)
router = APIRouter()
settings = get_settings()


def _parse_json_field(name: str, raw: Optional[str]):
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError(f"{name} must be valid JSON")


def build_event_query(filters: EventFilter):
    """Translate a listing filter into a query, applying only the fields that are set"""
    query = (
        select(Event, User)
        .join(User, Event.creator_id == User.id)
        .where(Event.city_id == filters.city_id)
    )

    if filters.category is not None:
        query = query.where(Event.category == filters.category)

    if filters.status is not None:
        query = query.where(Event.status == filters.status)

    if filters.start_date is not None:
        query = query.where(Event.start_time >= filters.start_date)

    if filters.end_date is not None:
        query = query.where(Event.end_time <= filters.end_date)

    if filters.search is not None:
        # Literal substring match; % and _ in the search text are not wildcards
        query = query.where(
            or_(
                col(Event.title).icontains(filters.search, autoescape=True),
                col(Event.description).icontains(filters.search, autoescape=True),
            )
        )

    return query.order_by(col(Event.start_time).asc())


def _event_response(event: Event, creator: Optional[User] = None) -> EventResponse:
    response = EventResponse.model_validate(event)
    if creator is not None:
        response.creator = CreatorSummary.model_validate(creator)
    return response


def _load_event(session: Session, event_id: uuid.UUID) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    return event


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    title: str = Form(...),
    description: str = Form(...),
    start_time: str = Form(...),
    end_time: str = Form(...),
    location: str = Form(..., description="JSON object"),
    category: str = Form(...),
    external_link: Optional[str] = Form(default=None),
    recurrence: Optional[str] = Form(default=None, description="JSON object"),
    images: Optional[List[UploadFile]] = File(default=None),
    identity: Identity = Depends(requires(Permission.EVENT_CREATE)),
    storage: MediaStorage = Depends(get_media_storage),
    session: Session = Depends(get_session)
):
    """
    Submit an event for the caller's city

    Admin submissions are published immediately; everyone else's wait in
    PENDING for moderation. Images are uploaded before the event is saved
    and are not removed if saving fails.
    """
    try:
        event_data = EventCreate.model_validate({
            "title": title,
            "description": description,
            "start_time": start_time,
            "end_time": end_time,
            "location": _parse_json_field("location", location),
            "category": category,
            "external_link": external_link or None,
            "recurrence": _parse_json_field("recurrence", recurrence),
        })
    except PydanticValidationError as e:
        raise ValidationError(
            "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        )

    uploads = [image for image in images or [] if image.filename]
    if len(uploads) > settings.MAX_EVENT_IMAGES:
        raise ValidationError(f"At most {settings.MAX_EVENT_IMAGES} images are allowed")

    image_urls = []
    for image in uploads:
        url = await storage.upload_file(
            image,
            prefix=f"events/{identity.city_id}/image",
            max_bytes=settings.MAX_EVENT_IMAGE_BYTES,
        )
        image_urls.append(url)

    event = Event(
        city_id=identity.city_id,
        creator_id=identity.user_id,
        title=event_data.title,
        description=event_data.description,
        start_time=event_data.start_time,
        end_time=event_data.end_time,
        location=event_data.location.model_dump(),
        category=event_data.category,
        external_link=str(event_data.external_link) if event_data.external_link else None,
        recurrence=event_data.recurrence.model_dump(mode="json") if event_data.recurrence else None,
        images=image_urls,
        status=initial_status_for(identity.role),
    )
    session.add(event)
    session.commit()
    session.refresh(event)

    logger.info(f"Event created: {event.id} in city {event.city_id} with status {event.status.value}")
    return success(_event_response(event))


@router.get("")
async def list_events(
    city_id: uuid.UUID = Query(..., alias="cityId"),
    category: Optional[str] = Query(default=None),
    event_status: Optional[EventStatus] = Query(default=None, alias="status"),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    search: Optional[str] = Query(default=None),
    session: Session = Depends(get_session)
):
    """List a city's events ordered by start time (no pagination)"""
    filters = EventFilter(
        city_id=city_id,
        category=category,
        status=event_status,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    rows = session.exec(build_event_query(filters)).all()
    return success([_event_response(event, creator) for event, creator in rows])


@router.patch("/{event_id}/status")
async def update_event_status(
    event_id: uuid.UUID,
    status_update: EventStatusUpdate,
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session)
):
    """Approve or reject an event of the admin's own city"""
    # Only two outcomes exist; any other target is rejected before role checks
    if status_update.status not in MODERATION_DECISIONS:
        raise ValidationError("Status must be APPROVED or REJECTED")

    require_permission(identity, Permission.EVENT_MODERATE)
    event = _load_event(session, event_id)
    require_same_tenant(identity, event.city_id, "event")

    try:
        event.transition_to_moderated(status_update.status)
    except InvalidTransition as e:
        raise ValidationError(str(e))

    session.add(event)
    session.commit()
    session.refresh(event)

    logger.info(f"Event {event.id} moderated to {event.status.value} by {identity.user_id}")
    return success(_event_response(event))


@router.post("/{event_id}/flag")
async def flag_event(
    event_id: uuid.UUID,
    flag: EventFlag,
    session: Session = Depends(get_session)
):
    """Report an event; open to anyone, including anonymous visitors"""
    event = _load_event(session, event_id)

    try:
        event.transition_to_flagged(flag.reason)
    except InvalidTransition as e:
        raise ValidationError(str(e))

    session.add(event)
    session.commit()
    session.refresh(event)

    logger.info(f"Event {event.id} flagged")
    return success(_event_response(event))
