"""
City API endpoints
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy import func, or_
from sqlmodel import Session, select
from typing import Optional
from datetime import datetime
import structlog
import uuid

from porchboard.core.config import get_settings
from porchboard.core.database import commit_or_conflict, get_session
from porchboard.core.dependencies import requires
from porchboard.core.exceptions import Conflict, NotFound, ValidationError
from porchboard.core.permissions import Identity, Permission, require_same_tenant
from porchboard.core.utils import generate_slug, to_naive_utc
from porchboard.models.city import City
from porchboard.models.event import Event, EventStatus
from porchboard.schemas import CityAnalytics, CityCreate, CityResponse, success
from porchboard.services.storage import MediaStorage, get_media_storage

logger = structlog.get_logger(__name__)
router = APIRouter()
settings = get_settings()

CITY_EXISTS = "City with this domain or name already exists"


def city_exists(session: Session, domain: str, slug: str) -> bool:
    return session.exec(
        select(City).where(or_(City.domain == domain, City.slug == slug))
    ).first() is not None


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_city(
    city_data: CityCreate,
    session: Session = Depends(get_session)
):
    """Create a new city board"""
    slug = generate_slug(city_data.name)
    if not slug:
        raise ValidationError("City name must contain letters or digits")

    if city_exists(session, city_data.domain, slug):
        raise Conflict(CITY_EXISTS)

    city = City(
        name=city_data.name,
        slug=slug,
        domain=city_data.domain,
        branding=city_data.branding.model_dump(),
        subscription_tier=city_data.subscription_tier,
    )
    session.add(city)
    commit_or_conflict(session, CITY_EXISTS)
    session.refresh(city)

    logger.info(f"City created: {city.id} ({city.slug})")
    return success(CityResponse.model_validate(city))


@router.patch("/{city_id}/branding")
async def update_city_branding(
    city_id: uuid.UUID,
    primary_color: str = Form(...),
    secondary_color: str = Form(...),
    font: str = Form(...),
    footer_text: str = Form(...),
    logo: Optional[UploadFile] = File(default=None),
    identity: Identity = Depends(requires(Permission.CITY_BRANDING_EDIT)),
    storage: MediaStorage = Depends(get_media_storage),
    session: Session = Depends(get_session)
):
    """Update branding, optionally replacing the logo"""
    city = session.get(City, city_id)
    if not city:
        raise NotFound("City not found")

    require_same_tenant(identity, city.id, "city")

    logo_url = (city.branding or {}).get("logo")
    if logo is not None and logo.filename:
        logo_url = await storage.upload_file(
            logo,
            prefix=f"cities/{city.id}/logo",
            max_bytes=settings.MAX_LOGO_BYTES,
        )

    city.branding = {
        "primary_color": primary_color,
        "secondary_color": secondary_color,
        "font": font,
        "footer_text": footer_text,
        "logo": logo_url,
    }
    city.updated_at = datetime.utcnow()
    session.add(city)
    session.commit()
    session.refresh(city)

    logger.info(f"City branding updated: {city.id}")
    return success(CityResponse.model_validate(city))


@router.get("/domain/{domain}")
async def get_city_by_domain(
    domain: str,
    session: Session = Depends(get_session)
):
    """Resolve the city served on a domain"""
    city = session.exec(select(City).where(City.domain == domain)).first()
    if not city:
        raise NotFound("City not found")
    return success(CityResponse.model_validate(city))


@router.get("/{city_id}/analytics")
async def get_city_analytics(
    city_id: uuid.UUID,
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    identity: Identity = Depends(requires(Permission.CITY_ANALYTICS_VIEW)),
    session: Session = Depends(get_session)
):
    """Count events created in the window, by moderation status"""
    require_same_tenant(identity, city_id, "city")

    start, end = to_naive_utc(start_date), to_naive_utc(end_date)
    rows = session.exec(
        select(Event.status, func.count(Event.id))
        .where(Event.city_id == city_id)
        .where(Event.created_at >= start)
        .where(Event.created_at <= end)
        .group_by(Event.status)
    ).all()
    counts = {EventStatus(row_status): count for row_status, count in rows}

    analytics = CityAnalytics(
        total_events=sum(counts.values()),
        pending_events=counts.get(EventStatus.PENDING, 0),
        approved_events=counts.get(EventStatus.APPROVED, 0),
        rejected_events=counts.get(EventStatus.REJECTED, 0),
        flagged_events=counts.get(EventStatus.FLAGGED, 0),
        period={"start": start_date, "end": end_date},
    )
    return success(analytics)
