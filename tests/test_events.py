"""
Integration tests for event submission, listing, moderation and flagging
"""

import pytest
from datetime import datetime, timedelta
import json
import uuid

from sqlmodel import Session

from porchboard.core.config import get_settings
from porchboard.models import City, Event, EventStatus, User, UserRole

from conftest import auth_headers, make_user

settings = get_settings()

LOCATION = {
    "address": "742 Evergreen Terrace",
    "city": "Springfield",
    "state": "OR",
    "zip_code": "97403",
    "latitude": 44.05,
    "longitude": -123.09,
}


def event_form(**overrides) -> dict:
    form = {
        "title": "Jazz in the Park",
        "description": "An evening of live jazz by the bandstand.",
        "start_time": "2026-11-01T18:00:00Z",
        "end_time": "2026-11-01T21:00:00Z",
        "location": json.dumps(LOCATION),
        "category": "music",
    }
    form.update(overrides)
    return form


def add_event(
    db: Session,
    city: City,
    creator: User,
    title: str,
    status: EventStatus = EventStatus.APPROVED,
    start: datetime = datetime(2026, 11, 1, 18, 0),
    category: str = "music",
    description: str = "A community gathering for everyone.",
) -> Event:
    event = Event(
        city_id=city.id,
        creator_id=creator.id,
        title=title,
        description=description,
        category=category,
        start_time=start,
        end_time=start + timedelta(hours=2),
        location=LOCATION,
        status=status,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


# Submission

def test_admin_event_is_published_immediately(client, test_admin, test_city):
    response = client.post("/api/events", data=event_form(), headers=auth_headers(test_admin))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "APPROVED"
    assert data["city_id"] == str(test_city.id)
    assert data["creator_id"] == str(test_admin.id)
    assert data["images"] == []
    assert data["location"]["zip_code"] == "97403"


def test_creator_event_waits_for_moderation(client, test_creator):
    response = client.post("/api/events", data=event_form(), headers=auth_headers(test_creator))

    assert response.status_code == 201
    assert response.json()["data"]["status"] == "PENDING"


def test_event_belongs_to_callers_city(client, test_creator, other_city):
    """A city id sent in the form is not how an event picks its city"""
    response = client.post(
        "/api/events",
        data=event_form(city_id=str(other_city.id)),
        headers=auth_headers(test_creator),
    )

    assert response.status_code == 201
    assert response.json()["data"]["city_id"] == str(test_creator.city_id)


def test_visitor_cannot_submit_events(client, db, test_city):
    visitor = make_user(db, test_city, "visitor@springfield.com", UserRole.VISITOR)

    response = client.post("/api/events", data=event_form(), headers=auth_headers(visitor))

    assert response.status_code == 403


def test_anonymous_cannot_submit_events(client):
    response = client.post("/api/events", data=event_form())

    assert response.status_code == 401


def test_event_with_recurrence_and_link(client, test_admin):
    form = event_form(
        recurrence=json.dumps({"frequency": "WEEKLY", "interval": 1, "end_date": "2026-12-31T00:00:00Z"}),
        external_link="https://tickets.springfield.com/jazz",
    )

    response = client.post("/api/events", data=form, headers=auth_headers(test_admin))

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["recurrence"]["frequency"] == "WEEKLY"
    assert data["external_link"] == "https://tickets.springfield.com/jazz"


@pytest.mark.parametrize("overrides", [
    {"title": "Hi"},
    {"description": "Too short"},
    {"start_time": "2026-11-02T18:00:00Z"},
    {"location": "{not json"},
    {"location": json.dumps({**LOCATION, "latitude": 120})},
    {"recurrence": json.dumps({"frequency": "HOURLY", "interval": 1})},
    {"external_link": "not a url"},
])
def test_invalid_submission_is_rejected(client, db, test_admin, overrides):
    response = client.post("/api/events", data=event_form(**overrides), headers=auth_headers(test_admin))

    assert response.status_code == 400
    assert response.json()["status"] == "error"
    assert db.query(Event).count() == 0


def test_event_images_are_uploaded(client, test_admin, s3_client):
    files = [
        ("images", ("stage.png", b"\x89PNG fake bytes", "image/png")),
        ("images", ("crowd.jpg", b"\xff\xd8 fake bytes", "image/jpeg")),
    ]

    response = client.post(
        "/api/events",
        data=event_form(),
        files=files,
        headers=auth_headers(test_admin),
    )

    assert response.status_code == 201
    images = response.json()["data"]["images"]
    assert len(images) == 2
    assert images[0].startswith(f"https://{settings.AWS_S3_BUCKET}.s3.")
    assert images[0].endswith("-stage.png")
    assert s3_client.put_object.call_count == 2

    call = s3_client.put_object.call_args_list[0].kwargs
    assert call["ContentType"] == "image/png"
    assert call["ACL"] == "public-read"
    assert call["Key"].startswith(f"events/{test_admin.city_id}/image-")


def test_too_many_images(client, db, test_admin, s3_client):
    files = [
        ("images", (f"photo{i}.png", b"png", "image/png"))
        for i in range(settings.MAX_EVENT_IMAGES + 1)
    ]

    response = client.post("/api/events", data=event_form(), files=files, headers=auth_headers(test_admin))

    assert response.status_code == 400
    s3_client.put_object.assert_not_called()
    assert db.query(Event).count() == 0


def test_non_image_upload_is_rejected(client, test_admin, s3_client):
    files = [("images", ("notes.pdf", b"%PDF-1.7", "application/pdf"))]

    response = client.post("/api/events", data=event_form(), files=files, headers=auth_headers(test_admin))

    assert response.status_code == 400
    s3_client.put_object.assert_not_called()


def test_oversized_image_is_rejected(client, test_admin, s3_client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_EVENT_IMAGE_BYTES", 16)
    files = [("images", ("big.png", b"x" * 17, "image/png"))]

    response = client.post("/api/events", data=event_form(), files=files, headers=auth_headers(test_admin))

    assert response.status_code == 413
    s3_client.put_object.assert_not_called()


# Listing

def test_list_is_scoped_to_city_and_ordered(client, db, test_city, test_admin, other_city, other_admin):
    add_event(db, test_city, test_admin, "Late Show", start=datetime(2026, 11, 3, 20, 0))
    add_event(db, test_city, test_admin, "Early Market", start=datetime(2026, 11, 1, 8, 0))
    add_event(db, other_city, other_admin, "Shelbyville Fair")

    response = client.get("/api/events", params={"cityId": str(test_city.id)})

    assert response.status_code == 200
    data = response.json()["data"]
    assert [e["title"] for e in data] == ["Early Market", "Late Show"]
    assert data[0]["creator"] == {"id": str(test_admin.id), "name": test_admin.name}


def test_list_requires_city(client):
    response = client.get("/api/events")

    assert response.status_code == 400


def test_list_filters_by_status_and_category(client, db, test_city, test_admin):
    add_event(db, test_city, test_admin, "Approved Concert")
    add_event(db, test_city, test_admin, "Pending Concert", status=EventStatus.PENDING)
    add_event(db, test_city, test_admin, "Approved Bake Sale", category="food")

    response = client.get("/api/events", params={
        "cityId": str(test_city.id),
        "status": "APPROVED",
        "category": "music",
    })

    assert [e["title"] for e in response.json()["data"]] == ["Approved Concert"]


def test_list_search_is_case_insensitive(client, db, test_city, test_admin):
    add_event(db, test_city, test_admin, "JAZZ Night")
    add_event(db, test_city, test_admin, "Farmers Market", description="Produce, bread and smooth jazz.")
    add_event(db, test_city, test_admin, "Chess Club")

    response = client.get("/api/events", params={"cityId": str(test_city.id), "search": "jazz"})

    titles = {e["title"] for e in response.json()["data"]}
    assert titles == {"JAZZ Night", "Farmers Market"}


@pytest.mark.parametrize("search, expected", [
    ("_", set()),
    ("%", {"Half off: 50% tickets"}),
    ("50%", {"Half off: 50% tickets"}),
])
def test_list_search_treats_wildcards_literally(client, db, test_city, test_admin, search, expected):
    add_event(db, test_city, test_admin, "Bake sale")
    add_event(db, test_city, test_admin, "Half off: 50% tickets")

    response = client.get("/api/events", params={"cityId": str(test_city.id), "search": search})

    assert {e["title"] for e in response.json()["data"]} == expected


def test_list_date_window(client, db, test_city, test_admin):
    add_event(db, test_city, test_admin, "October Event", start=datetime(2026, 10, 10, 12, 0))
    add_event(db, test_city, test_admin, "November Event", start=datetime(2026, 11, 10, 12, 0))

    response = client.get("/api/events", params={
        "cityId": str(test_city.id),
        "startDate": "2026-11-01T00:00:00Z",
        "endDate": "2026-11-30T23:59:59Z",
    })

    assert [e["title"] for e in response.json()["data"]] == ["November Event"]


# Moderation

def test_admin_approves_pending_event(client, db, test_city, test_admin, test_creator):
    event = add_event(db, test_city, test_creator, "Block Party", status=EventStatus.PENDING)

    response = client.patch(
        f"/api/events/{event.id}/status",
        json={"status": "APPROVED"},
        headers=auth_headers(test_admin),
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "APPROVED"
    db.refresh(event)
    assert event.status == EventStatus.APPROVED


def test_admin_rejects_event(client, db, test_city, test_admin, test_creator):
    event = add_event(db, test_city, test_creator, "Block Party", status=EventStatus.PENDING)

    response = client.patch(
        f"/api/events/{event.id}/status",
        json={"status": "REJECTED"},
        headers=auth_headers(test_admin),
    )

    assert response.json()["data"]["status"] == "REJECTED"


@pytest.mark.parametrize("role_fixture", ["test_admin", "test_creator"])
@pytest.mark.parametrize("target", ["PENDING", "FLAGGED"])
def test_status_must_be_a_decision_for_every_role(request, client, db, test_city, test_creator, role_fixture, target):
    caller = request.getfixturevalue(role_fixture)
    event = add_event(db, test_city, test_creator, "Block Party", status=EventStatus.PENDING)

    response = client.patch(
        f"/api/events/{event.id}/status",
        json={"status": target},
        headers=auth_headers(caller),
    )

    assert response.status_code == 400


def test_creator_cannot_moderate(client, db, test_city, test_creator):
    event = add_event(db, test_city, test_creator, "Block Party", status=EventStatus.PENDING)

    response = client.patch(
        f"/api/events/{event.id}/status",
        json={"status": "APPROVED"},
        headers=auth_headers(test_creator),
    )

    assert response.status_code == 403
    db.refresh(event)
    assert event.status == EventStatus.PENDING


def test_admin_cannot_moderate_other_city(client, db, test_city, test_creator, other_admin):
    event = add_event(db, test_city, test_creator, "Block Party", status=EventStatus.PENDING)

    response = client.patch(
        f"/api/events/{event.id}/status",
        json={"status": "APPROVED"},
        headers=auth_headers(other_admin),
    )

    assert response.status_code == 403
    db.refresh(event)
    assert event.status == EventStatus.PENDING


def test_moderate_missing_event(client, test_admin):
    response = client.patch(
        f"/api/events/{uuid.uuid4()}/status",
        json={"status": "APPROVED"},
        headers=auth_headers(test_admin),
    )

    assert response.status_code == 404


# Flagging

def test_anyone_can_flag(client, db, test_city, test_admin):
    event = add_event(db, test_city, test_admin, "Parade")

    response = client.post(f"/api/events/{event.id}/flag", json={"reason": "0123456789"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "FLAGGED"
    assert data["flag_reason"] == "0123456789"
    assert data["flagged_at"] is not None


def test_flag_reason_too_short(client, db, test_city, test_admin):
    event = add_event(db, test_city, test_admin, "Parade")

    response = client.post(f"/api/events/{event.id}/flag", json={"reason": "012345678"})

    assert response.status_code == 400
    db.refresh(event)
    assert event.status == EventStatus.APPROVED


def test_flag_missing_event(client):
    response = client.post(f"/api/events/{uuid.uuid4()}/flag", json={"reason": "This listing is spam"})

    assert response.status_code == 404


def test_flagged_event_can_be_reapproved(client, db, test_city, test_admin):
    event = add_event(db, test_city, test_admin, "Parade", status=EventStatus.FLAGGED)

    response = client.patch(
        f"/api/events/{event.id}/status",
        json={"status": "APPROVED"},
        headers=auth_headers(test_admin),
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "APPROVED"
