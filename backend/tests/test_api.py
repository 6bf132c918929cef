from uuid import uuid4

import pytest

from slotbook.api.deps import get_slot_store
from tests.helpers import FailingStore

PREFIX = "/api/v1"


def create(client, headers, **overrides):
    payload = {"scheduled_at": "2025-07-01T10:00:00Z", "duration_minutes": 60}
    payload.update(overrides)
    response = client.post(f"{PREFIX}/booking-slots/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def provider(auth_headers):
    return auth_headers("provider-1")


def test_health(client):
    assert client.get(f"{PREFIX}/health/").json()["status"] == "ok"


def test_ready_queries_slot_table(client):
    response = client.get(f"{PREFIX}/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "database": "connected"}


def test_ready_reports_unreachable_store(client):
    client.app.dependency_overrides[get_slot_store] = FailingStore

    response = client.get(f"{PREFIX}/health/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"
    assert response.json()["database"] == "disconnected"


def test_create_requires_authentication(client):
    response = client.post(
        f"{PREFIX}/booking-slots/",
        json={"scheduled_at": "2025-07-01T10:00:00Z", "duration_minutes": 60},
    )

    assert response.status_code == 401


def test_invalid_token_is_rejected(client):
    response = client.get(
        f"{PREFIX}/providers/provider-1/slots",
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 401


def test_create_slot(client, provider):
    slot = create(client, provider, title="Studio time", price=50)

    assert slot["provider_uid"] == "provider-1"
    assert slot["status"] == "available"
    assert slot["scheduled_at"].startswith("2025-07-01T10:00:00")
    assert slot["scheduled_at"].endswith(("Z", "+00:00"))


def test_create_slot_rejects_naive_time(client, provider):
    response = client.post(
        f"{PREFIX}/booking-slots/",
        json={"scheduled_at": "2025-07-01T10:00:00", "duration_minutes": 60},
        headers=provider,
    )

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidInput"


def test_create_slot_rejects_non_positive_duration(client, provider):
    response = client.post(
        f"{PREFIX}/booking-slots/",
        json={"scheduled_at": "2025-07-01T10:00:00Z", "duration_minutes": 0},
        headers=provider,
    )

    assert response.status_code == 400


def test_listing_scenario(client, provider, auth_headers):
    s1 = create(client, provider, scheduled_at="2025-07-01T10:00:00Z")
    s2 = create(
        client,
        provider,
        scheduled_at="2025-07-01T14:00:00Z",
        invite_only=True,
        min_rank="signature",
    )

    plain = client.get(
        f"{PREFIX}/providers/provider-1/slots", headers=auth_headers("plain-user")
    )
    star = client.get(
        f"{PREFIX}/providers/provider-1/slots", headers=auth_headers("star", rank="top5")
    )
    anonymous = client.get(f"{PREFIX}/providers/provider-1/slots")

    assert [slot["id"] for slot in plain.json()] == [s1["id"]]
    assert [slot["id"] for slot in star.json()] == [s1["id"], s2["id"]]
    assert [slot["id"] for slot in anonymous.json()] == [s1["id"]]


def test_listing_window(client, provider):
    create(client, provider, scheduled_at="2025-07-01T08:00:00Z")
    inside = create(client, provider, scheduled_at="2025-07-01T12:00:00Z")

    response = client.get(
        f"{PREFIX}/providers/provider-1/slots",
        params={"from": "2025-07-01T12:00:00+00:00", "to": "2025-07-01T18:00:00+00:00"},
    )

    assert [slot["id"] for slot in response.json()] == [inside["id"]]


def test_listing_inverted_window(client):
    response = client.get(
        f"{PREFIX}/providers/provider-1/slots",
        params={"from": "2025-07-02T00:00:00Z", "to": "2025-07-01T00:00:00Z"},
    )

    assert response.status_code == 400


def test_management_view_is_owner_only(client, provider, auth_headers):
    create(client, provider, scheduled_at="2025-07-01T10:00:00Z")
    create(client, provider, scheduled_at="2025-07-01T14:00:00Z", invite_only=True)

    own = client.get(f"{PREFIX}/providers/provider-1/slots/all", headers=provider)
    other = client.get(
        f"{PREFIX}/providers/provider-1/slots/all", headers=auth_headers("someone", rank="top5")
    )

    assert own.status_code == 200
    assert len(own.json()) == 2
    assert other.status_code == 403


def test_book_slot_and_conflict(client, provider, auth_headers):
    first = create(client, provider)
    duplicate = create(client, provider)

    booked = client.post(
        f"{PREFIX}/booking-slots/{first['id']}/book", headers=auth_headers("booker-1")
    )
    clash = client.post(
        f"{PREFIX}/booking-slots/{duplicate['id']}/book", headers=auth_headers("booker-2")
    )

    assert booked.status_code == 200
    assert booked.json()["status"] == "booked"
    assert booked.json()["booked_by"] == "booker-1"
    assert clash.status_code == 409
    assert clash.json()["error"] == "ConflictDetected"


def test_book_requires_authentication(client, provider):
    slot = create(client, provider)

    assert client.post(f"{PREFIX}/booking-slots/{slot['id']}/book").status_code == 401


def test_book_invite_only_without_access(client, provider, auth_headers):
    slot = create(client, provider, invite_only=True, min_rank="top5")

    response = client.post(
        f"{PREFIX}/booking-slots/{slot['id']}/book",
        headers=auth_headers("fan", isVerified=True),
    )

    assert response.status_code == 403
    assert response.json()["error"] == "AccessDenied"


def test_book_unknown_slot(client, auth_headers):
    response = client.post(
        f"{PREFIX}/booking-slots/{uuid4()}/book", headers=auth_headers("booker-1")
    )

    assert response.status_code == 404


def test_conflict_endpoint(client, provider, auth_headers):
    slot = create(client, provider)
    client.post(f"{PREFIX}/booking-slots/{slot['id']}/book", headers=auth_headers("booker-1"))

    same = client.get(
        f"{PREFIX}/booking-slots/conflicts",
        params={"provider_uid": "provider-1", "at": "2025-07-01T10:00:00Z"},
    )
    other = client.get(
        f"{PREFIX}/booking-slots/conflicts",
        params={"provider_uid": "provider-2", "at": "2025-07-01T10:00:00Z"},
    )

    assert same.json()["has_conflict"] is True
    assert other.json()["has_conflict"] is False


def test_access_endpoint(client, provider, auth_headers):
    slot = create(client, provider, invite_only=True, allowed_uids=["friend"])

    friend = client.get(
        f"{PREFIX}/booking-slots/{slot['id']}/access", headers=auth_headers("friend")
    ).json()
    stranger = client.get(
        f"{PREFIX}/booking-slots/{slot['id']}/access",
        headers=auth_headers("stranger", proTier="signature"),
    ).json()
    anonymous = client.get(f"{PREFIX}/booking-slots/{slot['id']}/access").json()

    assert friend["has_access"] is True
    assert stranger == {"slot_id": slot["id"], "has_access": False, "resolved_rank": "signature"}
    assert anonymous["has_access"] is False
    assert anonymous["resolved_rank"] is None


def test_get_slot_visibility(client, provider, auth_headers):
    slot = create(client, provider, invite_only=True)

    assert client.get(f"{PREFIX}/booking-slots/{slot['id']}", headers=provider).status_code == 200
    assert client.get(f"{PREFIX}/booking-slots/{slot['id']}").status_code == 403


def test_booked_slot_is_hidden_from_other_callers(client, provider, auth_headers):
    slot = create(client, provider)
    booker = auth_headers("booker-1")
    client.post(f"{PREFIX}/booking-slots/{slot['id']}/book", headers=booker)
    url = f"{PREFIX}/booking-slots/{slot['id']}"

    anonymous = client.get(url)
    stranger = client.get(url, headers=auth_headers("stranger"))
    own = client.get(url, headers=booker)

    assert anonymous.status_code == 404
    assert "booked_by" not in anonymous.json()
    assert stranger.status_code == 404
    assert own.status_code == 200
    assert own.json()["booked_by"] == "booker-1"
    assert client.get(url, headers=provider).json()["status"] == "booked"


def test_update_and_cancel(client, provider, auth_headers):
    slot = create(client, provider)

    updated = client.put(
        f"{PREFIX}/booking-slots/{slot['id']}",
        json={"title": "Renamed", "duration_minutes": 90},
        headers=provider,
    )
    foreign = client.put(
        f"{PREFIX}/booking-slots/{slot['id']}",
        json={"title": "Hijack"},
        headers=auth_headers("intruder"),
    )
    cancelled = client.post(f"{PREFIX}/booking-slots/{slot['id']}/cancel", headers=provider)
    book_cancelled = client.post(
        f"{PREFIX}/booking-slots/{slot['id']}/book", headers=auth_headers("booker-1")
    )

    assert updated.status_code == 200
    assert updated.json()["title"] == "Renamed"
    assert updated.json()["duration_minutes"] == 90
    assert foreign.status_code == 403
    assert cancelled.json()["status"] == "cancelled"
    assert book_cancelled.status_code == 409
