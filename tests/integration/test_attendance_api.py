"""Integration tests for attendance_service endpoints."""

import uuid

import pytest
from libs.common.datetime_utils import local_date
from tests.factories import MemberFactory, TrainerFactory

PHOTO = "https://cdn.example.com/kiosk/photo.jpg"


async def _member(db_session, **overrides):
    member = MemberFactory.create(**overrides)
    db_session.add(member)
    await db_session.commit()
    return member


async def _trainer(db_session, **overrides):
    trainer = TrainerFactory.create(**overrides)
    db_session.add(trainer)
    await db_session.commit()
    return trainer


# ---------------------------------------------------------------------------
# Staff desk
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_check_in_and_out(attendance_client, db_session):
    member = await _member(db_session, name="Asha Roy")

    response = await attendance_client.post(
        "/attendance", json={"user_id": str(member.id), "user_type": "Member"}
    )
    assert response.status_code == 201, response.text
    record = response.json()
    assert record["status"] == "checked-in"
    assert record["user_name"] == "Asha Roy"

    again = await attendance_client.post(
        "/attendance", json={"user_id": str(member.id), "user_type": "Member"}
    )
    assert again.status_code == 409
    assert again.json()["code"] == "CONFLICT"

    response = await attendance_client.put(f"/attendance/{record['id']}/checkout")
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "checked-out"
    assert response.json()["duration"] == 0

    twice = await attendance_client.put(f"/attendance/{record['id']}/checkout")
    assert twice.status_code == 409


@pytest.mark.asyncio
@pytest.mark.integration
async def test_check_in_requires_user_type(attendance_client, db_session):
    member = await _member(db_session)

    response = await attendance_client.post(
        "/attendance", json={"user_id": str(member.id)}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "user_type is required"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_unknown_record(attendance_client):
    response = await attendance_client.put(f"/attendance/{uuid.uuid4()}/checkout")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_today_listing(attendance_client, db_session):
    first = await _member(db_session)
    second = await _member(db_session)
    for member in (first, second):
        await attendance_client.post(
            "/attendance", json={"user_id": str(member.id), "user_type": "Member"}
        )

    response = await attendance_client.get("/attendance")
    assert response.status_code == 200
    assert response.json()["count"] == 2

    filtered = await attendance_client.get(
        "/attendance", params={"status": "checked-out"}
    )
    assert filtered.json()["count"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_auto_checkout_is_idempotent(attendance_client, db_session):
    member = await _member(db_session)
    await attendance_client.post(
        "/attendance", json={"user_id": str(member.id), "user_type": "Member"}
    )

    status = await attendance_client.get("/attendance/auto-checkout")
    assert status.json()["active_check_ins"] == 1

    first = await attendance_client.post("/attendance/auto-checkout")
    second = await attendance_client.post("/attendance/auto-checkout")

    assert first.json() == {"count": 1, "message": "Successfully checked out 1 user(s)"}
    assert second.json()["count"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_history_includes_stats(attendance_client, db_session):
    member = await _member(db_session)
    created = await attendance_client.post(
        "/attendance", json={"user_id": str(member.id), "user_type": "Member"}
    )
    await attendance_client.put(f"/attendance/{created.json()['id']}/checkout")

    response = await attendance_client.get(
        "/attendance/history", params={"user_id": str(member.id), "user_type": "Member"}
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert len(body["data"]) == 1
    assert body["stats"]["total_records"] == 1
    assert body["stats"]["current_page"] == 1


# ---------------------------------------------------------------------------
# Kiosk
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_kiosk_lookup_and_self_service(attendance_client, db_session):
    member = await _member(db_session, member_id="MEM059", name="Ravi Das")

    lookup = await attendance_client.post("/attendance/lookup", json={"identifier": "59"})
    assert lookup.status_code == 200, lookup.text
    found = lookup.json()
    assert found["user_id"] == str(member.id)
    assert found["is_checked_in"] is False

    checkin = await attendance_client.post(
        "/attendance/self-service",
        json={
            "user_id": found["user_id"],
            "user_type": found["user_type"],
            "action": "checkin",
            "photo_url": PHOTO,
        },
    )
    assert checkin.status_code == 200, checkin.text
    assert checkin.json()["message"].startswith("Welcome Ravi Das!")

    lookup = await attendance_client.post(
        "/attendance/lookup", json={"identifier": "MEM059"}
    )
    assert lookup.json()["is_checked_in"] is True
    assert lookup.json()["has_checked_in_today"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_self_service_without_photo_is_rejected(attendance_client, db_session):
    member = await _member(db_session)

    response = await attendance_client.post(
        "/attendance/self-service",
        json={"user_id": str(member.id), "user_type": "Member", "action": "checkin"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Photo verification is required"
    listing = await attendance_client.get("/attendance")
    assert listing.json()["count"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_kiosk_lookup_unknown(attendance_client):
    response = await attendance_client.post(
        "/attendance/lookup", json={"identifier": "nobody"}
    )
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Trainer working days
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_trainer_daily_attendance(attendance_client, db_session):
    trainer = await _trainer(db_session)
    trainer_id = trainer.id

    checkin = await attendance_client.post(
        f"/trainers/{trainer_id}/attendance",
        json={"action": "checkin", "photo_url": PHOTO},
    )
    assert checkin.status_code == 200, checkin.text
    assert checkin.json()["check_in"] is not None

    duplicate = await attendance_client.post(
        f"/trainers/{trainer_id}/attendance", json={"action": "checkin"}
    )
    assert duplicate.status_code == 409

    days = await attendance_client.get(f"/trainers/{trainer_id}/attendance")
    assert len(days.json()) == 1

    today = await attendance_client.get("/attendance", params={"user_type": "Trainer"})
    assert today.json()["data"][0]["status"] == "checked-in"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_trainer_leaves(attendance_client, db_session):
    trainer = await _trainer(db_session)
    trainer_id = trainer.id
    today = local_date().isoformat()

    response = await attendance_client.post(
        f"/trainers/{trainer_id}/leaves", json={"date": today}
    )
    assert response.status_code == 201, response.text
    assert response.json()["status"] == "leave"

    leaves = await attendance_client.get(f"/trainers/{trainer_id}/leaves")
    assert leaves.json() == [today]

    listing = await attendance_client.get(
        "/attendance", params={"user_type": "Trainer"}
    )
    assert listing.json()["data"][0]["status"] == "leave"

    removed = await attendance_client.delete(f"/trainers/{trainer_id}/leaves/{today}")
    assert removed.status_code == 204
    missing = await attendance_client.delete(f"/trainers/{trainer_id}/leaves/{today}")
    assert missing.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_trainer_leave_after_check_in_conflicts(attendance_client, db_session):
    trainer = await _trainer(db_session)
    trainer_id = trainer.id
    await attendance_client.post(
        f"/trainers/{trainer_id}/attendance", json={"action": "checkin"}
    )

    response = await attendance_client.post(
        f"/trainers/{trainer_id}/leaves", json={"date": local_date().isoformat()}
    )

    assert response.status_code == 409
