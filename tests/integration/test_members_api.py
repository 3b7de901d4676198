"""Integration tests for members_service endpoints."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from services.members_service.models import (
    CommissionType,
    MemberPaymentStatus,
    MemberStatus,
)
from services.payments_service.models import PlanType
from tests.factories import (
    MemberFactory,
    PaymentFactory,
    PlanFactory,
    PTPlanFactory,
    TrainerFactory,
)

# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_member(members_client, db_session):
    """Registering with a plan snapshots its price and mints the next id."""
    plan = PlanFactory.create(price=2400, duration=1)
    db_session.add(plan)
    await db_session.commit()

    response = await members_client.post(
        "/members",
        json={
            "name": "Asha Roy",
            "phone": "9000000101",
            "plan_id": str(plan.id),
            "admission_fee_amount": 500,
        },
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["member_id"] == "MEM001"
    assert data["status"] == "Active"
    assert data["total_plan_price"] == 2400
    assert data["payment_status"] == "unpaid"
    assert data["balance"] == 2900
    assert data["membership_display_status"] == "Active"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_member_unknown_plan(members_client):
    response = await members_client.post(
        "/members",
        json={"name": "X", "phone": "9000000102", "plan_id": str(uuid.uuid4())},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_members_paginates_and_sweeps(members_client, db_session):
    past = datetime.now(timezone.utc) - timedelta(days=3)
    db_session.add_all(
        [
            MemberFactory.create(member_id="MEM001", membership_end_date=past),
            MemberFactory.create(member_id="MEM002"),
            MemberFactory.create(member_id="MEM003"),
        ]
    )
    await db_session.commit()

    response = await members_client.get("/members", params={"limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}
    assert [m["member_id"] for m in body["data"]] == ["MEM003", "MEM002"]

    expired = await members_client.get("/members", params={"status": "Expired"})
    assert [m["member_id"] for m in expired.json()["data"]] == ["MEM001"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_members_rejects_unknown_status(members_client):
    response = await members_client.get("/members", params={"status": "Frozen"})
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_and_patch_member(members_client, db_session):
    member = MemberFactory.create(
        total_plan_price=3000,
        total_paid=1500,
        payment_status=MemberPaymentStatus.PARTIAL,
    )
    db_session.add(member)
    await db_session.commit()

    response = await members_client.get(f"/members/{member.id}")
    assert response.status_code == 200
    assert response.json()["payment_status"] == "partial"

    response = await members_client.patch(
        f"/members/{member.id}", json={"total_plan_price": 1500, "name": "Renamed"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["payment_status"] == "paid"
    assert data["balance"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_patch_member_rejects_null_name(members_client, db_session):
    member = MemberFactory.create(name="Asha Roy")
    db_session.add(member)
    await db_session.commit()

    response = await members_client.patch(f"/members/{member.id}", json={"name": None})
    assert response.status_code == 422

    response = await members_client.get(f"/members/{member.id}")
    assert response.json()["name"] == "Asha Roy"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_member_not_found(members_client):
    response = await members_client.get(f"/members/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"detail": "Member not found", "code": "NOT_FOUND"}


# ---------------------------------------------------------------------------
# Plans and trainers
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_duplicate_plan_name_conflicts(members_client):
    payload = {"name": "Quarterly", "price": 4500, "duration": 3}
    first = await members_client.post("/plans", json=payload)
    second = await members_client.post("/plans", json=payload)

    assert first.status_code == 201
    assert second.status_code == 409


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_trainers_get_consecutive_ids(members_client):
    ids = []
    for name in ("Kabir", "Meera"):
        response = await members_client.post(
            "/trainers", json={"name": name, "base_salary": 12000}
        )
        assert response.status_code == 201, response.text
        ids.append(response.json()["trainer_id"])

    assert ids == ["TRN001", "TRN002"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_trainer_salary(members_client, db_session):
    trainer = TrainerFactory.create(
        base_salary=10000, commission_type=CommissionType.FIXED, commission_value=500
    )
    pt_plan = PTPlanFactory.create(trainer_id=trainer.id, price=4000)
    db_session.add_all([trainer, pt_plan])
    await db_session.commit()
    db_session.add_all(
        [
            MemberFactory.create(trainer_id=trainer.id, pt_plan_id=pt_plan.id),
            MemberFactory.create(trainer_id=trainer.id, pt_plan_id=pt_plan.id),
            MemberFactory.create(
                trainer_id=trainer.id,
                pt_plan_id=pt_plan.id,
                status=MemberStatus.EXPIRED,
            ),
        ]
    )
    await db_session.commit()

    response = await members_client.get(f"/trainers/{trainer.id}/salary")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["commission_amount"] == 1000
    assert data["total_salary"] == 11000
    assert data["active_members_count"] == 2
    assert len(data["member_details"]) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_trainer_history_endpoints(members_client, db_session):
    trainer = TrainerFactory.create(base_salary=30000)
    db_session.add(trainer)
    await db_session.commit()
    client = MemberFactory.create(name="Asha Roy", trainer_id=trainer.id)
    db_session.add(client)
    await db_session.commit()
    db_session.add(
        PaymentFactory.create(
            member_id=client.id,
            receipt_number="RCP-20260301-00001",
            amount=4000,
            plan_type=PlanType.PT_PLAN,
        )
    )
    await db_session.commit()

    clients = await members_client.get(f"/trainers/{trainer.id}/clients")
    assert clients.status_code == 200, clients.text
    assert [c["name"] for c in clients.json()] == ["Asha Roy"]

    history = await members_client.get(f"/trainers/{trainer.id}/pt-history")
    assert history.status_code == 200, history.text
    assert history.json()[0]["receipt_number"] == "RCP-20260301-00001"
    assert history.json()[0]["member_id"] == client.member_id

    months = await members_client.get(
        f"/trainers/{trainer.id}/salary-history", params={"months": 3}
    )
    assert months.status_code == 200, months.text
    assert len(months.json()) == 3
    assert months.json()[0]["leave_days"] == 0

    too_many = await members_client.get(
        f"/trainers/{trainer.id}/salary-history", params={"months": 25}
    )
    assert too_many.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_salary_history_unknown_trainer(members_client):
    response = await members_client.get(f"/trainers/{uuid.uuid4()}/salary-history")

    assert response.status_code == 404
    assert response.json()["detail"] == "Trainer not found"
