"""
End-to-end tests through the HTTP layer: envelopes, status codes and the
request id header.
"""

from datetime import timedelta
from decimal import Decimal

from daycare.core.security import create_access_token
from daycare.schemas.enums import UserRole
from tests.helpers import auth_headers

TRANSACTIONS = "/api/v1/finance/transactions"


class TestEnvelope:

    async def test_success_envelope(self, client, parent):
        response = await client.get("/api/v1/users/me", headers=auth_headers(parent))
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["email"] == parent.email
        assert body["data"]["full_name"] == "Pat Parent"

    async def test_missing_token_is_unauthenticated(self, client):
        response = await client.get("/api/v1/children")
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["reason"] == "unauthenticated"

    async def test_expired_token_is_unauthenticated(self, client, admin):
        token = create_access_token(admin.id, UserRole.ADMIN, expires_delta=timedelta(minutes=-5))
        response = await client.get("/api/v1/users", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_forbidden(self, client, teacher):
        response = await client.get("/api/v1/users", headers=auth_headers(teacher))
        assert response.status_code == 403
        assert response.json()["reason"] == "forbidden"

    async def test_not_found(self, client, admin):
        response = await client.get("/api/v1/children/9999", headers=auth_headers(admin))
        assert response.status_code == 404
        body = response.json()
        assert body["reason"] == "not_found"
        assert body["message"] == "Child not found"

    async def test_request_validation_is_400(self, client, admin):
        response = await client.post(TRANSACTIONS, json={"amount": -3}, headers=auth_headers(admin))
        assert response.status_code == 400
        body = response.json()
        assert body["reason"] == "validation_error"
        assert body["details"]["errors"]

    async def test_request_id_is_echoed(self, client, admin):
        response = await client.get(
            "/api/v1/users/me", headers={**auth_headers(admin), "X-Request-ID": "abc-123"}
        )
        assert response.headers["X-Request-ID"] == "abc-123"

        response = await client.get("/api/v1/users/me")
        assert response.headers["X-Request-ID"]


class TestFinanceOverHttp:

    async def test_approval_lifecycle(self, client, admin, finance_user):
        finance, boss = auth_headers(finance_user), auth_headers(admin)
        payload = {
            "transaction_type": "income",
            "category": "tuition_fees",
            "amount": "500.00",
            "description": "February tuition",
            "transaction_date": "2024-02-01",
        }

        response = await client.post(TRANSACTIONS, json=payload, headers=finance)
        assert response.status_code == 201
        created = response.json()["data"]
        assert created["status"] == "pending"
        transaction_id = created["id"]

        response = await client.patch(
            f"{TRANSACTIONS}/{transaction_id}/approve", json={"approved": True}, headers=finance
        )
        assert response.status_code == 403

        response = await client.patch(
            f"{TRANSACTIONS}/{transaction_id}/approve", json={"approved": True}, headers=boss
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Transaction approved successfully"
        assert response.json()["data"]["status"] == "approved"

        response = await client.put(
            f"{TRANSACTIONS}/{transaction_id}", json={"amount": "1.00"}, headers=finance
        )
        assert response.status_code == 409
        assert response.json()["reason"] == "immutable"

        response = await client.get(f"{TRANSACTIONS}/{transaction_id}", headers=boss)
        assert Decimal(str(response.json()["data"]["amount"])) == Decimal("500.00")

    async def test_monthly_report(self, client, finance_user, make_transaction):
        headers = auth_headers(finance_user)
        await make_transaction(approve=True, amount=Decimal("300.00"))
        await make_transaction(amount=Decimal("75.00"))

        response = await client.get("/api/v1/reports/financial", params={"month": "2024-01"}, headers=headers)
        assert response.status_code == 200
        summary = response.json()["data"]["summary"]
        assert Decimal(str(summary["total_income"])) == Decimal("300.00")
        assert summary["total_transactions"] == 1

        response = await client.get("/api/v1/reports/pending_transactions", headers=headers)
        assert [Decimal(str(t["amount"])) for t in response.json()["data"]] == [Decimal("75.00")]

    async def test_unknown_report_kind(self, client, admin):
        response = await client.get("/api/v1/reports/horoscope", headers=auth_headers(admin))
        assert response.status_code == 400


class TestActivitiesOverHttp:

    async def test_capacity_conflict(self, client, teacher, parent, make_child, make_activity):
        headers = auth_headers(teacher)
        first = await make_child(teacher, [parent])
        second = await make_child(teacher, [parent])
        activity = await make_activity(teacher, max_participants=1)
        url = f"/api/v1/activities/{activity.id}/participants"
        first_id, second_id = first.id, second.id

        response = await client.post(url, json={"child_id": first_id}, headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["participant_ids"] == [first_id]

        response = await client.post(url, json={"child_id": second_id}, headers=headers)
        assert response.status_code == 409
        assert response.json()["reason"] == "capacity_exceeded"

    async def test_parent_sees_own_children_only(self, client, make_user, teacher, parent, make_child):
        headers = auth_headers(parent)
        other = await make_user(UserRole.PARENT)
        mine = await make_child(teacher, [parent])
        await make_child(teacher, [other])

        response = await client.get("/api/v1/children", headers=headers)
        body = response.json()["data"]
        assert body["total"] == 1
        assert [c["id"] for c in body["items"]] == [mine.id]


class TestListingOverHttp:

    async def test_filters_and_paging_share_the_query(self, client, admin, teacher, parent, make_child):
        headers = auth_headers(admin)
        for _ in range(3):
            await make_child(teacher, [parent])
        await make_child(teacher, [parent], classroom="Daisies")

        response = await client.get(
            "/api/v1/children", params={"classroom": "Sunflowers", "page": 2, "page_size": 2}, headers=headers
        )
        assert response.status_code == 200
        body = response.json()["data"]
        assert body["total"] == 3
        assert body["page"] == 2
        assert body["page_size"] == 2
        assert len(body["items"]) == 1

    async def test_defaults_apply_without_paging_params(self, client, admin, finance_user, make_transaction):
        await make_transaction()
        response = await client.get(TRANSACTIONS, headers=auth_headers(finance_user))
        assert response.status_code == 200
        body = response.json()["data"]
        assert body["page"] == 1
        assert body["total"] == 1

    async def test_page_below_one_is_rejected(self, client, admin):
        response = await client.get("/api/v1/users", params={"page": 0}, headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["reason"] == "validation_error"
