"""End-to-end vendor onboarding: register, wait for approval, sign in."""

import pytest

from tests.conftest import DEFAULT_PASSWORD, auth_headers, make_vendor_payload


@pytest.mark.asyncio
class TestVendorOnboarding:
    async def test_acme_pharmacy_flow(self, client, audit_repo, admin):
        resp = await client.post(
            "/api/v1/auth/register",
            json=make_vendor_payload(store_details={
                "store_name": "Acme",
                "description": "Neighbourhood pharmacy",
                "address": "12 Long Street, Cape Town",
                "phone": "+27215550100",
            }),
        )
        assert resp.status_code == 201
        vendor = resp.json()["user"]
        assert vendor["status"] == "pending"
        assert vendor["store_profile"]["logo"] == ""

        credentials = {"email": "acme@x.com", "password": DEFAULT_PASSWORD, "role": "vendor"}
        resp = await client.post("/api/v1/auth/login", json=credentials)
        assert resp.status_code == 403
        assert resp.json()["code"] == "vendor_pending_approval"

        resp = await client.get(
            "/api/v1/admin/users",
            params={"role": "vendor", "status": "pending"},
            headers=auth_headers(admin),
        )
        assert [item["id"] for item in resp.json()["items"]] == [vendor["id"]]

        resp = await client.put(
            f"/api/v1/admin/users/{vendor['id']}",
            json={"status": "active", "reason": "Licence checked"},
            headers=auth_headers(admin),
        )
        assert resp.status_code == 200
        assert resp.json()["store_profile"]["active"] is True

        resp = await client.post("/api/v1/auth/login", json=credentials)
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["permissions"]["manage_products"] is True
        assert [h["status"] for h in body["user"]["status_history"]] == ["active", "pending"]

        actions = [e.action for e in audit_repo.entries]
        assert actions == ["USER_REGISTERED", "ACCOUNT_UPDATED", "LOGIN_SUCCESS"]
