"""
Authorization tests.

Verifies:
- Unauthenticated requests return 401
- Staff (branch executive) denied approvals, accounts, masters and settings (403)
- Manager (Regional Head) can approve but cannot read the audit trail
- Admin can perform every operation
- Denials are recorded as security events
"""

import pytest

from bullion.extensions import db
from bullion.models import SecurityEvent


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/state"),
            ("POST", "/api/sync"),
            ("GET", "/api/masters"),
            ("POST", "/api/masters"),
            ("POST", "/api/kyc/verify"),
            ("GET", "/api/kyc/records"),
            ("GET", "/api/transactions"),
            ("POST", "/api/transactions"),
            ("GET", "/api/transactions/LOT-001"),
            ("POST", "/api/workflow/approve"),
            ("POST", "/api/workflow/invoice"),
            ("POST", "/api/workflow/verify"),
            ("POST", "/api/workflow/disburse"),
            ("POST", "/api/workflow/transfer"),
            ("POST", "/api/workflow/receive"),
            ("POST", "/api/workflow/melt"),
            ("GET", "/api/sales-orders"),
            ("POST", "/api/sales-orders"),
            ("GET", "/api/inventory"),
            ("GET", "/api/settings"),
            ("POST", "/api/settings/market-rates"),
            ("GET", "/api/audit-logs"),
            ("GET", "/api/auth/me"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token_rejected(self, client, db_session):
        resp = client.get("/api/state", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid or expired token"


# =============================================================================
# LOGIN / LOGOUT
# =============================================================================


class TestLogin:

    def test_login_returns_token_and_identity(self, client, staff_a):
        resp = client.post("/api/auth/login", json={"username": "staff.a", "password": "secret123"})

        assert resp.status_code == 200
        body = resp.json
        assert body["token"]
        assert body["user"]["role"] == "STAFF"
        assert body["user"]["tenantName"] == "True Money Gold HQ"
        assert "SUBMIT_LOTS" in body["permissions"]
        assert "APPROVE_LOTS" not in body["permissions"]
        assert body["expiresAt"].endswith("Z")

    def test_bad_password_rejected_and_logged(self, client, staff_a):
        resp = client.post("/api/auth/login", json={"username": "staff.a", "password": "wrong"})

        assert resp.status_code == 400
        assert resp.json["error"] == "Invalid credentials"
        event = db.session.query(SecurityEvent).filter_by(event_type="LOGIN_FAILED").one()
        assert event.success is False

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/auth/login", json={"username": "staff.a"})
        assert resp.status_code == 400

    def test_inactive_user_cannot_login(self, client, staff_a):
        staff_a.is_active = False
        db.session.commit()
        resp = client.post("/api/auth/login", json={"username": "staff.a", "password": "secret123"})
        assert resp.status_code == 400

    def test_logout_revokes_token(self, client, staff_a, login):
        headers = login(staff_a)
        assert client.get("/api/auth/me", headers=headers).status_code == 200

        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert client.get("/api/auth/me", headers=headers).status_code == 401
        assert client.post("/api/auth/logout", headers=headers).status_code == 401

    def test_me_describes_capabilities(self, client, manager_a, login):
        resp = client.get("/api/auth/me", headers=login(manager_a))

        assert resp.status_code == 200
        assert resp.json["role"] == "MANAGER"
        codes = {
            entry["code"]
            for entries in resp.json["capabilities"].values()
            for entry in entries
        }
        assert codes == set(resp.json["permissions"])
        assert "VIEW_AUDIT_LOG" not in codes


# =============================================================================
# STAFF DENIED PRIVILEGED OPERATIONS - 403
# =============================================================================


class TestStaffDenied:
    """Branch executives cannot decide, invoice, pay or administer."""

    @pytest.mark.parametrize(
        "method,path,permission",
        [
            ("POST", "/api/workflow/approve", "APPROVE_LOTS"),
            ("POST", "/api/workflow/invoice", "ISSUE_INVOICES"),
            ("POST", "/api/workflow/verify", "VERIFY_ACCOUNTS"),
            ("POST", "/api/workflow/disburse", "DISBURSE_PAYMENTS"),
            ("POST", "/api/masters", "MANAGE_MASTERS"),
            ("POST", "/api/sales-orders", "MANAGE_SALES"),
            ("POST", "/api/settings", "MANAGE_SETTINGS"),
            ("POST", "/api/settings/market-rates", "MANAGE_SETTINGS"),
            ("GET", "/api/audit-logs", "VIEW_AUDIT_LOG"),
        ],
    )
    def test_denied(self, client, staff_a, login, method, path, permission):
        resp = getattr(client, method.lower())(path, json={}, headers=login(staff_a))

        assert resp.status_code == 403
        assert resp.json["kind"] == "PermissionDenied"
        assert resp.json["required_permission"] == permission

    def test_denial_logged_as_security_event(self, client, staff_a, login, make_lot):
        make_lot("LOT-001")
        client.post("/api/workflow/approve", json={"lotNo": "LOT-001", "decision": "Approved"},
                    headers=login(staff_a))

        event = db.session.query(SecurityEvent).filter_by(event_type="PERMISSION_DENIED").one()
        assert event.user_id == staff_a.id
        assert event.tenant_id == staff_a.tenant_id
        assert event.action == "APPROVE_LOTS"
        assert event.resource == "/api/workflow/approve"

    def test_staff_can_submit_and_handle_logistics(self, client, staff_a, login):
        headers = login(staff_a)
        resp = client.post("/api/transactions", json={
            "lotNo": "LOT-001",
            "items": [{"product": "Chain", "weight": 10, "wastePercent": 2, "rate": 7200}],
        }, headers=headers)
        assert resp.status_code == 200

        # Permission passes; the lot is simply not ready for dispatch
        resp = client.post("/api/workflow/transfer", json={
            "lotNo": "LOT-001", "vehicleNo": "TN-33-A-1234", "sealNumber": "SEAL-001",
        }, headers=headers)
        assert resp.status_code == 409


# =============================================================================
# MANAGER / ADMIN ACCESS
# =============================================================================


class TestManagerAccess:

    def test_can_approve(self, client, manager_a, login, make_lot):
        make_lot("LOT-001")
        resp = client.post("/api/workflow/approve", json={"lotNo": "LOT-001", "decision": "Approved"},
                           headers=login(manager_a))
        assert resp.status_code == 200
        assert resp.json["status"] == "Approved"
        assert resp.json["auditBy"] == manager_a.id

    def test_can_set_market_rates(self, client, manager_a, login):
        resp = client.post("/api/settings/market-rates", json={"gold": 7250}, headers=login(manager_a))
        assert resp.status_code == 200
        assert resp.json["marketRates"]["gold"] == 7250.0

    def test_cannot_read_audit_trail(self, client, manager_a, login):
        assert client.get("/api/audit-logs", headers=login(manager_a)).status_code == 403


class TestAdminAccess:

    def test_can_read_audit_trail(self, client, admin_a, login, make_lot):
        make_lot("LOT-001")
        resp = client.get("/api/audit-logs", headers=login(admin_a))
        assert resp.status_code == 200
        assert [entry["action"] for entry in resp.json["items"]] == ["LOT_SUBMITTED"]

    def test_audit_limit_validated(self, client, admin_a, login):
        resp = client.get("/api/audit-logs?limit=abc", headers=login(admin_a))
        assert resp.status_code == 400


# =============================================================================
# PUBLIC ENDPOINTS
# =============================================================================


class TestPublicEndpoints:

    def test_health(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"
