"""
Multi-tenant isolation tests.

Every tenant-owned read and write is scoped by the tenant captured on the
session; another tenant's rows are reported as 404, exactly like rows that
do not exist.
"""

import pytest

from bullion.errors import NotFoundError
from bullion.extensions import db
from bullion.services import lot_service, session_service, sync_service, tenant_service
from conftest import lot_payload


# =============================================================================
# SESSION TENANT CONTEXT
# =============================================================================


class TestSessionTenantContext:

    def test_session_captures_tenant_and_role(self, db_session, staff_a, tenant_a):
        session, token = session_service.create_session(staff_a.id)
        assert session.tenant_id == tenant_a.id
        assert session.role == "STAFF"

        context = session_service.validate_session(token)
        assert context.tenant_id == tenant_a.id
        assert context.user.id == staff_a.id

    def test_token_stored_hashed(self, db_session, staff_a):
        session, token = session_service.create_session(staff_a.id)
        assert session.token_hash == session_service.hash_token(token)
        assert session.token_hash != token

    def test_session_invalid_when_tenant_deactivated(self, db_session, staff_a, tenant_a):
        _, token = session_service.create_session(staff_a.id)

        tenant_a.is_active = False
        db.session.commit()

        assert session_service.validate_session(token) is None

    def test_cannot_create_session_for_inactive_tenant(self, db_session, staff_a, tenant_a):
        tenant_a.is_active = False
        db.session.commit()
        with pytest.raises(ValueError):
            session_service.create_session(staff_a.id)


class TestTenantService:

    def test_codes_are_unique_and_uppercased(self, db_session):
        tenant = tenant_service.create_tenant("Madurai Gold", "mdu")
        assert tenant.code == "MDU"
        assert tenant_service.get_tenant_by_code("mdu").id == tenant.id

        with pytest.raises(ValueError):
            tenant_service.create_tenant("Madurai Gold 2", "MDU")

    def test_name_required(self, db_session):
        with pytest.raises(ValueError):
            tenant_service.create_tenant("   ")


# =============================================================================
# LOT ISOLATION
# =============================================================================


class TestLotIsolation:

    def test_same_lot_no_in_two_tenants(self, admin_identity, admin_b_identity):
        lot_service.submit_lot(admin_identity, lot_payload("LOT-001"))
        lot_service.submit_lot(admin_b_identity, lot_payload("LOT-001", customerName="Meena"))

        assert lot_service.get_lot(admin_identity, "LOT-001").customer_name == "Arjun Reddy"
        assert lot_service.get_lot(admin_b_identity, "LOT-001").customer_name == "Meena"

    def test_cross_tenant_transition_is_not_found(self, admin_identity, admin_b_identity, make_lot):
        make_lot("LOT-001")

        with pytest.raises(NotFoundError):
            lot_service.decide(admin_b_identity, {"lotNo": "LOT-001", "decision": "Approved"})

        assert lot_service.get_lot(admin_identity, "LOT-001").phase == "PENDING"

    def test_cross_tenant_read_over_http_is_404(self, client, admin_b, login, make_lot):
        make_lot("LOT-001")
        headers = login(admin_b)

        assert client.get("/api/transactions/LOT-001", headers=headers).status_code == 404
        resp = client.post("/api/workflow/approve", json={"lotNo": "LOT-001", "decision": "Approved"},
                           headers=headers)
        assert resp.status_code == 404
        assert resp.json["kind"] == "NotFound"

    def test_lists_are_scoped(self, client, admin_a, admin_b, login, make_lot):
        make_lot("LOT-001")
        make_lot("LOT-002")

        assert client.get("/api/transactions", headers=login(admin_a)).json["count"] == 2
        assert client.get("/api/transactions", headers=login(admin_b)).json["count"] == 0


# =============================================================================
# SNAPSHOT / SYNC ISOLATION
# =============================================================================


class TestSyncIsolation:

    def test_snapshot_contains_only_own_tenant(self, admin_identity, admin_b_identity, make_lot):
        make_lot("LOT-001")
        lot_service.submit_lot(admin_b_identity, lot_payload("LOT-B-1"))

        state = sync_service.snapshot(admin_b_identity)
        assert [lot["lotNo"] for lot in state["transactions"]] == ["LOT-B-1"]

    def test_client_mutation_ids_are_per_tenant(self, admin_identity, admin_b_identity):
        mutation = {
            "clientMutationId": "m-1",
            "op": "transactions.submit",
            "payload": lot_payload("LOT-001"),
        }

        first = sync_service.sync(admin_identity, {"mutations": [mutation]})
        second = sync_service.sync(admin_b_identity, {"mutations": [mutation]})

        assert first["results"][0]["status"] == "applied"
        assert second["results"][0]["status"] == "applied"

    def test_sync_cannot_touch_other_tenants_lot(self, admin_identity, admin_b_identity, make_lot):
        make_lot("LOT-001")

        result = sync_service.sync(admin_b_identity, {"mutations": [{
            "clientMutationId": "m-1",
            "op": "workflow.approve",
            "payload": {"lotNo": "LOT-001", "decision": "Approved"},
        }]})

        assert result["results"][0]["status"] == "rejected"
        assert result["results"][0]["errorKind"] == "NotFound"
        assert lot_service.get_lot(admin_identity, "LOT-001").phase == "PENDING"
