"""
Sync Gateway Tests

Covers:
1. Ordered replay with per-mutation outcomes
2. Idempotency: a replayed clientMutationId is answered from its receipt
3. Rejections are recorded; transient failures are not (client may retry)
4. Malformed batches are refused before anything is applied
5. The response always carries a fresh tenant snapshot
"""

import pytest

from bullion.errors import PersistenceFailure, ValidationError
from bullion.extensions import db
from bullion.models import AuditLog, Lot, SyncReceipt
from bullion.services import lot_service, sync_service
from conftest import lot_payload


def mutation(client_mutation_id, op, payload):
    return {"clientMutationId": client_mutation_id, "op": op, "payload": payload}


def statuses(response):
    return [r["status"] for r in response["results"]]


class TestReplay:

    def test_mutations_apply_in_order(self, admin_identity):
        response = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "transactions.submit", lot_payload()),
            mutation("m-2", "workflow.approve", {"lotNo": "LOT-001", "decision": "Approved"}),
            mutation("m-3", "settings.marketRates", {"gold": 7250}),
        ]})

        assert statuses(response) == ["applied", "applied", "applied"]
        assert response["results"][1]["result"] == {"lotNo": "LOT-001", "status": "Approved", "phase": "APPROVED"}
        assert response["results"][2]["result"] == {"gold": 7250.0, "silver": None}

        state = response["state"]
        assert state["transactions"][0]["status"] == "Approved"
        assert state["goldRate"] == 7250.0

    def test_replayed_mutation_is_not_applied_twice(self, admin_identity):
        sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "transactions.submit", lot_payload()),
        ]})

        replay = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "transactions.submit", lot_payload(items=[
                {"product": "Necklace", "weight": 25, "rate": 7100},
            ])),
        ]})

        result = replay["results"][0]
        assert result["status"] == "duplicate"
        assert result["original"]["status"] == "applied"
        assert result["original"]["result"]["lotNo"] == "LOT-001"

        lot = lot_service.get_lot(admin_identity, "LOT-001")
        assert [row.product for row in lot.items] == ["Chain"]
        assert db.session.query(AuditLog).filter_by(action="LOT_SUBMITTED").count() == 1

    def test_duplicate_within_one_batch(self, admin_identity):
        response = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "transactions.submit", lot_payload()),
            mutation("m-1", "transactions.submit", lot_payload()),
        ]})
        assert statuses(response) == ["applied", "duplicate"]

    def test_rejection_is_recorded_and_replayed(self, admin_identity, make_lot):
        make_lot("LOT-001")

        first = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-9", "workflow.disburse", {"lotNo": "LOT-001", "paymentMode": "cash", "amount": 10}),
        ]})
        assert first["results"][0]["status"] == "rejected"
        assert first["results"][0]["errorKind"] == "InvalidStateTransition"

        replay = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-9", "workflow.disburse", {"lotNo": "LOT-001", "paymentMode": "cash", "amount": 10}),
        ]})
        assert replay["results"][0]["status"] == "duplicate"
        assert replay["results"][0]["original"]["errorKind"] == "InvalidStateTransition"

    def test_later_mutations_run_after_a_rejection(self, admin_identity):
        response = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "workflow.approve", {"lotNo": "LOT-404", "decision": "Approved"}),
            mutation("m-2", "transactions.submit", lot_payload()),
        ]})
        assert statuses(response) == ["rejected", "applied"]
        assert response["results"][0]["errorKind"] == "NotFound"

    def test_unsupported_op_rejected(self, admin_identity):
        response = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "lots.delete", {"lotNo": "LOT-001"}),
        ]})
        assert response["results"][0]["status"] == "rejected"
        assert response["results"][0]["errorKind"] == "ValidationError"

    def test_role_permissions_apply_per_mutation(self, staff_identity):
        response = sync_service.sync(staff_identity, {"mutations": [
            mutation("m-1", "transactions.submit", lot_payload()),
            mutation("m-2", "workflow.approve", {"lotNo": "LOT-001", "decision": "Approved"}),
        ]})

        assert statuses(response) == ["applied", "rejected"]
        assert response["results"][1]["errorKind"] == "PermissionDenied"
        assert lot_service.get_lot(staff_identity, "LOT-001").phase == "PENDING"

    def test_transient_failure_leaves_no_receipt(self, admin_identity, monkeypatch):
        def unavailable(identity, payload):
            raise PersistenceFailure("The store rejected the write; nothing was applied")

        original = sync_service.OPERATIONS["transactions.submit"]
        monkeypatch.setitem(sync_service.OPERATIONS, "transactions.submit", (original[0], unavailable, original[2]))

        response = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "transactions.submit", lot_payload()),
        ]})
        assert response["results"][0]["status"] == "failed"
        assert db.session.query(SyncReceipt).count() == 0

        monkeypatch.setitem(sync_service.OPERATIONS, "transactions.submit", original)
        retry = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "transactions.submit", lot_payload()),
        ]})
        assert retry["results"][0]["status"] == "applied"

    def test_receipt_commits_with_the_mutation(self, admin_identity):
        sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "transactions.submit", lot_payload()),
        ]})
        receipt = db.session.query(SyncReceipt).one()
        assert receipt.status == "applied"
        assert receipt.user_id == admin_identity.user_id

    def test_unexpected_error_fails_only_that_mutation(self, admin_identity, monkeypatch):
        def broken(identity, payload):
            raise RuntimeError("handler bug")

        original = sync_service.OPERATIONS["workflow.approve"]
        monkeypatch.setitem(sync_service.OPERATIONS, "workflow.approve", (original[0], broken, original[2]))

        response = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "transactions.submit", lot_payload()),
            mutation("m-2", "workflow.approve", {"lotNo": "LOT-001", "decision": "Approved"}),
            mutation("m-3", "settings.marketRates", {"gold": 7250}),
        ]})

        assert statuses(response) == ["applied", "failed", "applied"]
        assert response["results"][1]["errorKind"] == "InternalError"
        assert response["state"]["transactions"][0]["status"] == "Pending"
        assert response["state"]["goldRate"] == 7250.0
        receipts = {r.client_mutation_id for r in db.session.query(SyncReceipt).all()}
        assert receipts == {"m-1", "m-3"}


class TestOperations:

    def test_master_upsert(self, admin_identity):
        response = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "masters.upsert", {
                "kind": "BUYER", "id": "BUY-01", "name": "Malabar Gold", "identifier": "33AAACM1234F1Z5",
            }),
        ]})

        assert statuses(response) == ["applied"]
        assert response["results"][0]["result"] == {"id": "BUY-01", "kind": "BUYER"}
        assert [m["id"] for m in response["state"]["masters"]] == ["BUY-01"]
        receipt = db.session.query(SyncReceipt).one()
        assert receipt.result == {"id": "BUY-01", "kind": "BUYER"}
        assert db.session.query(AuditLog).filter_by(action="MASTER_CREATED").count() == 1

    def test_sales_order_upsert(self, admin_identity):
        response = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "sales.upsert", {
                "buyer": "Malabar Gold",
                "date": "2025-02-24",
                "items": [{"product": "Gold Bar 995", "quantity": 68.5, "unitPrice": 7300}],
            }),
        ]})

        assert statuses(response) == ["applied"]
        assert response["results"][0]["result"] == {"id": "SO-0001", "totalAmount": 500050.0}
        assert [o["id"] for o in response["state"]["salesOrders"]] == ["SO-0001"]
        assert db.session.query(SyncReceipt).one().result["id"] == "SO-0001"

    def test_market_rates(self, admin_identity):
        response = sync_service.sync(admin_identity, {"mutations": [
            mutation("m-1", "settings.marketRates", {"gold": 7250, "silver": 94.5}),
        ]})

        assert response["results"][0]["result"] == {"gold": 7250.0, "silver": 94.5}
        assert db.session.query(SyncReceipt).one().result == {"gold": 7250.0, "silver": 94.5}


class TestMalformedBatch:

    @pytest.mark.parametrize("bad", [
        "not-an-object",
        {"op": "transactions.submit", "payload": {}},
        {"clientMutationId": "  ", "op": "transactions.submit"},
        {"clientMutationId": "x" * 129, "op": "transactions.submit"},
    ])
    def test_nothing_applied(self, admin_identity, bad):
        with pytest.raises(ValidationError) as exc_info:
            sync_service.sync(admin_identity, {"mutations": [
                mutation("m-1", "transactions.submit", lot_payload()),
                bad,
            ]})
        assert exc_info.value.field.startswith("mutations[1]")
        assert db.session.query(Lot).count() == 0
        assert db.session.query(SyncReceipt).count() == 0

    def test_batch_size_limit(self, admin_identity):
        batch = [mutation(f"m-{i}", "settings.marketRates", {"gold": 7000}) for i in range(201)]
        with pytest.raises(ValidationError):
            sync_service.sync(admin_identity, {"mutations": batch})

    def test_mutations_must_be_a_list(self, admin_identity):
        with pytest.raises(ValidationError):
            sync_service.sync(admin_identity, {"mutations": {"m-1": {}}})


class TestSnapshot:

    def test_empty_tenant(self, admin_identity):
        state = sync_service.snapshot(admin_identity)
        assert state["masters"] == []
        assert state["transactions"] == []
        assert state["salesOrders"] == []
        assert state["goldRate"] is None
        assert state["generatedAt"].endswith("Z")

    def test_empty_batch_returns_snapshot(self, admin_identity, make_lot):
        make_lot("LOT-001")
        response = sync_service.sync(admin_identity, {"mutations": []})
        assert response["results"] == []
        assert [lot["lotNo"] for lot in response["state"]["transactions"]] == ["LOT-001"]


class TestSyncApi:

    def test_sync_over_http(self, client, staff_a, login):
        resp = client.post("/api/sync", json={"mutations": [
            mutation("m-1", "transactions.submit", lot_payload()),
        ]}, headers=login(staff_a))

        assert resp.status_code == 200
        assert resp.json["results"][0]["status"] == "applied"
        assert resp.json["state"]["transactions"][0]["lotNo"] == "LOT-001"

    def test_malformed_batch_is_400(self, client, staff_a, login):
        resp = client.post("/api/sync", json={"mutations": [{"op": "transactions.submit"}]},
                           headers=login(staff_a))
        assert resp.status_code == 400
        assert resp.json["kind"] == "ValidationError"

    def test_state_endpoint(self, client, staff_a, login, make_lot):
        make_lot("LOT-001", through="approve")
        resp = client.get("/api/state", headers=login(staff_a))
        assert resp.status_code == 200
        assert resp.json["transactions"][0]["status"] == "Approved"
