"""
Audit Trail Tests

Entries are appended after commit, listed newest first within a tenant,
and a failed audit write never fails the caller.
"""

from bullion.extensions import db
from bullion.models import AuditLog
from bullion.services import audit_service, master_service


def _record_many(identity, count):
    for index in range(count):
        audit_service.record(identity, "TEST_EVENT", "tests", {"n": index})


class TestRecord:

    def test_entry_carries_identity_and_payload(self, admin_identity, admin_a):
        entry = audit_service.record(admin_identity, "LOT_SUBMITTED", "transactions", {"lotNo": "LOT-001"})

        data = entry.to_dict()
        assert data["userId"] == admin_a.id
        assert data["username"] == "admin.a"
        assert data["module"] == "transactions"
        assert data["payload"] == {"lotNo": "LOT-001"}
        assert data["createdAt"].endswith("Z")

    def test_write_failure_is_swallowed(self, admin_identity, monkeypatch):
        def broken_write(*args, **kwargs):
            raise RuntimeError("audit store offline")

        monkeypatch.setattr(audit_service, "_write_entry", broken_write)

        assert audit_service.record(admin_identity, "TEST_EVENT", "tests") is None

    def test_failed_audit_leaves_business_write_committed(self, admin_identity, monkeypatch):
        monkeypatch.setattr(audit_service, "_write_entry", lambda *a, **k: 1 / 0)

        master_service.upsert_master(admin_identity, {
            "kind": "HUB", "id": "HUB-01", "name": "Coimbatore Hub", "identifier": "CBE",
        })

        assert master_service.get_master(admin_identity, "HUB-01").name == "Coimbatore Hub"
        assert db.session.query(AuditLog).count() == 0


class TestListLogs:

    def test_newest_first(self, admin_identity):
        _record_many(admin_identity, 3)
        payloads = [entry.payload["n"] for entry in audit_service.list_logs(admin_identity)]
        assert payloads == [2, 1, 0]

    def test_tenant_scoped(self, admin_identity, admin_b_identity):
        _record_many(admin_identity, 2)
        _record_many(admin_b_identity, 1)

        assert len(audit_service.list_logs(admin_identity)) == 2
        assert len(audit_service.list_logs(admin_b_identity)) == 1

    def test_limit_is_clamped(self, app, admin_identity, monkeypatch):
        _record_many(admin_identity, 4)

        assert len(audit_service.list_logs(admin_identity, limit=2)) == 2
        assert len(audit_service.list_logs(admin_identity, limit=0)) == 1

        monkeypatch.setitem(app.config, "AUDIT_LOG_MAX_PAGE_SIZE", 3)
        assert len(audit_service.list_logs(admin_identity, limit=1000)) == 3

    def test_default_page_size(self, app, admin_identity, monkeypatch):
        monkeypatch.setitem(app.config, "AUDIT_LOG_PAGE_SIZE", 2)
        _record_many(admin_identity, 3)
        assert len(audit_service.list_logs(admin_identity)) == 2
