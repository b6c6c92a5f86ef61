"""
KYC Verifier Tests

Structural checks are pure functions; verify() persists exactly one masked
record per call and drives the linked customer's kycStatus.
"""

import pytest

from bullion.extensions import db
from bullion.models import KycRecord
from bullion.services import kyc_service, master_service


GOOD_ADDRESS = "12 Gandhi Road, Erode, Tamil Nadu 638001"


class TestVerhoeff:

    @pytest.mark.parametrize("number", [
        "234123412346",
        "499118665246",
        "556677889903",
        "987654321012",
        "123456789010",
    ])
    def test_valid_check_digits(self, number):
        assert kyc_service.verhoeff_valid(number) is True

    @pytest.mark.parametrize("number", [
        "123456789012",
        "234123412345",
        "499118665245",
    ])
    def test_invalid_check_digits(self, number):
        assert kyc_service.verhoeff_valid(number) is False

    def test_non_digits_rejected(self):
        assert kyc_service.verhoeff_valid("") is False
        assert kyc_service.verhoeff_valid("2341-2341-2346") is False


class TestCheck:

    def test_spaces_and_hyphens_are_ignored(self):
        assert kyc_service.check("2341 2341 2346", "Arjun Reddy", GOOD_ADDRESS).outcome == "Verified"
        assert kyc_service.check("2341-2341-2346", "Arjun Reddy", GOOD_ADDRESS).outcome == "Verified"

    @pytest.mark.parametrize("number", ["000000000000", "111111111111", "999999999999"])
    def test_dummy_sequences_rejected(self, number):
        result = kyc_service.check(number, "Arjun Reddy", GOOD_ADDRESS)
        assert result.identity_not_dummy is False
        assert result.outcome == "Rejected"
        assert "Invalid dummy sequence" in result.failures

    def test_checksum_failure_rejected(self):
        result = kyc_service.check("123456789012", "Arjun Reddy", GOOD_ADDRESS)
        assert result.outcome == "Rejected"
        assert result.failures == ["Verhoeff checksum failed"]

    @pytest.mark.parametrize("number", ["12345", "12345678901234", "abcdabcdabcd", None])
    def test_wrong_shape_rejected(self, number):
        result = kyc_service.check(number, "Arjun Reddy", GOOD_ADDRESS)
        assert result.outcome == "Rejected"
        assert "Identity number must be 12 digits" in result.failures

    @pytest.mark.parametrize("name", ["Al", "R2-D2", "", None])
    def test_bad_name_rejected(self, name):
        assert kyc_service.check("234123412346", name, GOOD_ADDRESS).outcome == "Rejected"

    def test_name_may_contain_periods(self):
        assert kyc_service.check("234123412346", "K. S. Iyer", GOOD_ADDRESS).name_valid

    @pytest.mark.parametrize("address", [
        "Erode 638001",                        # too short
        "12 Gandhi Road, Erode, Tamil Nadu",   # no postal code
        None,
    ])
    def test_address_problems_are_a_mismatch(self, address):
        assert kyc_service.check("234123412346", "Arjun Reddy", address).outcome == "AddressMismatch"

    def test_rejection_wins_over_address_mismatch(self):
        assert kyc_service.check("123456789012", "Arjun Reddy", "Erode").outcome == "Rejected"

    def test_mask_keeps_last_four_digits(self):
        assert kyc_service.mask_identity("2341 2341 2346") == "XXXX-XXXX-2346"


class TestVerify:

    def _customer(self, identity, record_id="CUST-01"):
        return master_service.upsert_master(identity, {
            "kind": "CUSTOMER",
            "id": record_id,
            "name": "Arjun Reddy",
            "identifier": "2341 2341 2346",
            "secondary": "9876543210",
            "kycStatus": "pending",
        })

    def test_only_masked_identity_is_stored(self, admin_identity):
        record, result = kyc_service.verify(admin_identity, {
            "identityNumber": "2341 2341 2346",
            "name": "Arjun Reddy",
            "address": GOOD_ADDRESS,
        })

        assert result.outcome == "Verified"
        assert record.identity_masked == "XXXX-XXXX-2346"
        assert record.status == "Verified"
        assert record.verified_by_user_id == admin_identity.user_id

        stored = db.session.query(KycRecord).one()
        assert "234123412346" not in repr(stored.to_dict())
        assert "2341 2341" not in repr(stored.to_dict())

    def test_latest_status_matches_the_full_number(self, admin_identity):
        record, _ = kyc_service.verify(admin_identity, {
            "identityNumber": "2341 2341 2346",
            "name": "Arjun Reddy",
            "address": GOOD_ADDRESS,
        })

        assert record.identity_digest == kyc_service.digest_identity("234123412346")
        assert "234123412346" not in record.identity_digest
        assert kyc_service.latest_status(admin_identity.tenant_id, "2341-2341-2346") == "Verified"
        # Same mask, different number
        assert kyc_service.latest_status(admin_identity.tenant_id, "9999 0000 2346") is None

    @pytest.mark.parametrize("customer_id,note", [
        ({"id": "CUST-01"}, "customerId must be a string"),
        (["CUST-01"], "customerId must be a string"),
        ("C" * 65, "customerId exceeds 64 characters"),
    ])
    def test_malformed_customer_id_is_noted_not_raised(self, admin_identity, customer_id, note):
        self._customer(admin_identity)

        record, result = kyc_service.verify(admin_identity, {
            "identityNumber": "234123412346",
            "name": "Arjun Reddy",
            "address": GOOD_ADDRESS,
            "customerId": customer_id,
        })

        assert result.outcome == "Verified"
        assert record.customer_record_id is None
        assert note in record.remarks
        assert master_service.get_master(admin_identity, "CUST-01").kyc_status == "pending"

    def test_long_name_is_truncated(self, admin_identity):
        record, result = kyc_service.verify(admin_identity, {
            "identityNumber": "234123412346",
            "name": "A" * 400,
            "address": GOOD_ADDRESS,
        })
        assert result.outcome == "Verified"
        assert len(record.full_name) == 255

    def test_every_attempt_appends_a_record(self, admin_identity):
        for address in ("Erode", GOOD_ADDRESS):
            kyc_service.verify(admin_identity, {
                "identityNumber": "234123412346",
                "name": "Arjun Reddy",
                "address": address,
            })

        statuses = [r.status for r in kyc_service.list_records(admin_identity)]
        assert sorted(statuses) == ["AddressMismatch", "Verified"]
        assert kyc_service.latest_status(admin_identity.tenant_id, "2341 2341 2346") == "Verified"

    def test_bad_input_returns_rejected_instead_of_raising(self, admin_identity):
        record, result = kyc_service.verify(admin_identity, {"identityNumber": "12"})
        assert result.outcome == "Rejected"
        assert record.status == "Rejected"
        assert record.remarks

    @pytest.mark.parametrize("number,address,expected", [
        ("234123412346", GOOD_ADDRESS, "verified"),
        ("234123412346", "Erode", "pending"),
        ("123456789012", GOOD_ADDRESS, "failed"),
    ])
    def test_customer_kyc_status_follows_outcome(self, admin_identity, number, address, expected):
        self._customer(admin_identity)

        record, _ = kyc_service.verify(admin_identity, {
            "identityNumber": number,
            "name": "Arjun Reddy",
            "address": address,
            "customerId": "CUST-01",
        })

        assert record.customer_record_id == "CUST-01"
        assert master_service.get_master(admin_identity, "CUST-01").kyc_status == expected

    def test_unknown_customer_is_noted_not_raised(self, admin_identity):
        record, result = kyc_service.verify(admin_identity, {
            "identityNumber": "234123412346",
            "name": "Arjun Reddy",
            "address": GOOD_ADDRESS,
            "customerId": "CUST-99",
        })
        assert result.outcome == "Verified"
        assert record.customer_record_id is None
        assert "CUST-99 not found" in record.remarks

    def test_other_tenants_customer_is_not_updated(self, admin_identity, admin_b_identity):
        self._customer(admin_b_identity)

        record, _ = kyc_service.verify(admin_identity, {
            "identityNumber": "234123412346",
            "name": "Arjun Reddy",
            "address": GOOD_ADDRESS,
            "customerId": "CUST-01",
        })

        assert record.customer_record_id is None
        assert master_service.get_master(admin_b_identity, "CUST-01").kyc_status == "pending"
        assert kyc_service.list_records(admin_b_identity) == []
