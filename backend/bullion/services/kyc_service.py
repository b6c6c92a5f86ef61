# Overview: Identity document checks (Verhoeff checksum + structural rules) and KYC records.

"""
KYC Verifier

verify() never raises for bad input: every call returns one of three
outcomes and appends exactly one immutable KycRecord.

- Rejected: identity number or name fails the structural checks
- AddressMismatch: identity and name pass, address heuristic fails
- Verified: everything passes

Only the masked identity number (XXXX-XXXX-1234) and a SHA-256 digest of
the full number are stored; lookups go through the digest.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field

from flask import current_app

from ..extensions import db
from ..master_kinds import MasterKind
from ..models import KycRecord, MasterRecord
from ..validation import require_payload
from . import audit_service
from .concurrency import run_atomically
from bullion.time_utils import utcnow


KYC_VERIFIED = "Verified"
KYC_ADDRESS_MISMATCH = "AddressMismatch"
KYC_REJECTED = "Rejected"

# Outcome -> Customer master kycStatus
CUSTOMER_KYC_STATUS = {
    KYC_VERIFIED: "verified",
    KYC_ADDRESS_MISMATCH: "pending",
    KYC_REJECTED: "failed",
}

IDENTITY_LENGTH = 12
MIN_NAME_LENGTH = 3
MIN_ADDRESS_LENGTH = 15
MAX_NAME_LENGTH = 255
MAX_CUSTOMER_ID_LENGTH = 64

_NAME_PATTERN = re.compile(r"^[A-Za-z\s.]+$")
_POSTAL_CODE_PATTERN = re.compile(r"\d{6}")
_SEPARATORS = re.compile(r"[\s-]")

# Dihedral group D5 multiplication table
_D = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 2, 3, 4, 0, 6, 7, 8, 9, 5),
    (2, 3, 4, 0, 1, 7, 8, 9, 5, 6),
    (3, 4, 0, 1, 2, 8, 9, 5, 6, 7),
    (4, 0, 1, 2, 3, 9, 5, 6, 7, 8),
    (5, 9, 8, 7, 6, 0, 4, 3, 2, 1),
    (6, 5, 9, 8, 7, 1, 0, 4, 3, 2),
    (7, 6, 5, 9, 8, 2, 1, 0, 4, 3),
    (8, 7, 6, 5, 9, 3, 2, 1, 0, 4),
    (9, 8, 7, 6, 5, 4, 3, 2, 1, 0),
)

# Position permutation table
_P = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 5, 7, 6, 2, 8, 3, 0, 9, 4),
    (5, 8, 0, 3, 7, 9, 6, 1, 4, 2),
    (8, 9, 1, 6, 0, 4, 3, 5, 2, 7),
    (9, 4, 5, 3, 1, 2, 6, 8, 7, 0),
    (4, 2, 8, 6, 5, 7, 3, 9, 0, 1),
    (2, 7, 9, 3, 8, 0, 6, 4, 1, 5),
    (7, 0, 4, 6, 9, 1, 3, 2, 5, 8),
)


def verhoeff_valid(number: str) -> bool:
    """True iff `number` (digits only) carries a valid Verhoeff check digit."""
    if not number or not number.isdigit():
        return False
    c = 0
    for i, digit in enumerate(reversed(number)):
        c = _D[c][_P[i % 8][int(digit)]]
    return c == 0


def normalize_identity(raw: str | None) -> str:
    """Strip spaces and hyphens ("1234 5678 9012" -> "123456789012")."""
    return _SEPARATORS.sub("", raw or "")


def mask_identity(raw: str | None) -> str:
    """All but the last four digits hidden: XXXX-XXXX-9012."""
    digits = normalize_identity(raw)
    return f"XXXX-XXXX-{digits[-4:]}"


def digest_identity(raw: str | None) -> str:
    """SHA-256 of the normalized digits; two spellings of one number match."""
    return hashlib.sha256(normalize_identity(raw).encode("utf-8")).hexdigest()


def is_dummy_sequence(number: str) -> bool:
    return len(number) > 0 and len(set(number)) == 1


@dataclass
class KycCheck:
    identity_length: bool = False
    identity_numeric: bool = False
    identity_checksum: bool = False
    identity_not_dummy: bool = False
    name_length: bool = False
    name_format: bool = False
    address_length: bool = False
    address_postal_code: bool = False
    failures: list[str] = field(default_factory=list)

    @property
    def identity_valid(self) -> bool:
        return (
            self.identity_length
            and self.identity_numeric
            and self.identity_checksum
            and self.identity_not_dummy
        )

    @property
    def name_valid(self) -> bool:
        return self.name_length and self.name_format

    @property
    def address_valid(self) -> bool:
        return self.address_length and self.address_postal_code

    @property
    def outcome(self) -> str:
        if not (self.identity_valid and self.name_valid):
            return KYC_REJECTED
        if not self.address_valid:
            return KYC_ADDRESS_MISMATCH
        return KYC_VERIFIED

    def to_dict(self) -> dict:
        return {
            "identity": {
                "valid": self.identity_valid,
                "length": self.identity_length,
                "numeric": self.identity_numeric,
                "checksum": self.identity_checksum,
                "notDummy": self.identity_not_dummy,
            },
            "name": {"valid": self.name_valid},
            "address": {"valid": self.address_valid, "postalCode": self.address_postal_code},
        }


def check(identity_number: str | None, name: str | None, address: str | None) -> KycCheck:
    """Pure structural evaluation; no database access."""
    result = KycCheck()
    digits = normalize_identity(identity_number)
    name = name or ""
    address = address or ""

    result.identity_length = len(digits) == IDENTITY_LENGTH
    result.identity_numeric = digits.isdigit()
    result.identity_checksum = result.identity_length and result.identity_numeric and verhoeff_valid(digits)
    result.identity_not_dummy = result.identity_length and not is_dummy_sequence(digits)

    if not (result.identity_length and result.identity_numeric):
        result.failures.append("Identity number must be 12 digits")
    elif not result.identity_not_dummy:
        result.failures.append("Invalid dummy sequence")
    elif not result.identity_checksum:
        result.failures.append("Verhoeff checksum failed")

    result.name_length = len(name.strip()) >= MIN_NAME_LENGTH
    result.name_format = bool(_NAME_PATTERN.match(name))
    if not result.name_valid:
        result.failures.append("Name must be at least 3 letters (letters, spaces and periods only)")

    result.address_length = len(address.strip()) >= MIN_ADDRESS_LENGTH
    result.address_postal_code = bool(_POSTAL_CODE_PATTERN.search(address))
    if not result.address_valid:
        result.failures.append("Address must be at least 15 characters and include a 6-digit postal code")

    return result


def _remarks(result: KycCheck) -> str:
    if result.outcome == KYC_VERIFIED:
        return "Identity verified. Demographic data matched."
    return "; ".join(result.failures)


def _customer_reference(raw) -> tuple[str | None, str | None]:
    """(customer id, remarks note). A malformed id is noted, never raised."""
    if raw is None:
        return None, None
    if not isinstance(raw, (str, int)) or isinstance(raw, bool):
        return None, "Customer reference ignored: customerId must be a string; master not updated."
    text = str(raw).strip()
    if len(text) > MAX_CUSTOMER_ID_LENGTH:
        return None, (
            f"Customer reference ignored: customerId exceeds {MAX_CUSTOMER_ID_LENGTH} characters; "
            "master not updated."
        )
    return text or None, None


def verify(identity, payload: dict) -> tuple[KycRecord, KycCheck]:
    """
    POST /kyc/verify {identityNumber, name, address, customerId?}

    Appends one KycRecord for every call. When customerId names a Customer
    master record of the caller's tenant, its kycStatus follows the outcome
    in the same transaction. An unknown customerId is noted in the remarks,
    not raised: verification outcomes are always returned.
    """
    payload = require_payload(payload)
    raw_identity = payload.get("identityNumber", payload.get("aadhar"))
    raw_identity = None if raw_identity is None else str(raw_identity)
    name = payload.get("name")
    name = None if name is None else str(name)
    address = payload.get("address")
    address = None if address is None else str(address)
    customer_id, customer_note = _customer_reference(payload.get("customerId"))

    result = check(raw_identity, name, address)
    outcome = result.outcome

    def _op():
        remarks = _remarks(result)
        if customer_note:
            remarks = f"{remarks} {customer_note}"
        customer = None
        if customer_id:
            customer = (
                db.session.query(MasterRecord)
                .filter_by(tenant_id=identity.tenant_id, record_id=customer_id, kind=MasterKind.CUSTOMER.value)
                .first()
            )
            if customer is None:
                remarks = f"{remarks} Customer {customer_id} not found; master not updated."
            else:
                customer.kyc_status = CUSTOMER_KYC_STATUS[outcome]

        record = KycRecord(
            tenant_id=identity.tenant_id,
            identity_masked=mask_identity(raw_identity),
            identity_digest=digest_identity(raw_identity),
            full_name=(name or "").strip()[:MAX_NAME_LENGTH] or None,
            status=outcome,
            remarks=remarks,
            customer_record_id=customer.record_id if customer else None,
            verified_by_user_id=identity.user_id,
            verified_at=utcnow(),
        )
        db.session.add(record)
        return record

    record = run_atomically(_op)
    current_app.logger.info("KYC %s for %s (tenant %s)", outcome, record.identity_masked, identity.tenant_id)
    audit_service.record(identity, "KYC_VERIFIED", "kyc", {
        "identity": record.identity_masked,
        "status": outcome,
        "customerId": record.customer_record_id,
    })
    return record, result


def list_records(identity, *, limit: int = 200) -> list[KycRecord]:
    return (
        db.session.query(KycRecord)
        .filter_by(tenant_id=identity.tenant_id)
        .order_by(KycRecord.verified_at.desc(), KycRecord.id.desc())
        .limit(limit)
        .all()
    )


def latest_status(tenant_id: int, identity_number: str) -> str | None:
    """Outcome of the most recent verification of this identity, if any."""
    row = (
        db.session.query(KycRecord)
        .filter_by(tenant_id=tenant_id, identity_digest=digest_identity(identity_number))
        .order_by(KycRecord.verified_at.desc(), KycRecord.id.desc())
        .first()
    )
    return row.status if row else None
