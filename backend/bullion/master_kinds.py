# Overview: Closed set of master-data kinds and their typed detail attributes.

"""
Every MasterRecord belongs to exactly one MasterKind. The shared columns
(id, name, identifier, secondary, date) live on the row; the kind-specific
attributes are a dataclass per kind, serialized into MasterRecord.details.

Unknown detail keys are rejected, so a HUB record can never carry a
customer's date of birth.
"""
from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar

from .errors import ValidationError


class MasterKind(str, enum.Enum):
    FRANCHISE = "FRANCHISE"
    DESIGNATION = "DESIGNATION"
    ORNAMENT_TYPE = "ORNAMENT_TYPE"
    HUB = "HUB"
    BUYER = "BUYER"
    STAFF = "STAFF"
    CUSTOMER = "CUSTOMER"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, raw: Any) -> "MasterKind":
        """Accept the enum value or a display label ("HUB Master", "Ornament Type")."""
        if isinstance(raw, MasterKind):
            return raw
        if raw is None or not str(raw).strip():
            raise ValidationError("kind is required", field="kind")
        key = str(raw).strip()
        normalized = key.upper().replace(" ", "_").replace("-", "_")
        if normalized.endswith("_MASTER"):
            normalized = normalized[: -len("_MASTER")]
        if normalized in cls.__members__:
            return cls[normalized]
        for kind, label in _LABELS.items():
            if label.lower() == key.lower():
                return kind
        raise ValidationError(f"Unknown master kind: {key}", field="kind")


_LABELS = {
    MasterKind.FRANCHISE: "Franchise Master",
    MasterKind.DESIGNATION: "Designation",
    MasterKind.ORNAMENT_TYPE: "Ornament Type",
    MasterKind.HUB: "HUB Master",
    MasterKind.BUYER: "Buyer Master",
    MasterKind.STAFF: "Staff Master",
    MasterKind.CUSTOMER: "Customer Master",
}

KYC_STATUSES = ("verified", "pending", "failed")


@dataclass(frozen=True)
class MasterDetails:
    """Base for per-kind attributes. All attributes are optional strings."""

    max_length: ClassVar[int] = 512

    @classmethod
    def from_payload(cls, raw: Any) -> "MasterDetails":
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValidationError("details must be an object", field="details")

        allowed = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - allowed)
        if unknown:
            raise ValidationError(
                f"Unsupported detail attributes: {', '.join(unknown)}",
                field="details",
                allowed=sorted(allowed),
            )

        values: dict[str, str | None] = {}
        for name in allowed:
            value = raw.get(name)
            if value is None:
                values[name] = None
                continue
            if isinstance(value, (dict, list)):
                raise ValidationError(f"details.{name} must be a string", field=f"details.{name}")
            text = str(value).strip()
            if len(text) > cls.max_length:
                raise ValidationError(f"details.{name} is too long", field=f"details.{name}")
            values[name] = text or None
        return cls(**values)

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class FranchiseDetails(MasterDetails):
    address: str | None = None
    contact: str | None = None
    hub: str | None = None


@dataclass(frozen=True)
class DesignationDetails(MasterDetails):
    description: str | None = None


@dataclass(frozen=True)
class OrnamentTypeDetails(MasterDetails):
    description: str | None = None
    purity: str | None = None


@dataclass(frozen=True)
class HubDetails(MasterDetails):
    address: str | None = None
    contact: str | None = None


@dataclass(frozen=True)
class BuyerDetails(MasterDetails):
    address: str | None = None
    contact: str | None = None
    gstin: str | None = None


@dataclass(frozen=True)
class StaffDetails(MasterDetails):
    designation: str | None = None
    mobile: str | None = None
    branch: str | None = None


@dataclass(frozen=True)
class CustomerDetails(MasterDetails):
    mobile: str | None = None
    dob: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None


DETAIL_TYPES: dict[MasterKind, type[MasterDetails]] = {
    MasterKind.FRANCHISE: FranchiseDetails,
    MasterKind.DESIGNATION: DesignationDetails,
    MasterKind.ORNAMENT_TYPE: OrnamentTypeDetails,
    MasterKind.HUB: HubDetails,
    MasterKind.BUYER: BuyerDetails,
    MasterKind.STAFF: StaffDetails,
    MasterKind.CUSTOMER: CustomerDetails,
}


def parse_details(kind: MasterKind, raw: Any) -> MasterDetails:
    return DETAIL_TYPES[kind].from_payload(raw)


def parse_kyc_status(kind: MasterKind, raw: Any) -> str | None:
    """kycStatus is meaningful for customers only."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if kind is not MasterKind.CUSTOMER:
        raise ValidationError("kycStatus is only allowed on customer records", field="kycStatus")
    status = str(raw).strip().lower()
    if status not in KYC_STATUSES:
        raise ValidationError(
            f"kycStatus must be one of: {', '.join(KYC_STATUSES)}",
            field="kycStatus",
        )
    return status
