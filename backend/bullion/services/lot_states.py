# Overview: Lot lifecycle phases, their external status labels and the transition table.

"""
Lot state machine.

Internal phases are unambiguous; the status label clients see is a
projection of the phase. Two phases project to "Received" (after accounts
verification, after hub receipt) and two to "Approved" (approved by the
Regional Head, melted at the hub). Preconditions are always evaluated on
the phase, never on the label.

LIFECYCLE:
    submit:          (new)                -> PENDING
    approve:         PENDING              -> APPROVED
    reject:          PENDING              -> REJECTED (terminal)
    invoice:         APPROVED             -> INVOICED
    accounts_verify: INVOICED             -> VERIFIED_BY_ACCOUNTS
    disburse:        VERIFIED_BY_ACCOUNTS -> PAID
    transfer:        PAID                 -> IN_TRANSIT
    receive:         IN_TRANSIT           -> RECEIVED_AT_HUB
    melt:            RECEIVED_AT_HUB      -> MELTED (terminal)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from ..errors import InvalidStateTransition, ValidationError


class LotPhase(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    INVOICED = "INVOICED"
    VERIFIED_BY_ACCOUNTS = "VERIFIED_BY_ACCOUNTS"
    PAID = "PAID"
    IN_TRANSIT = "IN_TRANSIT"
    RECEIVED_AT_HUB = "RECEIVED_AT_HUB"
    MELTED = "MELTED"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (LotPhase.REJECTED, LotPhase.MELTED)


STATUS_LABELS = {
    LotPhase.PENDING: "Pending",
    LotPhase.APPROVED: "Approved",
    LotPhase.REJECTED: "Rejected",
    LotPhase.INVOICED: "Invoiced",
    LotPhase.VERIFIED_BY_ACCOUNTS: "Received",
    LotPhase.PAID: "Paid",
    LotPhase.IN_TRANSIT: "InTransit",
    LotPhase.RECEIVED_AT_HUB: "Received",
    LotPhase.MELTED: "Approved",
}

EXTERNAL_STATUSES = ("Pending", "Approved", "Rejected", "Invoiced", "Paid", "InTransit", "Received")


@dataclass(frozen=True)
class Transition:
    name: str
    source: LotPhase
    target: LotPhase
    permission: str


TRANSITIONS = {
    "approve": Transition("approve", LotPhase.PENDING, LotPhase.APPROVED, "APPROVE_LOTS"),
    "reject": Transition("reject", LotPhase.PENDING, LotPhase.REJECTED, "APPROVE_LOTS"),
    "invoice": Transition("invoice", LotPhase.APPROVED, LotPhase.INVOICED, "ISSUE_INVOICES"),
    "accounts_verify": Transition("accounts_verify", LotPhase.INVOICED, LotPhase.VERIFIED_BY_ACCOUNTS, "VERIFY_ACCOUNTS"),
    "disburse": Transition("disburse", LotPhase.VERIFIED_BY_ACCOUNTS, LotPhase.PAID, "DISBURSE_PAYMENTS"),
    "transfer": Transition("transfer", LotPhase.PAID, LotPhase.IN_TRANSIT, "MANAGE_LOGISTICS"),
    "receive": Transition("receive", LotPhase.IN_TRANSIT, LotPhase.RECEIVED_AT_HUB, "MANAGE_LOGISTICS"),
    "melt": Transition("melt", LotPhase.RECEIVED_AT_HUB, LotPhase.MELTED, "RECORD_MELTING"),
}


def project_status(phase: LotPhase | str) -> str:
    """External status label for an internal phase."""
    return LotPhase(phase).label


def phases_for_status(status: str) -> list[LotPhase]:
    """All phases that project to an external label (case-insensitive; "In Transit" accepted)."""
    wanted = (status or "").replace(" ", "").lower()
    phases = [phase for phase, label in STATUS_LABELS.items() if label.lower() == wanted]
    if not phases:
        raise ValidationError(
            f"status must be one of: {', '.join(EXTERNAL_STATUSES)}",
            field="status",
        )
    return phases


def parse_phase(raw: str) -> LotPhase:
    try:
        return LotPhase((raw or "").strip().upper())
    except ValueError:
        raise ValidationError(
            f"phase must be one of: {', '.join(p.value for p in LotPhase)}",
            field="phase",
        )


def check_transition(lot, name: str) -> Transition:
    """
    Raise InvalidStateTransition unless `lot` is in the source phase of
    transition `name`. Reports both the labels and the phases.
    """
    transition = TRANSITIONS[name]
    current = LotPhase(lot.phase)
    if current is not transition.source:
        raise InvalidStateTransition(
            lot_no=lot.lot_no,
            transition=name,
            current_state=current.label,
            required_state=transition.source.label,
            current_phase=current.value,
            required_phase=transition.source.value,
        )
    return transition
