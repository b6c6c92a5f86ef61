# Overview: Lot transaction engine; every lifecycle transition of a metal lot.

"""
Lot Transaction Engine

WHY: The only place where the procurement invariants hold across
multi-actor, multi-step operations: a lot is never paid before it is
verified, never transferred before payment, never melted before receipt,
and its weights and amounts are always derived server-side.

ATOMICITY: every operation stages all of its writes inside one
run_atomically unit (status + detail record + item rows). A failure at
any point rolls the whole unit back; the visible status never changes.

CONCURRENCY: the lot row is read with lock_for_update and carries an
optimistic version column. Two writers that both observed the same source
phase cannot both commit: the loser's flush raises StaleDataError, the
retry re-reads the lot in its new phase and fails the precondition with
InvalidStateTransition.

AUDIT: one audit entry per successful call, written after commit.
"""

from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..errors import InvalidStateTransition, NotFoundError, ValidationError
from ..extensions import db
from ..models import (
    DisbursementRecord,
    LogisticsDetail,
    Lot,
    MaterialRow,
    MeltingDetail,
)
from ..units import (
    MG_PER_GRAM,
    line_amount_paise,
    loss_percent,
    net_weight_mg,
    percent_of_paise,
)
from ..validation import (
    optional_text,
    parse_amount_paise,
    parse_bool,
    parse_date_field,
    parse_int,
    parse_percent,
    parse_weight_mg,
    require_list,
    require_payload,
    require_text,
)
from . import audit_service, kyc_service, permission_service, settings_service
from .concurrency import lock_for_update, run_atomically
from .lot_states import LotPhase, check_transition, parse_phase, phases_for_status
from bullion.time_utils import utcnow


PAYMENT_MODES = ("bank", "cash")

MODULE = "workflow"


# =============================================================================
# Parsing
# =============================================================================

def _parse_waste_bps(value, field: str) -> int:
    """Waste percent with at most 2 decimals -> basis points."""
    if value is None:
        return 0
    percent = parse_percent(value, field)
    bps = percent * 100
    if bps != bps.to_integral_value():
        raise ValidationError(f"{field} allows at most 2 decimal places", field=field)
    return int(bps)


def parse_material_rows(raw_items: list) -> list[dict]:
    """
    Validate the client's item list. Serial numbers are reassigned 1..n;
    client-supplied netWeight and amount are ignored (always derived).
    """
    if not raw_items:
        raise ValidationError("items must contain at least one row", field="items")

    rows = []
    for index, raw in enumerate(raw_items, start=1):
        prefix = f"items[{index - 1}]"
        if not isinstance(raw, dict):
            raise ValidationError(f"{prefix} must be an object", field=prefix)

        piece_raw = raw.get("piece", raw.get("pieces"))
        rate_raw = raw.get("rate")
        rows.append({
            "s_no": index,
            "product": _row_product(raw, prefix),
            "piece": 1 if piece_raw is None else parse_int(piece_raw, f"{prefix}.piece", minimum=1),
            "weight_mg": parse_weight_mg(raw.get("weight"), f"{prefix}.weight", positive=True),
            "purity": optional_text(raw, "purity", max_length=16),
            "waste_bps": _parse_waste_bps(raw.get("wastePercent"), f"{prefix}.wastePercent"),
            "rate_paise": None if rate_raw in (None, "") else parse_amount_paise(rate_raw, f"{prefix}.rate"),
        })
    return rows


def _row_product(raw: dict, prefix: str) -> str:
    field = f"{prefix}.product"
    value = raw.get("product")
    if value is None or isinstance(value, (dict, list)) or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    text = str(value).strip()
    if len(text) > 255:
        raise ValidationError(f"{field} exceeds max length 255", field=field)
    return text


def _build_row(row_fields: dict) -> MaterialRow:
    net = net_weight_mg(row_fields["weight_mg"], Decimal(row_fields["waste_bps"]) / 100)
    rate = row_fields["rate_paise"]
    return MaterialRow(
        s_no=row_fields["s_no"],
        product=row_fields["product"],
        piece=row_fields["piece"],
        weight_mg=row_fields["weight_mg"],
        purity=row_fields["purity"],
        waste_bps=row_fields["waste_bps"],
        net_weight_mg=net,
        rate_paise=rate,
        amount_paise=None if rate is None else line_amount_paise(rate, net),
    )


def is_silver(product: str | None) -> bool:
    return "silver" in (product or "").lower()


# =============================================================================
# Loading
# =============================================================================

def get_lot(identity, lot_no: str) -> Lot:
    """Tenant-scoped read. Another tenant's lot is reported as NotFound."""
    lot = db.session.query(Lot).filter_by(tenant_id=identity.tenant_id, lot_no=lot_no).first()
    if lot is None:
        raise NotFoundError("Lot", lot_no)
    return lot


def _load_lot(identity, lot_no: str) -> Lot:
    """Locked, tenant-scoped read used inside transitions."""
    lot = lock_for_update(
        db.session.query(Lot).filter_by(tenant_id=identity.tenant_id, lot_no=lot_no)
    ).first()
    if lot is None:
        raise NotFoundError("Lot", lot_no)
    return lot


def list_lots(identity, *, status: str | None = None, phase: str | None = None) -> list[Lot]:
    query = db.session.query(Lot).filter(Lot.tenant_id == identity.tenant_id)
    if status:
        query = query.filter(Lot.phase.in_([p.value for p in phases_for_status(status)]))
    if phase:
        query = query.filter(Lot.phase == parse_phase(phase).value)
    return query.order_by(Lot.created_at.desc(), Lot.id.desc()).all()


def _replace_items(lot: Lot, parsed_rows: list[dict]) -> None:
    """Delete-then-insert. Old rows are flushed away before new serials land."""
    lot.items.clear()
    db.session.flush()
    for row_fields in parsed_rows:
        lot.items.append(_build_row(row_fields))


def _touch(lot: Lot) -> None:
    # Forces an UPDATE (and version check) even when only child rows change
    lot.updated_at = utcnow()


def _lot_ref(payload: dict) -> str:
    return require_text(payload, "lotNo", max_length=64)


def _log_transition(lot: Lot, name: str, identity) -> None:
    current_app.logger.info(
        "Lot %s %s -> %s by user %s (tenant %s)",
        lot.lot_no, name, lot.phase, identity.user_id, identity.tenant_id,
    )


# =============================================================================
# submit
# =============================================================================

def submit_lot(identity, payload: dict) -> Lot:
    """
    POST /transactions: create a Pending lot, or re-submit one.

    Re-submitting an existing lotNo updates the lot in place and replaces its
    item list wholesale. Only Pending lots can be re-submitted; once a lot
    has been decided its items belong to later phases. Client-supplied
    status is ignored: submit always lands in Pending.
    """
    payload = require_payload(payload)
    lot_no = _lot_ref(payload)
    parsed_rows = parse_material_rows(require_list(payload, "items"))

    customer_identity = optional_text(payload, "customerIdentity", max_length=32)
    if customer_identity is None:
        customer_identity = optional_text(payload, "customerAadhar", max_length=32)

    header = {
        "branch": optional_text(payload, "branch", max_length=128),
        "ref_no": optional_text(payload, "refNo", max_length=64),
        "lot_date": parse_date_field(payload, "date"),
        "customer_identity": customer_identity,
        "customer_name": optional_text(payload, "customerName", max_length=255),
        "remarks": optional_text(payload, "remarks", max_length=2000),
    }

    if current_app.config.get("REQUIRE_VERIFIED_KYC"):
        if not customer_identity:
            raise ValidationError("customerIdentity is required", field="customerIdentity")
        if kyc_service.latest_status(identity.tenant_id, customer_identity) != kyc_service.KYC_VERIFIED:
            raise ValidationError("Customer identity has no Verified KYC record", field="customerIdentity")

    def _op():
        lot = lock_for_update(
            db.session.query(Lot).filter_by(tenant_id=identity.tenant_id, lot_no=lot_no)
        ).first()

        if lot is None:
            lot = Lot(
                tenant_id=identity.tenant_id,
                lot_no=lot_no,
                phase=LotPhase.PENDING.value,
                created_by_user_id=identity.user_id,
            )
            db.session.add(lot)
        elif lot.phase != LotPhase.PENDING.value:
            current = LotPhase(lot.phase)
            raise InvalidStateTransition(
                lot_no=lot_no,
                transition="submit",
                current_state=current.label,
                required_state=LotPhase.PENDING.label,
                current_phase=current.value,
                required_phase=LotPhase.PENDING.value,
            )

        for key, value in header.items():
            setattr(lot, key, value)
        _touch(lot)
        _replace_items(lot, parsed_rows)
        return lot

    lot = run_atomically(_op)
    current_app.logger.info("Lot %s submitted (tenant %s)", lot.lot_no, identity.tenant_id)
    audit_service.record(identity, "LOT_SUBMITTED", "transactions", {
        "lotNo": lot.lot_no,
        "items": len(parsed_rows),
    })
    return lot


# =============================================================================
# approve / reject
# =============================================================================

_DECISIONS = {
    "approved": "approve",
    "approve": "approve",
    "rejected": "reject",
    "reject": "reject",
}


def decide(identity, payload: dict) -> Lot:
    """
    POST /workflow/approve {lotNo, decision: Approved|Rejected, remarks}

    Requires the Approver capability (APPROVE_LOTS), checked here as well as
    at the route so every caller of the engine is held to it.
    """
    payload = require_payload(payload)
    lot_no = _lot_ref(payload)
    decision = str(payload.get("decision") or "").strip().lower()
    name = _DECISIONS.get(decision)
    if name is None:
        raise ValidationError("decision must be Approved or Rejected", field="decision")
    remarks = optional_text(payload, "remarks", max_length=2000)

    permission_service.require_permission(identity, "APPROVE_LOTS", resource=f"lot:{lot_no}")

    def _op():
        lot = _load_lot(identity, lot_no)
        transition = check_transition(lot, name)
        lot.phase = transition.target.value
        lot.decided_by_user_id = identity.user_id
        lot.decided_at = utcnow()
        if remarks is not None:
            lot.remarks = remarks
        return lot

    lot = run_atomically(_op)
    _log_transition(lot, name, identity)
    audit_service.record(identity, "LOT_APPROVED" if name == "approve" else "LOT_REJECTED", MODULE, {
        "lotNo": lot_no,
        "remarks": remarks,
    })
    return lot


# =============================================================================
# invoice
# =============================================================================

def _price_rows(lot: Lot, rates: dict[str, int | None]) -> None:
    """Rows without a rate take the current market rate for their metal."""
    for row in lot.items:
        if row.rate_paise is None:
            metal = "silver" if is_silver(row.product) else "gold"
            rate = rates.get(metal)
            if rate is None:
                raise ValidationError(
                    f"items[{row.s_no - 1}].rate is required (no {metal} market rate set)",
                    field=f"items[{row.s_no - 1}].rate",
                )
            row.rate_paise = rate
        row.amount_paise = line_amount_paise(row.rate_paise, row.net_weight_mg)


def invoice(identity, payload: dict) -> Lot:
    """
    POST /workflow/invoice {lotNo, remarks, gst=true, items?}

    Optional items replace the row list (final rates) in the same unit.
    Subtotal is the sum of row amounts; GST is a fixed percentage of the
    subtotal, added once. The market rates in force are snapshotted onto
    the lot.
    """
    payload = require_payload(payload)
    lot_no = _lot_ref(payload)
    remarks = optional_text(payload, "remarks", max_length=2000)
    gst_enabled = parse_bool(payload.get("gst"), "gst", default=True)
    parsed_rows = None
    if payload.get("items") is not None:
        parsed_rows = parse_material_rows(require_list(payload, "items"))

    gst_rate = current_app.config.get("GST_RATE_PERCENT", 3)

    def _op():
        lot = _load_lot(identity, lot_no)
        transition = check_transition(lot, "invoice")
        rates = settings_service.get_market_rates_paise(identity.tenant_id)

        if parsed_rows is not None:
            _replace_items(lot, parsed_rows)
        _price_rows(lot, rates)

        subtotal = sum(row.amount_paise for row in lot.items)
        gst = percent_of_paise(subtotal, gst_rate) if gst_enabled else 0

        lot.gst_enabled = gst_enabled
        lot.subtotal_paise = subtotal
        lot.gst_paise = gst
        lot.grand_total_paise = subtotal + gst
        lot.applied_gold_rate_paise = rates["gold"]
        lot.applied_silver_rate_paise = rates["silver"]

        lot.phase = transition.target.value
        lot.invoiced_by_user_id = identity.user_id
        lot.invoiced_at = utcnow()
        if remarks is not None:
            lot.remarks = remarks
        return lot

    lot = run_atomically(_op)
    _log_transition(lot, "invoice", identity)
    audit_service.record(identity, "LOT_INVOICED", MODULE, {
        "lotNo": lot_no,
        "gst": gst_enabled,
        "grandTotalPaise": lot.grand_total_paise,
    })
    return lot


# =============================================================================
# accounts verification
# =============================================================================

def accounts_verify(identity, payload: dict) -> Lot:
    """POST /workflow/verify {lotNo, remarks?}"""
    payload = require_payload(payload)
    lot_no = _lot_ref(payload)
    remarks = optional_text(payload, "remarks", max_length=2000)

    def _op():
        lot = _load_lot(identity, lot_no)
        transition = check_transition(lot, "accounts_verify")
        lot.phase = transition.target.value
        lot.verified_by_user_id = identity.user_id
        lot.verified_at = utcnow()
        if remarks is not None:
            lot.remarks = remarks
        return lot

    lot = run_atomically(_op)
    _log_transition(lot, "accounts_verify", identity)
    audit_service.record(identity, "LOT_VERIFIED", MODULE, {"lotNo": lot_no})
    return lot


# =============================================================================
# disburse
# =============================================================================

def _upsert_disbursement(lot: Lot, *, payment_mode: str, reference_no: str | None,
                         amount_paise: int, user_id: int | None) -> DisbursementRecord:
    record = lot.disbursement
    if record is None:
        record = DisbursementRecord()
        lot.disbursement = record
    record.payment_mode = payment_mode
    record.reference_no = reference_no
    record.amount_paise = amount_paise
    record.paid_at = utcnow()
    record.verified_by_user_id = user_id
    return record


def disburse(identity, payload: dict) -> Lot:
    """
    POST /workflow/disburse {lotNo, paymentMode, referenceNo, amount}

    The Paid phase is reached once; a repeated call fails the precondition,
    so a lot is never paid twice.
    """
    payload = require_payload(payload)
    lot_no = _lot_ref(payload)
    payment_mode = require_text(payload, "paymentMode", max_length=16).lower()
    if payment_mode not in PAYMENT_MODES:
        raise ValidationError(f"paymentMode must be one of: {', '.join(PAYMENT_MODES)}", field="paymentMode")
    reference_no = optional_text(payload, "referenceNo", max_length=64)
    amount_paise = parse_amount_paise(payload.get("amount"), "amount", positive=True)

    def _op():
        lot = _load_lot(identity, lot_no)
        transition = check_transition(lot, "disburse")
        lot.phase = transition.target.value
        _touch(lot)
        _upsert_disbursement(
            lot,
            payment_mode=payment_mode,
            reference_no=reference_no,
            amount_paise=amount_paise,
            user_id=identity.user_id,
        )
        return lot

    lot = run_atomically(_op)
    _log_transition(lot, "disburse", identity)
    audit_service.record(identity, "LOT_PAID", MODULE, {
        "lotNo": lot_no,
        "paymentMode": payment_mode,
        "referenceNo": reference_no,
        "amountPaise": amount_paise,
    })
    return lot


# =============================================================================
# hub transfer / receipt
# =============================================================================

def _upsert_logistics(lot: Lot, *, vehicle_no: str, driver_name: str | None,
                      seal_number: str, user_id: int | None) -> LogisticsDetail:
    detail = lot.logistics
    if detail is None:
        detail = LogisticsDetail()
        lot.logistics = detail
    detail.vehicle_no = vehicle_no
    detail.driver_name = driver_name
    detail.seal_number = seal_number
    detail.dispatched_at = utcnow()
    detail.dispatched_by_user_id = user_id
    detail.received_at = None
    detail.received_by_user_id = None
    return detail


def initiate_transfer(identity, payload: dict) -> Lot:
    """POST /workflow/transfer {lotNo, vehicleNo, driverName, sealNumber}"""
    payload = require_payload(payload)
    lot_no = _lot_ref(payload)
    vehicle_no = require_text(payload, "vehicleNo", max_length=32)
    seal_number = require_text(payload, "sealNumber", max_length=64)
    driver_name = optional_text(payload, "driverName", max_length=128)

    def _op():
        lot = _load_lot(identity, lot_no)
        transition = check_transition(lot, "transfer")
        lot.phase = transition.target.value
        _touch(lot)
        db.session.flush()
        _upsert_logistics(
            lot,
            vehicle_no=vehicle_no,
            driver_name=driver_name,
            seal_number=seal_number,
            user_id=identity.user_id,
        )
        return lot

    lot = run_atomically(_op)
    _log_transition(lot, "transfer", identity)
    audit_service.record(identity, "LOT_DISPATCHED", MODULE, {
        "lotNo": lot_no,
        "vehicleNo": vehicle_no,
        "driverName": driver_name,
        "sealNumber": seal_number,
    })
    return lot


def confirm_receipt(identity, payload: dict) -> Lot:
    """POST /workflow/receive {lotNo, remarks}"""
    payload = require_payload(payload)
    lot_no = _lot_ref(payload)
    remarks = optional_text(payload, "remarks", max_length=2000)

    def _op():
        lot = _load_lot(identity, lot_no)
        transition = check_transition(lot, "receive")
        if lot.logistics is None:
            raise ValidationError(f"Lot {lot_no} has no dispatch record", field="lotNo")
        lot.phase = transition.target.value
        lot.logistics.received_at = utcnow()
        lot.logistics.received_by_user_id = identity.user_id
        if remarks is not None:
            lot.remarks = remarks
        return lot

    lot = run_atomically(_op)
    _log_transition(lot, "receive", identity)
    audit_service.record(identity, "LOT_RECEIVED_AT_HUB", MODULE, {"lotNo": lot_no, "remarks": remarks})
    return lot


# =============================================================================
# melt
# =============================================================================

def _grams_text(mg: int) -> str:
    return f"{Decimal(mg) / MG_PER_GRAM:.3f}"


def melt(identity, payload: dict) -> Lot:
    """
    POST /workflow/melt {lotNo, inputWeight?, outputWeight, operator, temperature}

    inputWeight defaults to the lot's gross weight. Loss is input - output
    and is flagged when its percentage exceeds MELT_LOSS_THRESHOLD_PERCENT.
    """
    payload = require_payload(payload)
    lot_no = _lot_ref(payload)
    input_raw = payload.get("inputWeight")
    input_mg = None if input_raw in (None, "") else parse_weight_mg(input_raw, "inputWeight", positive=True)
    output_mg = parse_weight_mg(payload.get("outputWeight"), "outputWeight", positive=True)
    operator = optional_text(payload, "operator", max_length=128)
    temperature_raw = payload.get("temperature")
    temperature = None if temperature_raw in (None, "") else parse_int(temperature_raw, "temperature", minimum=0)

    threshold = Decimal(str(current_app.config.get("MELT_LOSS_THRESHOLD_PERCENT", 5.0)))

    def _op():
        lot = _load_lot(identity, lot_no)
        transition = check_transition(lot, "melt")

        melt_input = input_mg if input_mg is not None else lot.total_weight_mg
        if melt_input <= 0:
            raise ValidationError("inputWeight is required (lot has no gross weight)", field="inputWeight")
        if output_mg > melt_input:
            raise ValidationError("outputWeight cannot exceed inputWeight", field="outputWeight")

        loss_mg = melt_input - output_mg
        loss_pct = loss_percent(melt_input, loss_mg)
        flagged = loss_pct > threshold

        detail = lot.melting
        if detail is None:
            detail = MeltingDetail()
            lot.melting = detail
        detail.input_weight_mg = melt_input
        detail.output_weight_mg = output_mg
        detail.loss_weight_mg = loss_mg
        detail.loss_bps = int(loss_pct * 100)
        detail.loss_flagged = flagged
        detail.operator = operator
        detail.temperature = temperature
        detail.melted_at = utcnow()
        detail.melted_by_user_id = identity.user_id

        lot.phase = transition.target.value
        lot.remarks = (
            f"Melted: {_grams_text(output_mg)}g. Loss: {_grams_text(loss_mg)}g. "
            f"Operator: {operator or 'N/A'}"
        )
        return lot

    lot = run_atomically(_op)
    _log_transition(lot, "melt", identity)
    if lot.melting.loss_flagged:
        current_app.logger.warning(
            "Melt loss %s%% on lot %s exceeds threshold %s%% (tenant %s)",
            Decimal(lot.melting.loss_bps) / 100, lot_no, threshold, identity.tenant_id,
        )
    audit_service.record(identity, "LOT_MELTED", MODULE, {
        "lotNo": lot_no,
        "inputMg": lot.melting.input_weight_mg,
        "outputMg": lot.melting.output_weight_mg,
        "lossMg": lot.melting.loss_weight_mg,
        "lossFlagged": lot.melting.loss_flagged,
    })
    return lot


TRANSITION_HANDLERS = {
    "approve": decide,
    "invoice": invoice,
    "verify": accounts_verify,
    "disburse": disburse,
    "transfer": initiate_transfer,
    "receive": confirm_receipt,
    "melt": melt,
}
