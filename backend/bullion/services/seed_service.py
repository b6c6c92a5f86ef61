# Overview: Demo data covering every master kind and every lifecycle stage.

"""
Demo seed for local development and walkthroughs.

Creates one tenant with admin/manager/staff logins, the seven master
kinds, a Pending lot, an InTransit lot, a melted lot, one sales order and
the gold/silver market rates. Idempotent: does nothing if the tenant code
already exists.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ..extensions import db
from ..master_kinds import MasterKind
from ..models import (
    LogisticsDetail,
    Lot,
    MasterRecord,
    MaterialRow,
    MeltingDetail,
    SalesOrder,
    SalesOrderItem,
    Tenant,
    User,
)
from ..units import line_amount_paise, net_weight_mg
from . import audit_service
from .auth_service import hash_password
from .concurrency import run_atomically
from .lot_states import LotPhase
from .settings_service import GOLD_RATE_KEY, SILVER_RATE_KEY, stage_setting
from .tenant_service import system_identity
from bullion.time_utils import utcnow


DEMO_TENANT_CODE = "TMG"
DEMO_TENANT_NAME = "True Money Gold HQ"

DEMO_USERS = (
    ("admin", "admin123", "ADMIN"),
    ("manager", "manager123", "MANAGER"),
    ("staff", "staff123", "STAFF"),
)

DEMO_MASTERS = (
    ("FR-01", MasterKind.FRANCHISE, "Erode Main Branch", "BR-ERD-01", None, {}),
    ("DS-01", MasterKind.DESIGNATION, "Senior Gold Appraiser", "DS-APP-SR", None, {}),
    ("ORN-01", MasterKind.ORNAMENT_TYPE, "Gold Bangle (916/22K)", "ORN-GLD-916", None, {}),
    ("HUB-01", MasterKind.HUB, "Coimbatore Refining Hub", "HUB-CBE-01", None, {}),
    ("BYR-01", MasterKind.BUYER, "Malabar Gold & Diamonds", "BYR-GST-MALABAR", None, {}),
    ("STF-01", MasterKind.STAFF, "Rajesh Kumar", "STF-EMP-101", None, {"designation": "Appraiser"}),
    ("CUST-01", MasterKind.CUSTOMER, "Arjun Reddy", "1234-5678-9012", "verified", {"mobile": "9988776655"}),
)


def _row(s_no: int, product: str, grams: str, purity: str, waste: str, rate_rupees: int | None) -> MaterialRow:
    weight = int(Decimal(grams) * 1000)
    net = net_weight_mg(weight, Decimal(waste))
    rate = rate_rupees * 100 if rate_rupees is not None else None
    return MaterialRow(
        s_no=s_no,
        product=product,
        piece=1,
        weight_mg=weight,
        purity=purity,
        waste_bps=int(Decimal(waste) * 100),
        net_weight_mg=net,
        rate_paise=rate,
        amount_paise=line_amount_paise(rate, net) if rate is not None else None,
    )


def seed_demo(*, code: str = DEMO_TENANT_CODE, name: str = DEMO_TENANT_NAME) -> dict:
    existing = db.session.query(Tenant).filter_by(code=code).first()
    if existing is not None:
        return {"created": False, "tenant_id": existing.id}

    tenant = Tenant(name=name, code=code, is_active=True)
    db.session.add(tenant)
    db.session.commit()
    identity = system_identity(tenant.id)

    def _op():
        now = utcnow()
        for username, password, role in DEMO_USERS:
            db.session.add(User(
                tenant_id=tenant.id,
                username=username if code == DEMO_TENANT_CODE else f"{username}.{code.lower()}",
                password_hash=hash_password(password),
                role=role,
            ))

        for record_id, kind, label, identifier, kyc_status, details in DEMO_MASTERS:
            db.session.add(MasterRecord(
                tenant_id=tenant.id,
                record_id=record_id,
                kind=kind.value,
                name=label,
                identifier=identifier,
                record_date=date(2025, 2, 20) if kind is MasterKind.CUSTOMER else date(2025, 1, 1),
                kyc_status=kyc_status,
                details=details,
            ))

        # Material inward -> quotation, waiting for the Regional Head
        db.session.add(Lot(
            tenant_id=tenant.id, lot_no="LOT-P-001", branch="Erode", ref_no="R-101",
            lot_date=date(2025, 2, 24), customer_name="Arjun Reddy",
            phase=LotPhase.PENDING.value,
            items=[_row(1, "Chain", "10", "916", "2", 7200)],
        ))

        # Approved -> invoiced -> paid -> dispatched to the hub
        db.session.add(Lot(
            tenant_id=tenant.id, lot_no="LOT-T-002", branch="Salem", ref_no="R-202",
            lot_date=date(2025, 2, 23), customer_name="Meera K.",
            phase=LotPhase.IN_TRANSIT.value,
            items=[_row(1, "Necklace", "25", "916", "2", 7200)],
            logistics=LogisticsDetail(
                vehicle_no="TN-33-A-1234", driver_name="Suresh", seal_number="SEAL-001",
                dispatched_at=now,
            ),
        ))

        # Received at the hub and melted
        db.session.add(Lot(
            tenant_id=tenant.id, lot_no="LOT-M-003", branch="Erode", ref_no="R-303",
            lot_date=date(2025, 2, 20), customer_name="Suresh P.",
            phase=LotPhase.MELTED.value,
            remarks="Melted: 98.500g. Loss: 1.500g. Operator: K. Balan",
            items=[_row(1, "Old Gold Ornaments", "100", "916", "0", 7200)],
            melting=MeltingDetail(
                input_weight_mg=100_000, output_weight_mg=98_500, loss_weight_mg=1_500,
                loss_bps=150, loss_flagged=False, operator="K. Balan", temperature=1064,
                melted_at=now,
            ),
        ))

        line_total = line_amount_paise(730_000, 68_500)
        db.session.add(SalesOrder(
            tenant_id=tenant.id, order_no="SO-1001", buyer="Malabar Gold",
            order_date=date(2025, 2, 25), status="Confirmed",
            total_amount_paise=line_total,
            items=[SalesOrderItem(
                line_no=1, product="Refined Gold Bars (999)", quantity_mg=68_500,
                unit_price_paise=730_000, line_total_paise=line_total,
            )],
        ))

        stage_setting(identity, GOLD_RATE_KEY, "7250")
        stage_setting(identity, SILVER_RATE_KEY, "94")

    run_atomically(_op)
    audit_service.record(identity, "DEMO_SEEDED", "system", {"tenant": code})
    return {"created": True, "tenant_id": tenant.id}
