"""
Sales/Inventory Ledger Tests

- Order numbering is per tenant and gap-free (SO-0001, SO-0002, ...)
- Order totals are always recomputed server-side
- Inventory counts melted lots only, bucketed by metal
"""

import pytest

from bullion.errors import NotFoundError, ValidationError
from bullion.models import SalesOrderItem
from bullion.extensions import db
from bullion.services import sales_service, settings_service


def order_payload(**fields):
    payload = {
        "buyer": "Malabar Gold",
        "date": "2025-02-24",
        "status": "Confirmed",
        "items": [{"product": "Gold Bar 995", "quantity": 68.5, "unitPrice": 7300}],
    }
    payload.update(fields)
    return payload


class TestOrders:

    def test_new_orders_are_numbered_per_tenant(self, admin_identity, admin_b_identity):
        first = sales_service.upsert_order(admin_identity, order_payload())
        second = sales_service.upsert_order(admin_identity, order_payload(buyer="Joyalukkas"))
        other = sales_service.upsert_order(admin_b_identity, order_payload())

        assert first.order_no == "SO-0001"
        assert second.order_no == "SO-0002"
        assert other.order_no == "SO-0001"

    def test_totals_are_computed_server_side(self, admin_identity):
        order = sales_service.upsert_order(admin_identity, order_payload(
            totalAmount=1,
            items=[
                {"product": "Gold Bar 995", "quantity": 68.5, "unitPrice": 7300, "total": 5},
                {"product": "Silver Bar", "quantity": 1000, "price": 94.5},
            ],
        ))

        data = order.to_dict()
        assert [line["total"] for line in data["items"]] == [500050.0, 94500.0]
        assert data["totalAmount"] == 594550.0
        assert order.total_amount_paise == sum(item.line_total_paise for item in order.items)

    def test_update_replaces_lines(self, admin_identity):
        order = sales_service.upsert_order(admin_identity, order_payload(items=[
            {"product": "Gold Bar 995", "quantity": 10, "unitPrice": 7300},
            {"product": "Gold Coin", "quantity": 8, "unitPrice": 7400},
        ]))

        updated = sales_service.upsert_order(admin_identity, order_payload(
            id=order.order_no,
            status="completed",
            items=[{"product": "Gold Bar 995", "quantity": 20, "unitPrice": 7300}],
        ))

        assert updated.order_no == "SO-0001"
        assert updated.status == "Completed"
        assert updated.total_amount_paise == 14_600_000
        assert db.session.query(SalesOrderItem).count() == 1
        assert len(sales_service.list_orders(admin_identity)) == 1

    def test_unknown_id_is_not_found(self, admin_identity):
        with pytest.raises(NotFoundError):
            sales_service.upsert_order(admin_identity, order_payload(id="SO-0042"))
        assert sales_service.list_orders(admin_identity) == []

    def test_other_tenants_order_is_not_found(self, admin_identity, admin_b_identity):
        order = sales_service.upsert_order(admin_b_identity, order_payload())
        with pytest.raises(NotFoundError):
            sales_service.upsert_order(admin_identity, order_payload(id=order.order_no))

    @pytest.mark.parametrize("fields,field", [
        ({"buyer": " "}, "buyer"),
        ({"status": "Shipped"}, "status"),
        ({"items": []}, "items"),
        ({"items": [{"product": "Gold Bar", "quantity": 0, "unitPrice": 7300}]}, "items[0].quantity"),
        ({"items": [{"quantity": 1, "unitPrice": 7300}]}, "items[0].product"),
    ])
    def test_invalid_orders_rejected(self, admin_identity, fields, field):
        with pytest.raises(ValidationError) as exc_info:
            sales_service.upsert_order(admin_identity, order_payload(**fields))
        assert exc_info.value.field == field

    def test_failed_create_does_not_consume_a_number(self, admin_identity):
        with pytest.raises(ValidationError):
            sales_service.upsert_order(admin_identity, order_payload(items=[]))
        assert sales_service.upsert_order(admin_identity, order_payload()).order_no == "SO-0001"


class TestInventory:

    def test_only_melted_lots_count(self, admin_identity, make_lot):
        make_lot("LOT-A", through="melt")
        make_lot("LOT-B", through="receive")
        make_lot("LOT-C", through="melt", items=[
            {"product": "Silver Anklet", "weight": 100, "rate": 94},
        ])

        assert sales_service.available_inventory_mg(admin_identity.tenant_id) == {
            "gold": 10_000,
            "silver": 100_000,
        }

    def test_valuation_uses_current_market_rates(self, admin_identity, make_lot):
        make_lot("LOT-A", through="melt")
        make_lot("LOT-C", through="melt", items=[
            {"product": "Silver Anklet", "weight": 100, "rate": 94},
        ])
        settings_service.set_market_rates(admin_identity, {"gold": 7250, "silver": 94})

        valuation = sales_service.inventory_valuation(admin_identity.tenant_id)

        assert valuation["rates_paise"] == {"gold": 725_000, "silver": 9_400}
        assert valuation["valuation_paise"] == 7_250_000 + 940_000

    def test_valuation_skips_metals_without_a_rate(self, admin_identity, make_lot):
        make_lot("LOT-A", through="melt")
        valuation = sales_service.inventory_valuation(admin_identity.tenant_id)
        assert valuation["valuation_paise"] == 0

    def test_inventory_is_tenant_scoped(self, admin_identity, admin_b_identity, make_lot):
        make_lot("LOT-A", through="melt")
        assert sales_service.available_inventory_mg(admin_b_identity.tenant_id) == {"gold": 0, "silver": 0}
