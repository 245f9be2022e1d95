import json
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase, TestCase, override_settings

from apps.inventory.ledger import InventoryLedger
from apps.sales.domain import Sale, SaleItem
from apps.sales.services import (
    InvoiceNumberGenerator,
    SalesReportService,
    TransactionEngine,
    price_cart,
    resolve_discount_percent,
)
from apps.storage.models import KeyValueEntry
from apps.terminal.exceptions import EmptyCartError, NotFoundError, OversellError
from apps.terminal.session import PharmacySession
from apps.terminal.utils import get_terminal_session, reset_terminal_session

FIXED_NOW = datetime(2026, 10, 19, 10, 30, tzinfo=dt_timezone.utc)


def fixed_clock():
    return FIXED_NOW


class PricingTests(SimpleTestCase):
    def test_subtotal_discount_and_change(self):
        items = [SaleItem(medicine_id="1", name="Paracetamol", quantity=2, price_at_sale=Decimal("5.50"))]

        totals = price_cart(items, discount_percent=0, cash_received="20")

        self.assertEqual(totals.subtotal, Decimal("11.00"))
        self.assertEqual(totals.grand_total, Decimal("11.00"))
        self.assertEqual(totals.change_due, Decimal("9.00"))
        self.assertEqual(totals.change_label, "Change")

    def test_ten_percent_discount(self):
        items = [SaleItem(medicine_id="2", name="Amoxicillin", quantity=10, price_at_sale=Decimal("12.00"))]

        totals = price_cart(items, discount_percent=10)

        self.assertEqual(totals.subtotal, Decimal("120.00"))
        self.assertEqual(totals.discount_amount, Decimal("12.00"))
        self.assertEqual(totals.grand_total, Decimal("108.00"))

    def test_short_cash_is_reported_as_balance_due(self):
        items = [SaleItem(medicine_id="2", name="Amoxicillin", quantity=1, price_at_sale=Decimal("12.00"))]

        totals = price_cart(items, cash_received="10")

        self.assertEqual(totals.change_due, Decimal("-2.00"))
        self.assertEqual(totals.change_label, "Balance due")
        self.assertEqual(totals.change_magnitude, Decimal("2.00"))
        self.assertEqual(totals.receipt_change, Decimal("0"))

    def test_missing_or_garbled_cash_means_no_change(self):
        items = [SaleItem(medicine_id="2", name="Amoxicillin", quantity=1, price_at_sale=Decimal("12.00"))]

        for cash in (None, "", "abc"):
            totals = price_cart(items, cash_received=cash)
            self.assertIsNone(totals.cash_received)
            self.assertEqual(totals.change_due, Decimal("0"))
            self.assertEqual(totals.resolved_cash, Decimal("12.00"))

    def test_zero_cash_is_a_balance_due(self):
        items = [SaleItem(medicine_id="2", name="Amoxicillin", quantity=1, price_at_sale=Decimal("12.00"))]

        totals = price_cart(items, cash_received="0")

        self.assertEqual(totals.cash_received, Decimal("0"))
        self.assertEqual(totals.change_due, Decimal("-12.00"))
        self.assertEqual(totals.change_label, "Balance due")
        self.assertEqual(totals.resolved_cash, Decimal("12.00"))
        self.assertEqual(totals.receipt_change, Decimal("0"))

    def test_discount_percent_is_clamped(self):
        self.assertEqual(resolve_discount_percent(-5), Decimal("0"))
        self.assertEqual(resolve_discount_percent("not a number"), Decimal("0"))
        self.assertEqual(resolve_discount_percent("150"), Decimal("100"))
        self.assertEqual(resolve_discount_percent("12.5"), Decimal("12.5"))


class InvoiceNumberTests(SimpleTestCase):
    def test_numbers_are_strictly_increasing_under_a_frozen_clock(self):
        generator = InvoiceNumberGenerator(clock=fixed_clock)
        first = generator.next_id()
        second = generator.next_id()

        self.assertRegex(first, r"^INV-\d{6}$")
        self.assertEqual(int(second[4:]), int(first[4:]) + 1)

    def test_numbers_continue_after_existing_history(self):
        generator = InvoiceNumberGenerator(["INV-999998"], clock=fixed_clock)
        self.assertEqual(generator.next_id(), "INV-999999")


class TransactionEngineTests(SimpleTestCase):
    def setUp(self):
        self.ledger = InventoryLedger()
        self.paracetamol = self.ledger.add(name="Paracetamol", quantity=250, price=Decimal("5.50"))
        self.amoxicillin = self.ledger.add(name="Amoxicillin", quantity=120, price=Decimal("12.00"))
        self.engine = TransactionEngine(self.ledger, clock=fixed_clock)

    def test_add_to_cart_stops_at_stock_on_hand(self):
        medicine = self.ledger.add(name="Insulin Pen", quantity=5, price=Decimal("40.00"))

        for _ in range(6):
            self.engine.add_to_cart(medicine.id)

        self.assertEqual(len(self.engine.cart), 1)
        self.assertEqual(self.engine.cart.get(medicine.id).quantity, 5)

    def test_price_is_frozen_when_added(self):
        self.engine.add_to_cart(self.paracetamol.id)
        self.ledger.update(self.paracetamol.id, price="9.99")
        self.engine.add_to_cart(self.paracetamol.id)

        line = self.engine.cart.get(self.paracetamol.id)
        self.assertEqual(line.quantity, 2)
        self.assertEqual(line.price_at_sale, Decimal("5.50"))

    def test_out_of_stock_medicine_is_not_added(self):
        empty = self.ledger.add(name="Recalled", quantity=0, price="1.00")
        self.assertIsNone(self.engine.add_to_cart(empty.id))
        self.assertTrue(self.engine.cart.is_empty())

    def test_add_unknown_medicine_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.engine.add_to_cart("missing")

    def test_update_quantity_is_floored_at_one_and_capped_at_stock(self):
        self.engine.add_to_cart(self.amoxicillin.id)

        self.assertEqual(self.engine.update_quantity(self.amoxicillin.id, -3).quantity, 1)
        self.assertEqual(self.engine.update_quantity(self.amoxicillin.id, 500).quantity, 120)

    def test_remove_from_cart_drops_line(self):
        self.engine.add_to_cart(self.paracetamol.id)
        self.engine.add_to_cart(self.paracetamol.id)
        self.engine.add_to_cart(self.amoxicillin.id)

        self.engine.remove_from_cart(self.paracetamol.id)

        self.assertEqual([line.medicine_id for line in self.engine.cart], [self.amoxicillin.id])

    def test_process_sale_freezes_total_and_resets_checkout(self):
        self.engine.add_to_cart(self.paracetamol.id)
        self.engine.add_to_cart(self.paracetamol.id)
        self.engine.add_to_cart(self.amoxicillin.id)

        result = self.engine.process_sale(customer_name="Zoya Khan", discount_percent=10, cash_received="50")

        sale = result.sale
        self.assertEqual(sale.timestamp, FIXED_NOW)
        self.assertEqual(sale.customer_name, "Zoya Khan")
        self.assertEqual(result.totals.subtotal, Decimal("23.00"))
        self.assertEqual(sale.total_amount, Decimal("20.70"))
        self.assertEqual(sale.total_amount, result.totals.subtotal - result.totals.subtotal * 10 / 100)
        self.assertEqual([item.name for item in sale.items], ["Paracetamol", "Amoxicillin"])

        self.assertEqual(self.paracetamol.quantity, 248)
        self.assertEqual(self.amoxicillin.quantity, 119)

        self.assertTrue(self.engine.cart.is_empty())
        self.assertEqual(self.engine.cart.customer_name, "")
        self.assertEqual(self.engine.cart.discount_percent, Decimal("0"))
        self.assertIsNone(self.engine.cart.cash_received)

        receipt = result.receipt
        self.assertEqual(receipt.discount, Decimal("2.30"))
        self.assertEqual(receipt.cash_received, Decimal("50"))
        self.assertEqual(receipt.change, Decimal("29.30"))

    def test_blank_customer_becomes_walk_in(self):
        self.engine.add_to_cart(self.paracetamol.id)
        result = self.engine.process_sale(customer_name="   ")
        self.assertEqual(result.sale.customer_name, "Walk-in Customer")
        self.assertEqual(result.receipt.cash_received, Decimal("5.50"))
        self.assertEqual(result.receipt.change, Decimal("0"))

    def test_later_cart_changes_do_not_touch_committed_sale(self):
        self.engine.add_to_cart(self.paracetamol.id)
        sale = self.engine.process_sale().sale

        self.engine.add_to_cart(self.paracetamol.id)
        self.engine.add_to_cart(self.paracetamol.id)
        self.ledger.update(self.paracetamol.id, price="99.00", name="Renamed")

        self.assertEqual(len(sale.items), 1)
        self.assertEqual(sale.items[0].quantity, 1)
        self.assertEqual(sale.items[0].price_at_sale, Decimal("5.50"))
        self.assertEqual(sale.items[0].name, "Paracetamol")
        self.assertEqual(sale.total_amount, Decimal("5.50"))

    def test_empty_cart_raises_without_side_effects(self):
        with self.assertRaises(EmptyCartError):
            self.engine.process_sale(customer_name="Nobody")
        self.assertEqual(self.paracetamol.quantity, 250)

    def test_oversell_at_settlement_is_rejected_by_default(self):
        self.engine.add_to_cart(self.amoxicillin.id)
        self.engine.update_quantity(self.amoxicillin.id, 4)
        self.ledger.update(self.amoxicillin.id, quantity=2)

        with self.assertRaises(OversellError) as ctx:
            self.engine.process_sale(allow_oversell=False)

        self.assertEqual(ctx.exception.warnings[0].requested, 5)
        self.assertEqual(ctx.exception.warnings[0].available, 2)
        self.assertEqual(self.amoxicillin.quantity, 2)
        self.assertEqual(len(self.engine.cart), 1)

    def test_oversell_can_be_accepted_and_clamps(self):
        self.engine.add_to_cart(self.amoxicillin.id)
        self.engine.update_quantity(self.amoxicillin.id, 4)
        self.ledger.update(self.amoxicillin.id, quantity=2)

        with self.assertLogs("apps.inventory.ledger", level="WARNING"):
            result = self.engine.process_sale(allow_oversell=True)

        self.assertEqual(self.amoxicillin.quantity, 0)
        self.assertEqual(len(result.warnings), 1)
        self.assertEqual(result.sale.total_amount, Decimal("60.00"))


class PharmacySessionTests(SimpleTestCase):
    def setUp(self):
        self.session = PharmacySession(clock=fixed_clock)
        self.medicine = self.session.add_medicine(name="Paracetamol", quantity=250, price=Decimal("5.50"))

    def test_deleting_medicine_keeps_historical_sale(self):
        self.session.engine.add_to_cart(self.medicine.id)
        self.session.engine.add_to_cart(self.medicine.id)
        sale = self.session.settle().sale

        self.session.remove_medicine(self.medicine.id)

        stored = self.session.find_sale(sale.id)
        self.assertEqual(stored.items[0].name, "Paracetamol")
        self.assertEqual(stored.items[0].price_at_sale, Decimal("5.50"))
        self.assertEqual(stored.total_amount, Decimal("11.00"))
        self.assertIsNone(self.session.ledger.find(stored.items[0].medicine_id))

        receipt = self.session.reprint(sale.id)
        self.assertTrue(receipt.is_reprint)
        self.assertEqual(receipt.lines[0].line_total, Decimal("11.00"))

    def test_empty_settlement_leaves_history_untouched(self):
        with self.assertRaises(EmptyCartError):
            self.session.settle()
        self.assertEqual(self.session.history, ())
        self.assertEqual(self.medicine.quantity, 250)

    def test_unknown_sale_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.session.reprint("INV-000000")


class SalesReportTests(SimpleTestCase):
    def setUp(self):
        item = SaleItem(medicine_id="1", name="Paracetamol", quantity=2, price_at_sale=Decimal("5.50"))
        self.history = [
            Sale(id="INV-102501", timestamp=FIXED_NOW - timedelta(days=1), items=[item],
                 total_amount=Decimal("11.00"), customer_name="Ahmed Ali"),
            Sale(id="INV-102502", timestamp=FIXED_NOW, items=[item],
                 total_amount=Decimal("9.90"), customer_name="Zoya Khan"),
        ]

    def test_search_matches_invoice_or_customer_newest_first(self):
        self.assertEqual([s.id for s in SalesReportService.search(self.history, "")], ["INV-102502", "INV-102501"])
        self.assertEqual([s.id for s in SalesReportService.search(self.history, "zoya")], ["INV-102502"])
        self.assertEqual([s.id for s in SalesReportService.search(self.history, "102501")], ["INV-102501"])

    def test_stats(self):
        stats = SalesReportService.get_stats(self.history)
        self.assertEqual(stats["total_revenue"], Decimal("20.90"))
        self.assertEqual(stats["invoice_count"], 2)
        self.assertEqual(stats["average_order_value"], Decimal("10.45"))

    def test_stats_on_empty_history(self):
        self.assertEqual(SalesReportService.get_stats([])["average_order_value"], Decimal("0"))

    def test_discount_is_derived_from_frozen_total(self):
        self.assertEqual(self.history[1].discount_amount, Decimal("1.10"))


class CheckoutAPITests(TestCase):
    def setUp(self):
        reset_terminal_session()
        self.session = get_terminal_session()
        self.medicine = self.session.add_medicine(
            name="Paracetamol 500mg",
            category="Painkillers",
            quantity=250,
            price=Decimal("5.50"),
        )

    def tearDown(self):
        reset_terminal_session()

    def _post(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type="application/json")

    def test_checkout_creates_sale_and_persists(self):
        self._post("/api/sales/cart/add/", {"medicineId": self.medicine.id})
        response = self._post("/api/sales/cart/add/", {"medicineId": self.medicine.id})
        self.assertEqual(response.json()["subtotal"], 11.0)

        response = self._post("/api/sales/cart/checkout_fields/", {"cashReceived": "20"})
        self.assertEqual(response.json()["changeDue"], 9.0)
        self.assertEqual(response.json()["changeLabel"], "Change")

        response = self._post("/api/sales/cart/checkout/", {"customerName": ""})
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["message"], "Sale created successfully")
        self.assertEqual(body["sale"]["totalAmount"], 11.0)
        self.assertEqual(body["sale"]["customerName"], "Walk-in Customer")
        self.assertEqual(body["receipt"]["change"], 9.0)
        self.assertIn("CASH INVOICE", body["receiptText"])

        self.assertEqual(self.medicine.quantity, 248)
        self.assertTrue(self.session.cart.is_empty())

        stored = KeyValueEntry.objects.get(key="pharma_sales").value
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0]["id"], body["sale"]["id"])

        response = self.client.get(f"/api/sales/sales/{body['sale']['id']}/receipt/", {"format": "txt"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("REPRINT INVOICE", response.content.decode())

    def test_cart_view_labels_the_discount(self):
        self._post("/api/sales/cart/add/", {"medicineId": self.medicine.id})

        body = self._post("/api/sales/cart/checkout_fields/", {"discountPercent": "12.5"}).json()
        self.assertEqual(body["discountLabel"], "Discount (12.5%)")

        body = self.client.get("/api/sales/cart/").json()
        self.assertEqual(body["discountLabel"], "Discount (12.5%)")

        self._post("/api/sales/cart/clear/")
        body = self.client.get("/api/sales/cart/").json()
        self.assertEqual(body["discountLabel"], "Discount (0%)")

    def test_empty_cart_checkout_returns_400(self):
        response = self._post("/api/sales/cart/checkout/")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.session.history, ())

    @override_settings(POS_ALLOW_OVERSELL=False)
    def test_oversell_conflict_then_override(self):
        self._post("/api/sales/cart/add/", {"medicineId": self.medicine.id})
        self._post("/api/sales/cart/quantity/", {"medicineId": self.medicine.id, "delta": 2})
        self.session.update_medicine(self.medicine.id, quantity=1)

        response = self._post("/api/sales/cart/checkout/")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["oversell"][0]["requested"], 3)
        self.assertEqual(self.medicine.quantity, 1)

        response = self._post("/api/sales/cart/checkout/", {"allowOversell": True})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.json()["oversell"]), 1)
        self.assertEqual(self.medicine.quantity, 0)

    def test_sales_list_and_stats(self):
        self._post("/api/sales/cart/add/", {"medicineId": self.medicine.id})
        self._post("/api/sales/cart/checkout/", {"customerName": "Ahmed Ali", "discountPercent": 10})

        response = self.client.get("/api/sales/sales/", {"search": "ahmed"})
        self.assertEqual(response.json()["count"], 1)

        response = self.client.get("/api/sales/sales/stats/")
        self.assertEqual(response.json()["invoice_count"], 1)
        self.assertAlmostEqual(response.json()["total_revenue"], 4.95)
