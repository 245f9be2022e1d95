from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase, override_settings

from apps.sales.domain import Sale, SaleItem
from apps.sales.receipts import Receipt, render_receipt
from apps.sales.services import price_cart
from apps.sales.utils import format_currency, format_percentage, format_timestamp

SOLD_AT = datetime(2026, 10, 19, 10, 30, tzinfo=dt_timezone.utc)


@override_settings(TIME_ZONE="UTC", RECEIPT_WIDTH=42)
class ReceiptRenderingTests(SimpleTestCase):
    def setUp(self):
        self.items = [SaleItem(medicine_id="2", name="Amoxicillin 250mg", quantity=10, price_at_sale=Decimal("12.00"))]
        self.totals = price_cart(self.items, discount_percent=10, cash_received="200")
        self.sale = Sale(
            id="INV-102502",
            timestamp=SOLD_AT,
            items=self.items,
            total_amount=self.totals.grand_total,
            customer_name="Zoya Khan",
        )

    def test_checkout_receipt_contents(self):
        receipt = Receipt.for_settlement(self.sale, self.totals)
        text = render_receipt(receipt)

        self.assertIn("ABDULLAH PHARMACY", text)
        self.assertIn("TEL: +923005471567", text)
        self.assertIn("CASH INVOICE", text)
        self.assertIn("INV-102502", text)
        self.assertIn("2026-10-19 10:30", text)
        self.assertIn("Zoya Khan", text)
        self.assertIn("120.00", text)
        self.assertIn("-12.00", text)
        self.assertIn("PKR 108.00", text)
        self.assertIn("200.00", text)
        self.assertIn("92.00", text)
        self.assertIn("STAY HEALTHY", text)
        self.assertNotIn("REPRINT", text)

    def test_rows_fit_the_paper_width(self):
        text = render_receipt(Receipt.for_settlement(self.sale, self.totals))
        for row in text.splitlines():
            self.assertLessEqual(len(row), 42, row)

    def test_discount_row_is_omitted_without_discount(self):
        totals = price_cart(self.items)
        sale = Sale(id="INV-000001", timestamp=SOLD_AT, items=self.items, total_amount=totals.grand_total)
        text = render_receipt(Receipt.for_settlement(sale, totals))
        self.assertNotIn("DISCOUNT:", text)

    def test_long_item_names_wrap(self):
        items = [SaleItem(
            medicine_id="9",
            name="Amoxicillin Clavulanate Potassium 625mg Tablets",
            quantity=1,
            price_at_sale=Decimal("30.00"),
        )]
        totals = price_cart(items)
        sale = Sale(id="INV-000002", timestamp=SOLD_AT, items=items, total_amount=totals.grand_total)

        text = render_receipt(Receipt.for_settlement(sale, totals))

        self.assertIn("Amoxicillin Clavulanate Potassium 625mg", text)
        for row in text.splitlines():
            self.assertLessEqual(len(row), 42, row)

    def test_reprint_derives_figures_from_stored_sale(self):
        reprinted_at = datetime(2026, 10, 20, 9, 0, tzinfo=dt_timezone.utc)
        receipt = Receipt.for_reprint(self.sale, reprinted_at=reprinted_at)

        self.assertTrue(receipt.is_reprint)
        self.assertEqual(receipt.subtotal, Decimal("120.00"))
        self.assertEqual(receipt.discount, Decimal("12.00"))
        self.assertEqual(receipt.cash_received, Decimal("108.00"))
        self.assertEqual(receipt.change, Decimal("0"))

        text = render_receipt(receipt)
        self.assertIn("REPRINT INVOICE", text)
        self.assertIn("REPRINTED ON 2026-10-20 09:00", text)

        payload = receipt.as_dict()
        self.assertTrue(payload["isReprint"])
        self.assertEqual(payload["grandTotal"], 108.0)
        self.assertEqual(payload["items"][0]["lineTotal"], 120.0)


class FormattingTests(SimpleTestCase):
    def test_format_currency(self):
        self.assertEqual(format_currency(Decimal("1250")), "PKR 1,250.00")
        self.assertEqual(format_currency(Decimal("0.005")), "PKR 0.01")

    def test_format_percentage(self):
        self.assertEqual(format_percentage(Decimal("10.00")), "10%")

    def test_format_timestamp_handles_missing_value(self):
        self.assertEqual(format_timestamp(None), "")
