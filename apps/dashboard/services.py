"""
Dashboard aggregates over the terminal's inventory and sale history.
"""
from collections import Counter
from decimal import Decimal

from django.utils import timezone

from apps.sales.services import SalesReportService


class DashboardService:
    @staticmethod
    def get_summary(ledger, history, today=None):
        """
        Headline figures for the dashboard.

        Keys:
        - total_stock_value: sum of price x quantity over all medicines
        - low_stock_count, expired_count, medicines_count
        - today_sales: total of sales settled today
        - daily_sales: last seven days, oldest first
        - categories: medicine count per category
        """
        today = today or timezone.localdate()
        medicines = ledger.all()

        total_stock_value = sum((m.stock_value for m in medicines), Decimal("0"))
        categories = Counter(m.category or "Uncategorized" for m in medicines)
        daily = SalesReportService.daily_totals(history, days=7, today=today)

        return {
            "medicines_count": len(medicines),
            "total_stock_value": float(total_stock_value),
            "low_stock_count": len(ledger.find_low_stock()),
            "expired_count": len(ledger.find_expired(today)),
            "today_sales": float(SalesReportService.total_for_day(history, today)),
            "sales_count": len(history),
            "daily_sales": [
                {
                    "date": row["date"].isoformat(),
                    "label": row["date"].strftime("%m/%d"),
                    "amount": float(row["amount"]),
                }
                for row in daily
            ],
            "categories": [{"name": name, "count": count} for name, count in categories.items()],
        }
