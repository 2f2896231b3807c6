# Overview: Admin reports hook; analytics fetch, derived statistics, chart shapes and export.

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from ..api import APIClient
from ..downloads import save_download
from ..errors import StorefrontError, error_message
from ..models import ReportFilters, ReportsData
from ..notifications import ToastCenter
from ..time_utils import epoch_millis
from .admin_store import AdminStore


logger = logging.getLogger(__name__)

EXPORT_BASENAME = "گزارش-فروش"


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0


class ReportsService:
    """
    Sales/product/customer analytics for a date range and period.

    Changing a filter always re-fetches. Overlapping fetches are resolved
    by sequence number: only the latest issued fetch may replace the data.
    Fetch and export failures are shown as toasts and recorded in
    store.error; they are not raised.
    """

    def __init__(
        self,
        api: APIClient,
        store: AdminStore,
        notifier: ToastCenter,
        *,
        download_dir: str = ".",
    ):
        self.api = api
        self.store = store
        self.notifier = notifier
        self.download_dir = download_dir
        self._sequence = 0

    @property
    def data(self) -> Optional[ReportsData]:
        return self.store.reports.data

    @property
    def loading(self) -> bool:
        return self.store.reports.loading

    @property
    def error(self) -> Optional[str]:
        return self.store.reports.error

    @property
    def exporting(self) -> bool:
        return self.store.reports.exporting

    @property
    def filters(self) -> ReportFilters:
        return self.store.reports.filters

    @property
    def has_data(self) -> bool:
        return self.data is not None and len(self.data.sales_data) > 0

    @property
    def is_empty(self) -> bool:
        return not self.has_data

    @property
    def is_initial_load(self) -> bool:
        return self.data is None and self.loading

    # =========================================================================
    # Fetching
    # =========================================================================

    async def fetch_reports_data(self, **overrides: Any) -> Optional[ReportsData]:
        """
        Fetch analytics for the current filters with overrides merged on top.

        Returns the new dataset, or None if the fetch failed or was superseded.
        """
        query = self.filters.updated(**overrides)
        self._sequence += 1
        sequence = self._sequence

        self.store.set_reports_loading(True)
        self.store.set_reports_error(None)

        try:
            response = await self.api.reports.get_analytics(query.to_params())
        except StorefrontError as exc:
            if sequence != self._sequence:
                logger.debug("Dropping failed reports fetch #%d (superseded)", sequence)
                return None
            message = error_message(exc, "خطا در دریافت گزارشات")
            logger.error("Reports fetch failed: %s", message, exc_info=exc)
            self.store.set_reports_error(message)
            self.store.set_reports_loading(False)
            self.notifier.error(message)
            return None

        if sequence != self._sequence:
            logger.debug("Dropping reports response #%d (superseded by #%d)", sequence, self._sequence)
            return None

        data = ReportsData.from_dict(response)
        self.store.set_reports_data(data)
        self.store.set_reports_loading(False)
        return data

    async def update_filters(self, **changes: Any) -> Optional[ReportsData]:
        self.store.set_report_filters(**changes)
        return await self.fetch_reports_data()

    async def change_date_range(self, start_date: date, end_date: date) -> Optional[ReportsData]:
        return await self.update_filters(start_date=start_date, end_date=end_date)

    async def change_period(self, period: str) -> Optional[ReportsData]:
        return await self.update_filters(period=period)

    async def filter_by_category(self, category: Optional[str] = None) -> Optional[ReportsData]:
        return await self.update_filters(category=category)

    async def filter_by_product(self, product_id: Optional[str] = None) -> Optional[ReportsData]:
        return await self.update_filters(product_id=product_id)

    async def refresh_data(self) -> Optional[ReportsData]:
        return await self.fetch_reports_data()

    def reset_filters(self) -> None:
        """Back to defaults; the dataset is dropped too, as is any fetch in flight."""
        self._sequence += 1
        self.store.reset_reports_state()

    # =========================================================================
    # Derived values
    # =========================================================================

    def get_statistics(self) -> Optional[dict]:
        data = self.data
        if data is None:
            return None

        sales = data.sales_data
        customers = data.customer_analytics
        growth = data.revenue_growth

        total_revenue = sum(point.revenue for point in sales)
        total_orders = sum(point.orders for point in sales)
        total_customers = sum(point.customers for point in sales)

        return {
            "totals": {
                "revenue": total_revenue,
                "orders": total_orders,
                "customers": total_customers,
                "unique_customers": customers.total_customers,
            },
            "averages": {
                "order_value": _ratio(total_revenue, total_orders),
                "daily_revenue": _ratio(total_revenue, len(sales)),
                "daily_orders": _ratio(total_orders, len(sales)),
                "customer_lifetime_value": customers.customer_lifetime_value,
            },
            "growth": {
                "revenue": growth.percentage,
                "is_positive": growth.percentage > 0,
                "current": growth.current,
                "previous": growth.previous,
            },
            "customers": {
                "total": customers.total_customers,
                "new": customers.new_customers,
                "returning": customers.returning_customers,
                "new_percentage": _ratio(customers.new_customers, customers.total_customers) * 100,
                "returning_percentage": _ratio(customers.returning_customers, customers.total_customers) * 100,
            },
        }

    def get_chart_data(self) -> Optional[dict]:
        data = self.data
        if data is None:
            return None

        return {
            "sales": [point.to_dict() for point in data.sales_data],
            "products": [product.to_dict() for product in data.top_selling_products],
            "revenue_comparison": [
                {"period": "دوره جاری", "current": data.revenue_growth.current, "previous": 0},
                {"period": "دوره قبل", "current": 0, "previous": data.revenue_growth.previous},
            ],
        }

    # =========================================================================
    # Export
    # =========================================================================

    async def _export(self, fmt: str, success_message: str, fallback: str) -> Optional[Path]:
        self.store.set_reports_exporting(True)
        try:
            if fmt == "pdf":
                payload = await self.api.reports.export_pdf(self.filters.to_params())
            else:
                payload = await self.api.reports.export_csv(self.filters.to_params())
            path = save_download(self.download_dir, f"{EXPORT_BASENAME}-{epoch_millis()}.{fmt}", payload)
        except (StorefrontError, OSError) as exc:
            message = error_message(exc, fallback)
            logger.error("Reports export failed: %s", message, exc_info=exc)
            self.notifier.error(message)
            return None
        finally:
            self.store.set_reports_exporting(False)

        self.notifier.success(success_message)
        return path

    async def export_to_csv(self) -> Optional[Path]:
        return await self._export("csv", "گزارش با موفقیت دانلود شد", "خطا در دانلود گزارش")

    async def export_to_pdf(self) -> Optional[Path]:
        return await self._export("pdf", "گزارش PDF با موفقیت دانلود شد", "خطا در دانلود گزارش PDF")
