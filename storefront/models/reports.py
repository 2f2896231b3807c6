from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any

from ..errors import ValidationError
from ..time_utils import shift_months, today


PERIODS = ("daily", "weekly", "monthly", "yearly")


@dataclass
class SalesPoint:
    date: str
    revenue: float = 0
    orders: int = 0
    customers: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "SalesPoint":
        return cls(
            date=data.get("date", ""),
            revenue=data.get("revenue", 0),
            orders=data.get("orders", 0),
            customers=data.get("customers", 0),
        )

    def to_dict(self):
        return {"date": self.date, "revenue": self.revenue, "orders": self.orders, "customers": self.customers}


@dataclass
class ProductAnalytics:
    id: str
    name: str = ""
    total_sold: int = 0
    revenue: float = 0
    view_count: int = 0
    conversion_rate: float = 0
    category: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ProductAnalytics":
        return cls(
            id=data.get("_id", data.get("id", "")),
            name=data.get("name", ""),
            total_sold=data.get("totalSold", 0),
            revenue=data.get("revenue", 0),
            view_count=data.get("viewCount", 0),
            conversion_rate=data.get("conversionRate", 0),
            category=data.get("category", ""),
        )

    def to_dict(self):
        return {
            "_id": self.id,
            "name": self.name,
            "totalSold": self.total_sold,
            "revenue": self.revenue,
            "viewCount": self.view_count,
            "conversionRate": self.conversion_rate,
            "category": self.category,
        }


@dataclass
class CustomerAnalytics:
    total_customers: int = 0
    new_customers: int = 0
    returning_customers: int = 0
    average_order_value: float = 0
    customer_lifetime_value: float = 0

    @classmethod
    def from_dict(cls, data: dict) -> "CustomerAnalytics":
        return cls(
            total_customers=data.get("totalCustomers", 0),
            new_customers=data.get("newCustomers", 0),
            returning_customers=data.get("returningCustomers", 0),
            average_order_value=data.get("averageOrderValue", 0),
            customer_lifetime_value=data.get("customerLifetimeValue", 0),
        )


@dataclass
class RevenueGrowth:
    current: float = 0
    previous: float = 0
    percentage: float = 0

    @classmethod
    def from_dict(cls, data: dict) -> "RevenueGrowth":
        return cls(
            current=data.get("current", 0),
            previous=data.get("previous", 0),
            percentage=data.get("percentage", 0),
        )


@dataclass
class ReportsData:
    """Aggregate analytics for one date range; replaced wholesale on each fetch."""
    sales_data: list[SalesPoint] = field(default_factory=list)
    product_analytics: list[ProductAnalytics] = field(default_factory=list)
    customer_analytics: CustomerAnalytics = field(default_factory=CustomerAnalytics)
    revenue_growth: RevenueGrowth = field(default_factory=RevenueGrowth)
    top_selling_products: list[ProductAnalytics] = field(default_factory=list)
    recent_transactions: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ReportsData":
        return cls(
            sales_data=[SalesPoint.from_dict(p) for p in data.get("salesData") or []],
            product_analytics=[ProductAnalytics.from_dict(p) for p in data.get("productAnalytics") or []],
            customer_analytics=CustomerAnalytics.from_dict(data.get("customerAnalytics") or {}),
            revenue_growth=RevenueGrowth.from_dict(data.get("revenueGrowth") or {}),
            top_selling_products=[ProductAnalytics.from_dict(p) for p in data.get("topSellingProducts") or []],
            recent_transactions=list(data.get("recentTransactions") or []),
        )


def _default_start() -> date:
    return shift_months(today(), -1)


@dataclass
class ReportFilters:
    start_date: date = field(default_factory=_default_start)
    end_date: date = field(default_factory=today)
    period: str = "daily"
    category: str | None = None
    product_id: str | None = None

    def __post_init__(self):
        if self.period not in PERIODS:
            raise ValidationError(f"period must be one of {', '.join(PERIODS)}")
        if self.start_date > self.end_date:
            raise ValidationError("start_date must not be after end_date")

    def updated(self, **changes) -> "ReportFilters":
        return replace(self, **changes)

    def to_params(self) -> dict[str, Any]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "period": self.period,
            "category": self.category,
            "productId": self.product_id,
        }
