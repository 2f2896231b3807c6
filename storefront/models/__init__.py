# Overview: Data types held by the containers and admin hooks, plus the local store table.

from .storage import Base, StoredValue
from .user import Address, User
from .cart import CartItem
from .comments import (
    Comment,
    CommentAuthor,
    CommentProduct,
    CommentFilters,
    CommentsData,
    COMMENT_STATUSES,
)
from .reports import (
    SalesPoint,
    ProductAnalytics,
    CustomerAnalytics,
    RevenueGrowth,
    ReportsData,
    ReportFilters,
    PERIODS,
)

__all__ = [
    "Base",
    "StoredValue",
    "Address",
    "User",
    "CartItem",
    "Comment",
    "CommentAuthor",
    "CommentProduct",
    "CommentFilters",
    "CommentsData",
    "COMMENT_STATUSES",
    "SalesPoint",
    "ProductAnalytics",
    "CustomerAnalytics",
    "RevenueGrowth",
    "ReportsData",
    "ReportFilters",
    "PERIODS",
]
