from .admin_store import AdminStore
from .auth_service import AuthService, AuthStatus
from .cart_service import CartService
from .comments_service import CommentsService, ModerationOutcome, ModerationResult
from .reports_service import ReportsService

__all__ = [
    "AdminStore",
    "AuthService",
    "AuthStatus",
    "CartService",
    "CommentsService",
    "ModerationOutcome",
    "ModerationResult",
    "ReportsService",
]
