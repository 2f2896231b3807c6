# Overview: Admin comments hook; moderation, CRUD, bulk actions, analytics and export.

"""
Comment Moderation

Orchestrates remote calls for the moderation queue and keeps a derived
view (filtered, sorted, paginated) over the fetched comments.

FILTERING AUTHORITY: the filters are always sent to the server. When
client_side_filtering is on (the default), status/search/sort and
pagination are applied again locally over whatever the server returned, so
a server that ignores some parameters still yields a correct view. When it
is off the server page is shown as returned. Statistics are always computed
over the full fetched collection, never the paginated slice.

STALE RESPONSES: every load takes a sequence number. A response is applied
only if no newer load was issued meanwhile; the last request issued wins,
not the last response to arrive.

OPTIMISTIC MODERATION: approve/reject/spam on a single comment patch the
local status before the call. On failure the previous status is restored
and the error carries a ROLLED_BACK result.

Every failing operation logs, shows a toast with the server's message (or a
Persian fallback) and raises AdminOperationError.
"""

from __future__ import annotations

import enum
import functools
import locale
import logging
import math
from collections import Counter
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from ..api import APIClient
from ..downloads import save_download
from ..errors import AdminOperationError, StorefrontError, ValidationError, error_message
from ..models import COMMENT_STATUSES, Comment, CommentFilters, CommentsData
from ..models.comments import BULK_ACTIONS, EXPORT_FORMATS
from ..notifications import ToastCenter
from ..time_utils import today
from .admin_store import AdminStore


logger = logging.getLogger(__name__)

# Bulk action -> status applied locally after the server confirms
BULK_STATUS = {
    "approve": "approved",
    "reject": "rejected",
    "mark_spam": "spam",
}


class ModerationOutcome(enum.Enum):
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True)
class ModerationResult:
    comment_id: str
    status: str
    previous_status: Optional[str]
    outcome: ModerationOutcome

    @property
    def confirmed(self) -> bool:
        return self.outcome is ModerationOutcome.CONFIRMED


def _sort_value(comment: Comment, sort_by: str) -> Any:
    if sort_by == "createdAt":
        return comment.created_at
    if sort_by == "updatedAt":
        return comment.updated_at
    if sort_by == "rating":
        return comment.rating
    if sort_by == "likes":
        return comment.likes
    if sort_by == "replies":
        return comment.reply_count
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compare_values(a: Any, b: Any) -> int:
    """
    Strings by LC_COLLATE collation, numbers by difference, anything else equal.

    Python starts in the C locale, where strcoll is plain code point order;
    the CLI switches LC_COLLATE to the user's locale at start-up.
    """
    if isinstance(a, str) and isinstance(b, str):
        return locale.strcoll(a, b)
    if _is_number(a) and _is_number(b):
        return (a > b) - (a < b)
    return 0


def _matches_search(comment: Comment, term: str) -> bool:
    haystacks = [
        comment.content,
        comment.author.first_name,
        comment.author.last_name,
        comment.author.email,
    ]
    if comment.product is not None:
        haystacks.append(comment.product.name)
    return any(term in (text or "").lower() for text in haystacks)


def apply_comment_filters(comments: list[Comment], filters: CommentFilters) -> list[Comment]:
    """Status, search and sort over an already-fetched collection (no pagination)."""
    result = list(comments)

    if filters.status != "all":
        result = [c for c in result if c.status == filters.status]

    if filters.search:
        term = filters.search.lower()
        result = [c for c in result if _matches_search(c, term)]

    direction = 1 if filters.sort_order == "asc" else -1

    def compare(a: Comment, b: Comment) -> int:
        return direction * _compare_values(
            _sort_value(a, filters.sort_by),
            _sort_value(b, filters.sort_by),
        )

    result.sort(key=functools.cmp_to_key(compare))
    return result


class CommentsService:
    def __init__(
        self,
        api: APIClient,
        store: AdminStore,
        notifier: ToastCenter,
        *,
        client_side_filtering: bool = True,
        download_dir: str = ".",
    ):
        self.api = api
        self.store = store
        self.notifier = notifier
        self.client_side_filtering = client_side_filtering
        self.download_dir = download_dir
        self._sequence = 0

    # =========================================================================
    # State and derived view
    # =========================================================================

    @property
    def data(self) -> Optional[CommentsData]:
        return self.store.comments.data

    @property
    def loading(self) -> bool:
        return self.store.comments.loading

    @property
    def error(self) -> Optional[str]:
        return self.store.comments.error

    @property
    def filters(self) -> CommentFilters:
        return self.store.comments.filters

    @property
    def analytics(self) -> Optional[dict]:
        return self.data.analytics if self.data else None

    @property
    def moderation_settings(self) -> Optional[dict]:
        return self.data.moderation_settings if self.data else None

    @property
    def all_comments(self) -> list[Comment]:
        return list(self.data.comments) if self.data else []

    @property
    def filtered_comments(self) -> list[Comment]:
        if not self.client_side_filtering:
            return self.all_comments
        return apply_comment_filters(self.all_comments, self.filters)

    @property
    def comments(self) -> list[Comment]:
        """The page currently on screen."""
        if not self.client_side_filtering:
            return self.all_comments
        start = (self.filters.page - 1) * self.filters.limit
        return self.filtered_comments[start:start + self.filters.limit]

    @property
    def total_pages(self) -> int:
        if not self.client_side_filtering:
            if self.data and self.data.total_pages is not None:
                return self.data.total_pages
            return 1 if self.all_comments else 0
        return math.ceil(len(self.filtered_comments) / self.filters.limit)

    @property
    def has_comments(self) -> bool:
        return bool(self.all_comments)

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.all_comments

    @property
    def is_initial_load(self) -> bool:
        return self.loading and self.data is None

    @property
    def stats(self) -> dict:
        comments = self.all_comments
        total = len(comments)
        counts = Counter(c.status for c in comments)

        def percentage(count: int) -> float:
            return round(count / total * 100, 1) if total > 0 else 0.0

        result: dict[str, Any] = {"total": total}
        for status in COMMENT_STATUSES:
            result[status] = counts.get(status, 0)
        for status in COMMENT_STATUSES:
            result[f"{status}_percentage"] = percentage(counts.get(status, 0))
        return result

    # =========================================================================
    # Loading
    # =========================================================================

    def _fail(self, exc: BaseException, fallback: str, result: Any = None) -> AdminOperationError:
        message = error_message(exc, fallback)
        logger.error("Comments operation failed: %s", message, exc_info=exc)
        self.notifier.error(message)
        return AdminOperationError(message, result)

    async def load_comments(self, **overrides: Any) -> Optional[CommentsData]:
        """
        Fetch comments with the stored filters (overrides apply to this call only).

        Returns None when a newer load superseded this one.
        """
        query = self.filters.updated(**overrides)
        self._sequence += 1
        sequence = self._sequence

        self.store.set_comments_loading(True)
        self.store.set_comments_error(None)

        try:
            response = await self.api.comments.get_comments(query.to_params())
        except StorefrontError as exc:
            if sequence != self._sequence:
                logger.debug("Dropping failed comments load #%d (superseded)", sequence)
                return None
            self.store.set_comments_loading(False)
            error = self._fail(exc, "خطا در بارگذاری نظرات")
            self.store.set_comments_error(error.message)
            raise error from exc

        if sequence != self._sequence:
            logger.debug("Dropping comments response #%d (superseded by #%d)", sequence, self._sequence)
            return None

        data = CommentsData.from_dict(response)
        self.store.set_comments_data(data)
        self.store.set_comments_loading(False)
        return data

    async def refresh_data(self) -> Optional[CommentsData]:
        return await self.load_comments()

    async def _reload(self) -> None:
        try:
            await self.load_comments()
        except AdminOperationError:
            # Already recorded in store.error and toasted by load_comments
            pass

    def reset_state(self) -> None:
        # A load still in flight must not repopulate the cleared state
        self._sequence += 1
        self.store.reset_comments_state()

    # =========================================================================
    # CRUD
    # =========================================================================

    async def get_comment_by_id(self, comment_id: str) -> Comment:
        try:
            response = await self.api.comments.get_comment_by_id(comment_id)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در دریافت نظر") from exc
        return Comment.from_dict(response["comment"])

    async def create_comment(
        self,
        content: str,
        *,
        product_id: Optional[str] = None,
        parent_comment_id: Optional[str] = None,
        rating: Optional[int] = None,
    ) -> Comment:
        """Admin-authored comment or reply. Replies are added locally; others trigger a reload."""
        payload = {
            key: value
            for key, value in {
                "content": content,
                "productId": product_id,
                "parentCommentId": parent_comment_id,
                "rating": rating,
            }.items()
            if value is not None
        }
        try:
            response = await self.api.comments.create_comment(payload)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در ایجاد نظر") from exc

        comment = Comment.from_dict(response["comment"])
        if parent_comment_id:
            self.store.add_comment_reply(parent_comment_id, comment)
        else:
            await self._reload()

        self.notifier.success("نظر با موفقیت ایجاد شد")
        return comment

    async def update_comment(self, comment_id: str, update_data: dict) -> Comment:
        try:
            response = await self.api.comments.update_comment(comment_id, update_data)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در بروزرسانی نظر") from exc

        self.store.update_comment(comment_id, response["comment"])
        self.notifier.success("نظر با موفقیت بروزرسانی شد")
        return Comment.from_dict(response["comment"])

    async def delete_comment(self, comment_id: str, permanent: bool = False) -> None:
        try:
            await self.api.comments.delete_comment(comment_id, permanent)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در حذف نظر") from exc

        self.store.delete_comment(comment_id)
        self.notifier.success(f"نظر با موفقیت {'حذف' if permanent else 'به زباله‌دان منتقل'} شد")

    async def restore_comment(self, comment_id: str) -> None:
        """Bring a trashed comment back; it was dropped locally, so reload."""
        try:
            await self.api.comments.restore_comment(comment_id)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در بازیابی نظر") from exc

        await self._reload()
        self.notifier.success("نظر بازیابی شد")

    # =========================================================================
    # Moderation
    # =========================================================================

    def _find(self, comment_id: str) -> Optional[Comment]:
        for comment in self.all_comments:
            if comment.id == comment_id:
                return comment
        return None

    async def _moderate(
        self,
        comment_id: str,
        status: str,
        call: Callable[[], Awaitable[Any]],
        success_message: str,
        fallback: str,
    ) -> ModerationResult:
        existing = self._find(comment_id)
        previous_status = existing.status if existing else None

        self.store.update_comment_status(comment_id, status)
        try:
            await call()
        except StorefrontError as exc:
            if previous_status is not None:
                self.store.update_comment_status(comment_id, previous_status)
            result = ModerationResult(comment_id, status, previous_status, ModerationOutcome.ROLLED_BACK)
            raise self._fail(exc, fallback, result) from exc

        self.notifier.success(success_message)
        return ModerationResult(comment_id, status, previous_status, ModerationOutcome.CONFIRMED)

    async def approve_comment(self, comment_id: str, note: Optional[str] = None) -> ModerationResult:
        return await self._moderate(
            comment_id,
            "approved",
            lambda: self.api.comments.approve_comment(comment_id, note),
            "نظر تایید شد",
            "خطا در تایید نظر",
        )

    async def reject_comment(self, comment_id: str, reason: Optional[str] = None) -> ModerationResult:
        return await self._moderate(
            comment_id,
            "rejected",
            lambda: self.api.comments.reject_comment(comment_id, reason),
            "نظر رد شد",
            "خطا در رد نظر",
        )

    async def mark_as_spam(self, comment_id: str) -> ModerationResult:
        return await self._moderate(
            comment_id,
            "spam",
            lambda: self.api.comments.mark_as_spam(comment_id),
            "نظر به عنوان اسپم علامت‌گذاری شد",
            "خطا در علامت‌گذاری به عنوان اسپم",
        )

    async def perform_bulk_operation(
        self,
        action: str,
        comment_ids: list[str],
        data: Any = None,
    ) -> dict:
        """
        Run one action over many comments.

        approve/reject/mark_spam are patched locally once the server confirms;
        delete and any other action reload the collection instead.
        """
        if action not in BULK_ACTIONS:
            raise ValidationError(f"action must be one of {', '.join(BULK_ACTIONS)}")

        operation: dict[str, Any] = {"action": action, "commentIds": list(comment_ids)}
        if data is not None:
            operation["data"] = data

        try:
            response = await self.api.comments.bulk_operation(operation)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در انجام عملیات دسته‌ای") from exc

        status = BULK_STATUS.get(action)
        if status is not None:
            self.store.bulk_update_comments(comment_ids, {"status": status})
        else:
            await self._reload()

        self.notifier.success(f"عملیات دسته‌ای روی {len(comment_ids)} نظر انجام شد")
        return response

    # =========================================================================
    # Analytics, settings, export
    # =========================================================================

    async def get_comments_analytics(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        product_id: Optional[str] = None,
    ) -> dict:
        try:
            response = await self.api.comments.get_analytics(start_date, end_date, product_id)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در دریافت آمار نظرات") from exc
        return response.get("analytics") or {}

    async def analyze_comment_sentiment(self, comment_id: str) -> dict:
        try:
            response = await self.api.comments.analyze_sentiment(comment_id)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در تحلیل احساسات") from exc

        sentiment = response.get("sentiment")
        self.store.update_comment(comment_id, {"sentiment": sentiment})
        return sentiment

    async def get_moderation_settings(self) -> dict:
        try:
            response = await self.api.comments.get_moderation_settings()
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در دریافت تنظیمات نظارت") from exc
        return response.get("settings") or {}

    async def update_moderation_settings(self, settings: dict) -> dict:
        try:
            response = await self.api.comments.update_moderation_settings(settings)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در بروزرسانی تنظیمات نظارت") from exc

        updated = response.get("settings") or {}
        self.store.set_moderation_settings(updated)
        self.notifier.success("تنظیمات نظارت بروزرسانی شد")
        return updated

    async def toggle_auto_moderation(self, enabled: bool) -> None:
        try:
            await self.api.comments.toggle_auto_moderation(enabled)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در تغییر وضعیت نظارت خودکار") from exc
        self.notifier.success(f"نظارت خودکار {'فعال' if enabled else 'غیرفعال'} شد")

    async def run_spam_detection(self, comment_ids: Optional[list[str]] = None) -> dict:
        try:
            response = await self.api.comments.run_spam_detection(comment_ids)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در شناسایی اسپم") from exc

        if comment_ids:
            await self._reload()
        self.notifier.success(f"{response.get('detectedSpam', 0)} نظر اسپم شناسایی شد")
        return response

    async def get_user_comment_history(self, user_id: str, page: int = 1, limit: int = 20) -> dict:
        try:
            return await self.api.comments.get_user_comment_history(user_id, page, limit)
        except StorefrontError as exc:
            raise self._fail(exc, "خطا در دریافت تاریخچه نظرات کاربر") from exc

    async def export_comments(self, export_format: str, **overrides: Any) -> Path:
        """Download comments matching the filters as comments-<date>.<format>."""
        if export_format not in EXPORT_FORMATS:
            raise ValidationError(f"format must be one of {', '.join(EXPORT_FORMATS)}")

        query = self.filters.updated(**overrides)
        filename = f"comments-{today().isoformat()}.{export_format}"
        try:
            payload = await self.api.comments.export_comments(export_format, query.to_params())
            path = save_download(self.download_dir, filename, payload)
        except (StorefrontError, OSError) as exc:
            raise self._fail(exc, "خطا در خروجی گیری نظرات") from exc

        self.notifier.success("خروجی نظرات با موفقیت دانلود شد")
        return path

    # =========================================================================
    # Filters
    # =========================================================================

    def change_filters(self, **changes: Any) -> CommentFilters:
        self.store.set_comment_filters(**changes)
        return self.filters

    def reset_filters(self) -> CommentFilters:
        self.store.set_comment_filters(
            status="all",
            search="",
            sort_by="createdAt",
            sort_order="desc",
            page=1,
            limit=20,
        )
        return self.filters
