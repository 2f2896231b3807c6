# Overview: In-memory admin data store shared by the comments and reports hooks.

"""
Admin Data Store

Holds, per admin domain, the fetched dataset, a loading flag, the last error
message and the current query filters. Report downloads set their own
exporting flag and leave the loading flag to the fetch. Nothing here is
persisted; filters return to their defaults through the reset actions.

Only the owning hook mutates a domain's state. Listeners registered with
subscribe() are told the action name after every change so a view can
re-render.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, Optional, TypeVar

from ..models import Comment, CommentFilters, CommentsData, ReportFilters, ReportsData

D = TypeVar("D")
F = TypeVar("F")

Listener = Callable[[str], None]


@dataclass
class DomainState(Generic[D, F]):
    filters: F
    data: Optional[D] = None
    loading: bool = False
    error: Optional[str] = None
    exporting: bool = False


@dataclass
class AdminStore:
    comments: DomainState[CommentsData, CommentFilters] = field(
        default_factory=lambda: DomainState(filters=CommentFilters())
    )
    reports: DomainState[ReportsData, ReportFilters] = field(
        default_factory=lambda: DomainState(filters=ReportFilters())
    )
    _listeners: list[Listener] = field(default_factory=list, repr=False)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, action: str) -> None:
        for listener in list(self._listeners):
            listener(action)

    # =========================================================================
    # Comments
    # =========================================================================

    def set_comments_data(self, data: CommentsData) -> None:
        self.comments.data = data
        self._emit("setCommentsData")

    def set_comments_loading(self, loading: bool) -> None:
        self.comments.loading = loading
        self._emit("setCommentsLoading")

    def set_comments_error(self, error: Optional[str]) -> None:
        self.comments.error = error
        self._emit("setCommentsError")

    def set_comment_filters(self, **changes: Any) -> None:
        self.comments.filters = self.comments.filters.updated(**changes)
        self._emit("setCommentFilters")

    def _map_comments(self, comment_ids: set[str], fn: Callable[[Comment], Comment]) -> None:
        data = self.comments.data
        if data is None:
            return
        data.comments = [fn(c) if c.id in comment_ids else c for c in data.comments]

    def update_comment_status(self, comment_id: str, status: str) -> None:
        self._map_comments({comment_id}, lambda c: c.with_status(status))
        self._emit("updateCommentStatus")

    def update_comment(self, comment_id: str, partial: dict) -> None:
        self._map_comments({comment_id}, lambda c: c.merged(partial))
        self._emit("updateComment")

    def delete_comment(self, comment_id: str) -> None:
        data = self.comments.data
        if data is not None:
            data.comments = [c for c in data.comments if c.id != comment_id]
        self._emit("deleteComment")

    def add_comment_reply(self, parent_id: str, reply: Comment) -> None:
        # Replies are appended as their own rows
        if reply.parent_comment is None:
            reply = replace(reply, parent_comment=parent_id, is_reply=True)
        data = self.comments.data
        if data is not None:
            data.comments = [*data.comments, reply]
        self._emit("addCommentReply")

    def bulk_update_comments(self, comment_ids: list[str], partial: dict) -> None:
        self._map_comments(set(comment_ids), lambda c: c.merged(partial))
        self._emit("bulkUpdateComments")

    def set_moderation_settings(self, settings: dict) -> None:
        data = self.comments.data
        if data is not None:
            data.moderation_settings = settings
        self._emit("setModerationSettings")

    def reset_comments_state(self) -> None:
        self.comments = DomainState(filters=CommentFilters())
        self._emit("resetCommentsState")

    # =========================================================================
    # Reports
    # =========================================================================

    def set_reports_data(self, data: ReportsData) -> None:
        self.reports.data = data
        self._emit("setReportsData")

    def set_reports_loading(self, loading: bool) -> None:
        self.reports.loading = loading
        self._emit("setReportsLoading")

    def set_reports_error(self, error: Optional[str]) -> None:
        self.reports.error = error
        self._emit("setReportsError")

    def set_reports_exporting(self, exporting: bool) -> None:
        self.reports.exporting = exporting
        self._emit("setReportsExporting")

    def set_report_filters(self, **changes: Any) -> None:
        self.reports.filters = self.reports.filters.updated(**changes)
        self._emit("setReportFilters")

    def reset_reports_state(self) -> None:
        self.reports = DomainState(filters=ReportFilters())
        self._emit("resetReportsState")
