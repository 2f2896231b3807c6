from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any

from ..errors import ValidationError


COMMENT_STATUSES = ("pending", "approved", "rejected", "spam")
STATUS_FILTERS = ("all",) + COMMENT_STATUSES
SORT_FIELDS = ("createdAt", "updatedAt", "rating", "likes", "replies")
SORT_ORDERS = ("asc", "desc")
BULK_ACTIONS = ("approve", "reject", "delete", "mark_spam", "assign_tag", "change_status")
EXPORT_FORMATS = ("csv", "excel", "pdf")


@dataclass
class CommentAuthor:
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    avatar: str | None = None
    is_verified: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "CommentAuthor":
        return cls(
            id=data.get("_id", data.get("id", "")),
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            email=data.get("email", ""),
            avatar=data.get("avatar"),
            is_verified=bool(data.get("isVerified", False)),
        )

    def to_dict(self):
        return {
            "_id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "avatar": self.avatar,
            "isVerified": self.is_verified,
        }


@dataclass
class CommentProduct:
    id: str
    name: str = ""
    slug: str = ""
    images: list[dict] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "CommentProduct":
        return cls(
            id=data.get("_id", data.get("id", "")),
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            images=list(data.get("images", [])),
        )

    def to_dict(self):
        return {"_id": self.id, "name": self.name, "slug": self.slug, "images": self.images}


_COMMENT_FIELDS = {
    "_id", "content", "author", "product", "rating", "status", "parentComment",
    "replies", "isReply", "sentiment", "engagement", "tags", "createdAt", "updatedAt",
}


@dataclass
class Comment:
    """
    A product review or reply in the moderation queue.

    Fields the admin views do not use (metadata, moderationFlags,
    attachments, editHistory, ...) are carried untouched in `extra`.
    """
    id: str
    content: str
    author: CommentAuthor
    status: str = "pending"
    product: CommentProduct | None = None
    rating: float | None = None
    parent_comment: str | None = None
    replies: list[dict] = field(default_factory=list)
    is_reply: bool = False
    sentiment: dict[str, Any] | None = None
    engagement: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def likes(self) -> int | None:
        return self.engagement.get("likes")

    @property
    def reply_count(self) -> int:
        return len(self.replies)

    @classmethod
    def from_dict(cls, data: dict) -> "Comment":
        product = data.get("product")
        return cls(
            id=data.get("_id", data.get("id", "")),
            content=data.get("content", ""),
            author=CommentAuthor.from_dict(data.get("author") or {}),
            status=data.get("status", "pending"),
            product=CommentProduct.from_dict(product) if product else None,
            rating=data.get("rating"),
            parent_comment=data.get("parentComment"),
            replies=list(data.get("replies") or []),
            is_reply=bool(data.get("isReply", False)),
            sentiment=data.get("sentiment"),
            engagement=dict(data.get("engagement") or {}),
            tags=list(data.get("tags") or []),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
            extra={k: v for k, v in data.items() if k not in _COMMENT_FIELDS and k != "id"},
        )

    def to_dict(self):
        data = dict(self.extra)
        data.update({
            "_id": self.id,
            "content": self.content,
            "author": self.author.to_dict(),
            "product": self.product.to_dict() if self.product else None,
            "rating": self.rating,
            "status": self.status,
            "parentComment": self.parent_comment,
            "replies": self.replies,
            "isReply": self.is_reply,
            "sentiment": self.sentiment,
            "engagement": self.engagement,
            "tags": self.tags,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        })
        return data

    def merged(self, partial: dict) -> "Comment":
        data = self.to_dict()
        data.update(partial)
        return Comment.from_dict(data)

    def with_status(self, status: str) -> "Comment":
        return replace(self, status=status)


@dataclass
class CommentFilters:
    status: str = "all"
    search: str = ""
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    page: int = 1
    limit: int = 20
    product: str | None = None
    author: str | None = None
    rating: int | None = None
    sentiment: str | None = None
    has_replies: bool | None = None
    is_reply: bool | None = None
    start_date: date | None = None
    end_date: date | None = None
    tags: list[str] | None = None
    is_spam: bool | None = None
    is_offensive: bool | None = None
    is_reported: bool | None = None

    def __post_init__(self):
        if self.status not in STATUS_FILTERS:
            raise ValidationError(f"status must be one of {', '.join(STATUS_FILTERS)}")
        if self.sort_by not in SORT_FIELDS:
            raise ValidationError(f"sort_by must be one of {', '.join(SORT_FIELDS)}")
        if self.sort_order not in SORT_ORDERS:
            raise ValidationError("sort_order must be asc or desc")
        if self.page < 1 or self.limit < 1:
            raise ValidationError("page and limit must be positive")

    def updated(self, **changes) -> "CommentFilters":
        return replace(self, **changes)

    def to_params(self) -> dict[str, Any]:
        """Query parameters in the names the comments endpoint expects."""
        return {
            "page": self.page,
            "limit": self.limit,
            "status": self.status,
            "search": self.search,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order,
            "product": self.product,
            "author": self.author,
            "rating": self.rating,
            "sentiment": self.sentiment,
            "hasReplies": self.has_replies,
            "isReply": self.is_reply,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "tags": ",".join(self.tags) if self.tags else None,
            "isSpam": self.is_spam,
            "isOffensive": self.is_offensive,
            "isReported": self.is_reported,
        }


@dataclass
class CommentsData:
    comments: list[Comment] = field(default_factory=list)
    analytics: dict[str, Any] | None = None
    moderation_settings: dict[str, Any] | None = None
    # Server-reported page count, when the server paginates
    total_pages: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "CommentsData":
        pagination = data.get("pagination") or {}
        return cls(
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
            analytics=data.get("analytics"),
            moderation_settings=data.get("moderationSettings"),
            total_pages=pagination.get("totalPages"),
        )
