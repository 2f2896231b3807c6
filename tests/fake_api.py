# Overview: In-process stand-in for the storefront REST API, built as a Flask app.
#
# The client under test talks to it through FlaskTransport, which hands each
# httpx request to the Flask test client. No sockets are opened.

from __future__ import annotations

import copy
import secrets
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Dict, List, Optional, Tuple

import httpx
from flask import Blueprint, Flask, g, jsonify, request


PASSWORD = "Secret123!"


def make_user(email: str, *, is_admin: bool = False, **extra) -> Dict[str, Any]:
    user = {
        "_id": f"u-{email.split('@')[0]}",
        "firstName": "سارا",
        "lastName": "احمدی",
        "email": email,
        "phone": "09120000000",
        "role": "admin" if is_admin else "user",
        "isActive": True,
        "isAdmin": is_admin,
        "address": {
            "street": "خیابان ولیعصر",
            "city": "تهران",
            "state": "تهران",
            "postalCode": "1234567890",
            "country": "ایران",
        },
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
    }
    user.update(extra)
    return user


def make_comment(
    comment_id: str,
    *,
    status: str = "pending",
    content: str = "محصول خوبی بود",
    first_name: str = "علی",
    email: str = "ali@example.com",
    product_name: str = "پیراهن",
    rating: Optional[int] = 4,
    likes: int = 0,
    created_at: str = "2024-05-01T10:00:00Z",
) -> Dict[str, Any]:
    return {
        "_id": comment_id,
        "content": content,
        "author": {
            "_id": f"a-{comment_id}",
            "firstName": first_name,
            "lastName": "رضایی",
            "email": email,
            "isVerified": True,
        },
        "product": {"_id": f"p-{comment_id}", "name": product_name, "slug": "shirt", "images": []},
        "rating": rating,
        "status": status,
        "replies": [],
        "isReply": False,
        "metadata": {"ipAddress": "127.0.0.1", "userAgent": "pytest"},
        "sentiment": {"score": 0.5, "label": "positive", "confidence": 0.9},
        "moderationFlags": {"isSpam": False, "isOffensive": False, "isReported": False, "reportCount": 0},
        "engagement": {"likes": likes, "dislikes": 0, "reports": 0, "helpfulVotes": 0},
        "tags": [],
        "createdAt": created_at,
        "updatedAt": created_at,
    }


def make_reports(**overrides) -> Dict[str, Any]:
    data = {
        "salesData": [
            {"date": "2024-05-01", "revenue": 1000, "orders": 4, "customers": 3},
            {"date": "2024-05-02", "revenue": 500, "orders": 1, "customers": 1},
        ],
        "productAnalytics": [
            {"_id": "p1", "name": "پیراهن", "totalSold": 5, "revenue": 1500,
             "viewCount": 100, "conversionRate": 5, "category": "پوشاک"},
        ],
        "customerAnalytics": {
            "totalCustomers": 4,
            "newCustomers": 1,
            "returningCustomers": 3,
            "averageOrderValue": 300,
            "customerLifetimeValue": 1200,
        },
        "revenueGrowth": {"current": 1500, "previous": 1000, "percentage": 50},
        "topSellingProducts": [
            {"_id": "p1", "name": "پیراهن", "totalSold": 5, "revenue": 1500,
             "viewCount": 100, "conversionRate": 5, "category": "پوشاک"},
        ],
        "recentTransactions": [],
    }
    data.update(overrides)
    return data


@dataclass
class FakeBackend:
    """Server-side state plus knobs the tests turn."""
    accounts: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    tokens: Dict[str, str] = field(default_factory=dict)
    comments: List[Dict[str, Any]] = field(default_factory=list)
    trash: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    reports: Dict[str, Any] = field(default_factory=make_reports)
    moderation_settings: Dict[str, Any] = field(default_factory=lambda: {"autoModeration": {"enabled": False}})
    # (METHOD, path) -> (status, message): forced failures
    failures: Dict[Tuple[str, str], Tuple[int, str]] = field(default_factory=dict)
    calls: List[Tuple[str, str, Dict[str, Any]]] = field(default_factory=list)

    def add_account(self, email: str, password: str = PASSWORD, **user_fields) -> Dict[str, Any]:
        user = make_user(email, **user_fields)
        self.accounts[email] = {"password": password, "user": user}
        return user

    def issue_token(self, email: str) -> str:
        token = secrets.token_hex(16)
        self.tokens[token] = email
        return token

    def fail(self, method: str, path: str, status: int = 500, message: str = "خطای سرور") -> None:
        self.failures[(method, path)] = (status, message)

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [path for m, path, _ in self.calls if method is None or m == method]

    def last_params(self, path: str) -> Dict[str, Any]:
        for _, called, params in reversed(self.calls):
            if called == path:
                return params
        return {}

    def find_comment(self, comment_id: str) -> Optional[Dict[str, Any]]:
        for comment in self.comments:
            if comment["_id"] == comment_id:
                return comment
        return None


def require_auth(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        backend: FakeBackend = g.backend
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"message": "دسترسی غیرمجاز، توکن موجود نیست"}), 401

        email = backend.tokens.get(auth_header.split(" ", 1)[1])
        if email is None:
            return jsonify({"message": "توکن نامعتبر است"}), 401

        g.account = backend.accounts[email]
        return f(*args, **kwargs)
    return decorated_function


# =============================================================================
# /api/auth
# =============================================================================

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    backend: FakeBackend = g.backend
    data = request.get_json()
    if data["email"] in backend.accounts:
        return jsonify({"message": "کاربری با این ایمیل یا شماره تلفن قبلاً ثبت شده است"}), 400

    user = backend.add_account(
        data["email"],
        data["password"],
        firstName=data["firstName"],
        lastName=data["lastName"],
        phone=data["phone"],
    )
    return jsonify({
        "message": "ثبت‌نام با موفقیت انجام شد",
        "token": backend.issue_token(data["email"]),
        "user": user,
    }), 201


@auth_bp.post("/login")
def login_route():
    backend: FakeBackend = g.backend
    data = request.get_json()
    account = backend.accounts.get(data.get("email"))
    if account is None or account["password"] != data.get("password"):
        return jsonify({"message": "ایمیل یا رمز عبور نادرست است"}), 401

    return jsonify({
        "message": "ورود با موفقیت انجام شد",
        "token": backend.issue_token(data["email"]),
        "user": account["user"],
    }), 200


@auth_bp.get("/profile")
@require_auth
def profile_route():
    return jsonify({"user": g.account["user"]}), 200


@auth_bp.put("/profile")
@require_auth
def update_profile_route():
    g.account["user"].update(request.get_json())
    return jsonify({"message": "پروفایل با موفقیت به‌روزرسانی شد", "user": g.account["user"]}), 200


@auth_bp.put("/change-password")
@require_auth
def change_password_route():
    data = request.get_json()
    if data.get("currentPassword") != g.account["password"]:
        return jsonify({"message": "رمز عبور فعلی نادرست است"}), 400
    g.account["password"] = data["newPassword"]
    return jsonify({"message": "رمز عبور با موفقیت تغییر کرد"}), 200


# =============================================================================
# /api/admin/comments
# =============================================================================

comments_bp = Blueprint("comments", __name__, url_prefix="/api/admin/comments")


@comments_bp.get("")
@require_auth
def list_comments_route():
    # Deliberately ignores every filter: the client must cope
    backend: FakeBackend = g.backend
    return jsonify({
        "comments": copy.deepcopy(backend.comments),
        "analytics": {"totalComments": len(backend.comments)},
        "moderationSettings": backend.moderation_settings,
    }), 200


@comments_bp.post("")
@require_auth
def create_comment_route():
    backend: FakeBackend = g.backend
    data = request.get_json()
    comment = make_comment(f"c{len(backend.comments) + 100}", content=data["content"], status="approved")
    if data.get("parentCommentId"):
        comment["parentComment"] = data["parentCommentId"]
        comment["isReply"] = True
    backend.comments.append(comment)
    return jsonify({"comment": comment}), 201


@comments_bp.get("/<comment_id>")
@require_auth
def get_comment_route(comment_id):
    comment = g.backend.find_comment(comment_id)
    if comment is None:
        return jsonify({"message": "نظر یافت نشد"}), 404
    return jsonify({"comment": comment}), 200


@comments_bp.put("/<comment_id>")
@require_auth
def update_comment_route(comment_id):
    comment = g.backend.find_comment(comment_id)
    if comment is None:
        return jsonify({"message": "نظر یافت نشد"}), 404
    comment.update(request.get_json())
    return jsonify({"comment": comment}), 200


@comments_bp.delete("/<comment_id>")
@require_auth
def delete_comment_route(comment_id):
    backend: FakeBackend = g.backend
    trashed = backend.find_comment(comment_id)
    backend.comments = [c for c in backend.comments if c["_id"] != comment_id]
    if trashed is not None and not request.get_json().get("permanent"):
        backend.trash[comment_id] = trashed
    return jsonify({"message": "deleted"}), 200


@comments_bp.patch("/<comment_id>/restore")
@require_auth
def restore_comment_route(comment_id):
    backend: FakeBackend = g.backend
    comment = backend.trash.pop(comment_id, None)
    if comment is None:
        return jsonify({"message": "نظر در زباله‌دان یافت نشد"}), 404
    backend.comments.append(comment)
    return jsonify({"comment": comment}), 200


def _set_status(comment_id: str, status: str):
    comment = g.backend.find_comment(comment_id)
    if comment is None:
        return jsonify({"message": "نظر یافت نشد"}), 404
    comment["status"] = status
    return jsonify({"comment": comment}), 200


@comments_bp.patch("/<comment_id>/approve")
@require_auth
def approve_comment_route(comment_id):
    return _set_status(comment_id, "approved")


@comments_bp.patch("/<comment_id>/reject")
@require_auth
def reject_comment_route(comment_id):
    return _set_status(comment_id, "rejected")


@comments_bp.patch("/<comment_id>/spam")
@require_auth
def spam_comment_route(comment_id):
    return _set_status(comment_id, "spam")


@comments_bp.post("/bulk")
@require_auth
def bulk_route():
    backend: FakeBackend = g.backend
    data = request.get_json()
    ids = set(data["commentIds"])
    if data["action"] == "delete":
        backend.comments = [c for c in backend.comments if c["_id"] not in ids]
    return jsonify({"processed": len(ids)}), 200


@comments_bp.get("/analytics")
@require_auth
def analytics_route():
    return jsonify({"analytics": {"totalComments": len(g.backend.comments)}}), 200


@comments_bp.post("/<comment_id>/analyze-sentiment")
@require_auth
def sentiment_route(comment_id):
    return jsonify({"sentiment": {"score": -0.4, "label": "negative", "confidence": 0.8}}), 200


@comments_bp.post("/spam-detection")
@require_auth
def spam_detection_route():
    return jsonify({"detectedSpam": 2}), 200


@comments_bp.get("/user/<user_id>")
@require_auth
def user_history_route(user_id):
    return jsonify({"comments": [], "page": request.args.get("page", type=int)}), 200


@comments_bp.get("/moderation-settings")
@require_auth
def get_settings_route():
    return jsonify({"settings": g.backend.moderation_settings}), 200


@comments_bp.put("/moderation-settings")
@require_auth
def update_settings_route():
    g.backend.moderation_settings.update(request.get_json())
    return jsonify({"settings": g.backend.moderation_settings}), 200


@comments_bp.post("/auto-moderation/toggle")
@require_auth
def toggle_route():
    g.backend.moderation_settings["autoModeration"]["enabled"] = request.get_json()["enabled"]
    return jsonify({"message": "ok"}), 200


@comments_bp.get("/export/<fmt>")
@require_auth
def export_comments_route(fmt):
    return b"id,status\nc1,pending\n", 200, {"Content-Type": "text/csv"}


# =============================================================================
# /api/reports
# =============================================================================

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/analytics")
@require_auth
def analytics_report_route():
    return jsonify(g.backend.reports), 200


@reports_bp.get("/export/csv")
@require_auth
def export_csv_route():
    return "date,revenue\n2024-05-01,1000\n".encode("utf-8"), 200, {"Content-Type": "text/csv"}


@reports_bp.get("/export/pdf")
@require_auth
def export_pdf_route():
    return b"%PDF-1.4 fake", 200, {"Content-Type": "application/pdf"}


def create_fake_api(backend: FakeBackend) -> Flask:
    app = Flask(__name__)
    app.config["TESTING"] = True

    app.register_blueprint(auth_bp)
    app.register_blueprint(comments_bp)
    app.register_blueprint(reports_bp)

    @app.before_request
    def record_and_inject_failures():
        g.backend = backend
        backend.calls.append((request.method, request.path, request.args.to_dict()))
        failure = backend.failures.get((request.method, request.path))
        if failure is not None:
            status, message = failure
            return jsonify({"message": message}), status
        return None

    return app


class FlaskTransport(httpx.AsyncBaseTransport):
    """Serves httpx requests from a Flask app's test client."""

    def __init__(self, app: Flask):
        self.app = app

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        headers = {
            key: value
            for key, value in request.headers.items()
            if key.lower() not in ("host", "content-length", "transfer-encoding")
        }
        body = await request.aread()
        with self.app.test_client() as client:
            response = client.open(
                request.url.path,
                method=request.method,
                headers=headers,
                data=body,
                query_string=request.url.query.decode("ascii"),
            )
            return httpx.Response(
                status_code=response.status_code,
                headers=list(response.headers.items()),
                content=response.get_data(),
                request=request,
            )
