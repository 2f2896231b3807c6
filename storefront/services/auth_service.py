# Overview: Auth state container; owns the current session and mirrors it to the persistent store.

"""
Authentication State

Single source of truth for "who is logged in" for the lifetime of the
process.

States:
- UNKNOWN: nothing attempted yet
- VALIDATING: a stored token+user was found and is being checked against
  the profile endpoint
- AUTHENTICATED: token and user are set
- ANONYMOUS: no stored session, validation failed, or logged out

INVARIANT: token and user are set and cleared together. When validation
fails both are dropped from memory and from the store in one step.

The server is never asked to validate credentials locally beyond presence;
errors from login/register are propagated to the caller untouched.
"""

from __future__ import annotations

import enum
import json
import logging
from typing import Any

from ..api import APIClient
from ..errors import StorefrontError, ValidationError
from ..models import User
from ..storage import TOKEN_KEY, USER_KEY, KeyValueStore


logger = logging.getLogger(__name__)


class AuthStatus(enum.Enum):
    UNKNOWN = "unknown"
    VALIDATING = "validating"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class AuthService:
    def __init__(self, api: APIClient, store: KeyValueStore):
        self.api = api
        self.store = store
        self.user: User | None = None
        self.token: str | None = None
        self.status = AuthStatus.UNKNOWN
        self._in_flight = 0

    @property
    def is_loading(self) -> bool:
        """True while validating a restored session or while login/register is in flight."""
        return self.status is AuthStatus.VALIDATING or self._in_flight > 0

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.is_admin)

    async def initialize(self) -> AuthStatus:
        """
        Restore a stored session and confirm it with the server.

        Any failure (401, network, unreadable stored user) clears the session
        from memory and from the store.
        """
        stored_token = self.store.get(TOKEN_KEY)
        stored_user = self.store.get(USER_KEY)

        if not (stored_token and stored_user):
            self.status = AuthStatus.ANONYMOUS
            return self.status

        self.status = AuthStatus.VALIDATING
        self.token = stored_token
        try:
            self.user = User.from_dict(json.loads(stored_user))
            response = await self.api.auth.get_profile()
            self._set_user(User.from_dict(response["user"]))
        except (StorefrontError, ValueError, KeyError, TypeError):
            logger.info("Stored session could not be validated; signing out")
            self._clear()
            return self.status

        self.status = AuthStatus.AUTHENTICATED
        return self.status

    async def login(self, email: str, password: str) -> User:
        if not email or not password:
            raise ValidationError("email and password required")

        self._in_flight += 1
        try:
            response = await self.api.auth.login(email, password)
        finally:
            self._in_flight -= 1

        self._start_session(response)
        logger.info("Signed in as %s", self.user.email)
        return self.user

    async def register(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        phone: str,
        password: str,
    ) -> User:
        """Password confirmation is the caller's job."""
        self._in_flight += 1
        try:
            response = await self.api.auth.register({
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "phone": phone,
                "password": password,
            })
        finally:
            self._in_flight -= 1

        self._start_session(response)
        logger.info("Registered and signed in as %s", self.user.email)
        return self.user

    def logout(self) -> None:
        """Local only; the server is not called."""
        self._clear()
        logger.info("Signed out")

    def update_user(self, partial: dict[str, Any] | None = None, **fields: Any) -> User | None:
        """
        Shallow-merge fields into the cached user and re-persist it.

        Accepts wire names (firstName) or attribute names (first_name).
        No-op when nobody is signed in.
        """
        if self.user is None:
            return None
        changes = dict(partial or {})
        changes.update(fields)
        self._set_user(self.user.merged(changes))
        return self.user

    async def update_profile(self, **fields: Any) -> User:
        """Save profile changes on the server and adopt the returned copy."""
        response = await self.api.auth.update_profile(fields)
        self._set_user(User.from_dict(response["user"]))
        return self.user

    async def change_password(self, current_password: str, new_password: str) -> str:
        response = await self.api.auth.change_password(current_password, new_password)
        return response.get("message", "")

    def discard_session(self) -> None:
        """Drop the in-memory session after the store was already cleared elsewhere."""
        self.token = None
        self.user = None
        self.status = AuthStatus.ANONYMOUS

    def _start_session(self, response: dict) -> None:
        token = response["token"]
        user = User.from_dict(response["user"])
        self.token = token
        self.store.set(TOKEN_KEY, token)
        self._set_user(user)
        self.status = AuthStatus.AUTHENTICATED

    def _set_user(self, user: User) -> None:
        self.user = user
        self.store.set(USER_KEY, json.dumps(user.to_dict(), ensure_ascii=False))

    def _clear(self) -> None:
        self.store.remove(TOKEN_KEY)
        self.store.remove(USER_KEY)
        self.discard_session()
