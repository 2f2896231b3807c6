# storefront/__init__.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

import httpx

from .api import APIClient
from .config import Config
from .notifications import ToastCenter
from .services import AdminStore, AuthService, CartService, CommentsService, ReportsService
from .storage import KeyValueStore, SQLStore


@dataclass
class Storefront:
    """
    Everything the UI layer talks to, built once at start-up.

    Containers are passed around explicitly; there are no module-level
    singletons.
    """
    config: type[Config]
    store: KeyValueStore
    api: APIClient
    notifier: ToastCenter
    auth: AuthService
    cart: CartService
    admin_store: AdminStore
    comments: CommentsService
    reports: ReportsService
    # Set when create_storefront opened the store itself
    owns_store: bool = field(default=False, repr=False)

    async def initialize(self) -> "Storefront":
        await self.auth.initialize()
        return self

    async def aclose(self) -> None:
        await self.api.aclose()
        if self.owns_store:
            self.store.dispose()

    async def __aenter__(self) -> "Storefront":
        return await self.initialize()

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def create_storefront(
    config: Optional[type[Config]] = None,
    *,
    store: Optional[KeyValueStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    notifier: Optional[ToastCenter] = None,
    on_unauthorized: Optional[Callable[[], None]] = None,
) -> Storefront:
    config = config or Config
    owns_store = store is None
    if store is None:
        store = SQLStore(config.STORAGE_URL)
    notifier = notifier or ToastCenter(max_history=config.TOAST_HISTORY)

    api = APIClient(
        config.API_BASE_URL,
        store,
        timeout=config.REQUEST_TIMEOUT,
        transport=transport,
    )
    auth = AuthService(api, store)

    def session_expired() -> None:
        # Store keys are already gone; drop the in-memory copy too
        auth.discard_session()
        if on_unauthorized is not None:
            on_unauthorized()

    api.on_unauthorized = session_expired

    admin_store = AdminStore()

    return Storefront(
        config=config,
        store=store,
        api=api,
        notifier=notifier,
        auth=auth,
        cart=CartService(store),
        admin_store=admin_store,
        comments=CommentsService(
            api,
            admin_store,
            notifier,
            client_side_filtering=config.COMMENTS_CLIENT_FILTERING,
            download_dir=config.DOWNLOAD_DIR,
        ),
        reports=ReportsService(api, admin_store, notifier, download_dir=config.DOWNLOAD_DIR),
        owns_store=owns_store,
    )


__all__ = ["Config", "Storefront", "create_storefront"]
