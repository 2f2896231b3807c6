# Overview: Persistent key-value store adapters used for session and cart state.

"""
Local Persistent Store

The auth and cart containers save their state here so it survives a restart.
Contract: get(key) -> str | None, set(key, value), remove(key). Each call is
independent; there is no transaction spanning calls.

Auth and cart own disjoint keys, so no locking is needed between them.
"""

from __future__ import annotations

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from .models.storage import Base, StoredValue


# Well-known keys
TOKEN_KEY = "token"
USER_KEY = "user"
ADMIN_TOKEN_KEY = "adminToken"
CART_KEY = "cart"

SESSION_KEYS = (ADMIN_TOKEN_KEY, TOKEN_KEY, USER_KEY)


class KeyValueStore:
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryStore(KeyValueStore):
    """Dict-backed store; contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SQLStore(KeyValueStore):
    """
    SQLAlchemy-backed store (SQLite file by default).

    The table is created on first use. Every call opens its own session and
    commits immediately.
    """

    def __init__(self, url: str, **engine_options):
        self.engine = create_engine(url, **engine_options)
        Base.metadata.create_all(self.engine)
        self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)

    def _session(self) -> Session:
        return self._sessions()

    def get(self, key: str) -> str | None:
        with self._session() as session:
            row = session.get(StoredValue, key)
            return row.value if row is not None else None

    def set(self, key: str, value: str) -> None:
        with self._session() as session:
            row = session.get(StoredValue, key)
            if row is None:
                session.add(StoredValue(key=key, value=value))
            else:
                row.value = value
            session.commit()

    def remove(self, key: str) -> None:
        with self._session() as session:
            row = session.get(StoredValue, key)
            if row is not None:
                session.delete(row)
                session.commit()

    def keys(self) -> list[str]:
        with self._session() as session:
            return list(session.scalars(select(StoredValue.key).order_by(StoredValue.key)))

    def dispose(self) -> None:
        self.engine.dispose()
