from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any


@dataclass
class Address:
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Address":
        return cls(
            street=data.get("street", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
            postal_code=data.get("postalCode", data.get("postal_code", "")),
            country=data.get("country", ""),
        )

    def to_dict(self):
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postalCode": self.postal_code,
            "country": self.country,
        }


# Wire (camelCase) name -> attribute name
_USER_WIRE_NAMES = {
    "_id": "id",
    "id": "id",
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
    "role": "role",
    "isActive": "is_active",
    "isAdmin": "is_admin",
    "address": "address",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


@dataclass
class User:
    """
    Cached copy of the signed-in user's profile.

    The server is authoritative; `extra` keeps any field this client does
    not model so it survives a save/restore cycle.
    """
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None
    role: str = "user"
    is_active: bool = True
    is_admin: bool = False
    address: Address | None = None
    created_at: str | None = None
    updated_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        attrs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        attr_names = {f.name for f in fields(cls)} - {"extra"}
        for key, value in data.items():
            name = _USER_WIRE_NAMES.get(key, key)
            if name in attr_names:
                attrs[name] = value
            else:
                extra[key] = value
        if isinstance(attrs.get("address"), dict):
            attrs["address"] = Address.from_dict(attrs["address"])
        if "is_admin" not in attrs and attrs.get("role") == "admin":
            attrs["is_admin"] = True
        attrs.setdefault("id", "")
        attrs.setdefault("email", "")
        return cls(extra=extra, **attrs)

    def to_dict(self):
        data = dict(self.extra)
        data.update({
            "_id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "isActive": self.is_active,
            "isAdmin": self.is_admin,
            "address": self.address.to_dict() if self.address else None,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        })
        return data

    def merged(self, partial: dict) -> "User":
        """Shallow merge: top-level fields in `partial` replace ours."""
        changes: dict[str, Any] = {}
        extra = dict(self.extra)
        attr_names = {f.name for f in fields(self)} - {"extra"}
        for key, value in partial.items():
            name = _USER_WIRE_NAMES.get(key, key)
            if name in attr_names:
                if name == "address" and isinstance(value, dict):
                    value = Address.from_dict(value)
                changes[name] = value
            else:
                extra[key] = value
        return replace(self, extra=extra, **changes)
