"""
Auth lookup: resolves the caller of a request to a user, or nothing.

The lookup is a pluggable collaborator. The default implementation treats
the bearer token (or the session cookie) as an opaque session id and asks the
session store for the user record behind it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

from fastapi import Request

from blob_admin.sessions import SessionStore


@dataclass
class SessionUser:
    id: str
    username: str
    role: str = ""
    # Everything else the session record carries; never exposed by the API.
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: dict) -> Optional["SessionUser"]:
        if not record.get("id") or not record.get("username"):
            return None
        extra = {
            k: v for k, v in record.items() if k not in ("id", "username", "role")
        }
        return cls(
            id=str(record["id"]),
            username=str(record["username"]),
            role=str(record.get("role") or ""),
            extra=extra,
        )

    def public_fields(self) -> dict:
        return {"id": self.id, "username": self.username, "role": self.role}


class AuthLookup(Protocol):
    def resolve(self, request: Request) -> Optional[SessionUser]:
        ...


def extract_token(request: Request, cookie_name: str) -> Optional[str]:
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(cookie_name) or None


@dataclass
class SessionAuthLookup:
    """Resolve users from session tokens held in a session store."""

    sessions: SessionStore
    cookie_name: str = "session"

    def resolve(self, request: Request) -> Optional[SessionUser]:
        token = extract_token(request, self.cookie_name)
        if not token:
            return None
        record = self.sessions.get(token)
        if not record:
            return None
        return SessionUser.from_record(record)
