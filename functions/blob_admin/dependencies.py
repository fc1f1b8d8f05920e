"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request

from blob_admin.auth import AuthLookup, SessionAuthLookup, SessionUser
from blob_admin.config import get_settings
from blob_admin.sessions import InMemorySessionStore, RedisSessionStore, SessionStore
from blob_admin.storage import BlobStore, InMemoryBlobStore, S3BlobStore

_session_store: SessionStore | None = None
_blob_store: BlobStore | None = None


def get_session_store() -> SessionStore:
    """
    Return a singleton session store so issued sessions survive across requests.
    """
    global _session_store
    if _session_store:
        return _session_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.redis_url:
        _session_store = InMemorySessionStore()
    else:
        _session_store = RedisSessionStore(
            url=settings.redis_url,
            key_prefix=settings.session_key_prefix,
            ttl_seconds=settings.session_ttl_seconds,
        )
    return _session_store


def get_blob_store() -> BlobStore:
    global _blob_store
    if _blob_store:
        return _blob_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.blob_bucket:
        _blob_store = InMemoryBlobStore()
    else:
        _blob_store = S3BlobStore(
            bucket=settings.blob_bucket,
            region=settings.blob_region or "",
            endpoint=settings.blob_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    return _blob_store


def get_auth_lookup(
    sessions: SessionStore = Depends(get_session_store),
) -> AuthLookup:
    return SessionAuthLookup(
        sessions=sessions, cookie_name=get_settings().session_cookie_name
    )


def get_current_user(
    request: Request, auth: AuthLookup = Depends(get_auth_lookup)
) -> Optional[SessionUser]:
    return auth.resolve(request)


def require_user(
    user: Optional[SessionUser] = Depends(get_current_user),
) -> SessionUser:
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
