"""
HTTP routes for the blob admin functions.

Verbs other than the one each function accepts are answered by the app's
405 handler with a plain-text body.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, HTTPException

from blob_admin.auth import SessionUser
from blob_admin.dependencies import get_blob_store, require_user
from blob_admin.schemas import (
    ErrorResponse,
    MeResponse,
    UploadBlobRequest,
    UploadBlobResponse,
)
from blob_admin.storage import BlobStore
from blob_admin.stores import get_store_config

logger = logging.getLogger(__name__)

router = APIRouter()


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": ErrorResponse}},
)
def me(user: SessionUser = Depends(require_user)):
    """
    Return the public profile of the authenticated caller.
    """
    return MeResponse(user=user.public_fields())


@router.post(
    "/uploadBlobs",
    response_model=UploadBlobResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def upload_blobs(
    payload: UploadBlobRequest,
    user: SessionUser = Depends(require_user),
    blobs: BlobStore = Depends(get_blob_store),
):
    """
    Persist a JSON snapshot under the store's fixed key, overwriting any
    previous value.
    """
    config = get_store_config(payload.store_name)
    if config is None:
        raise HTTPException(
            status_code=400, detail=f"Unknown store: {payload.store_name}"
        )
    if payload.key != config.key:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid key for store {config.name}: {payload.key}",
        )

    try:
        blobs.put_json(config.name, config.key, payload.data)
    except (BotoCoreError, ClientError, OSError):
        logger.exception(
            "Failed to upload %s/%s for user %s", config.name, config.key, user.id
        )
        raise HTTPException(status_code=500, detail="Failed to upload data")

    logger.info("User %s uploaded %s", user.username, config.hint)
    return UploadBlobResponse(
        message=f"Successfully uploaded {config.key} to {config.name}",
        timestamp=_utc_timestamp(),
    )
