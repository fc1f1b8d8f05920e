"""
Pydantic schemas for the blob admin API.

Field names follow the camelCase wire format used by the browser client.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserInfo(BaseModel):
    id: str
    username: str
    role: str


class MeResponse(BaseModel):
    user: UserInfo


class UploadBlobRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    store_name: str = Field(..., alias="storeName", min_length=1)
    key: str = Field(..., min_length=1)
    data: Any = Field(...)


class UploadBlobResponse(BaseModel):
    message: str
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
