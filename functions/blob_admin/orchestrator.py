"""
Upload orchestrator for restoring JSON snapshots.

Collects at most one file per store, uploads every selected file
concurrently to the ``uploadBlobs`` function and keeps the per-store results.
A failing store never aborts its siblings: every task settles to an
``UploadResult`` of its own.
"""

from __future__ import annotations

import asyncio
import json
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import httpx

from blob_admin.stores import STORE_CONFIGS, STORE_NAMES, StoreConfig

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
UPLOAD_ENDPOINT = "/uploadBlobs"

INVALID_FILE_TYPE_ERROR = "Please select a JSON file"
NO_FILES_SELECTED_ERROR = "Please select at least one file"
UPLOAD_FAILED_ERROR = "Upload failed"


class UploadError(Exception):
    """Raised inside an upload task when the endpoint rejects the snapshot."""


class SelectedFile(Protocol):
    """A file picked for one store slot."""

    name: str
    content_type: str

    async def text(self) -> str:
        ...


@dataclass
class LocalFile:
    """File on disk whose declared content type comes from its extension."""

    path: Path
    content_type: str = ""

    def __post_init__(self):
        self.path = Path(self.path)
        if not self.content_type:
            guessed, _ = mimetypes.guess_type(self.path.name)
            self.content_type = guessed or "application/octet-stream"

    @property
    def name(self) -> str:
        return self.path.name

    async def text(self) -> str:
        return await asyncio.to_thread(self.path.read_text, encoding="utf-8-sig")


@dataclass(frozen=True)
class UploadResult:
    store_name: str
    key: str
    success: bool
    message: Optional[str] = None
    timestamp: Optional[str] = None
    data_size: Optional[int] = None
    error: Optional[str] = None

    def as_dict(self) -> dict:
        payload = {
            "storeName": self.store_name,
            "key": self.key,
            "success": self.success,
            "message": self.message,
            "timestamp": self.timestamp,
            "dataSize": self.data_size,
            "error": self.error,
        }
        return {k: v for k, v in payload.items() if v is not None}


def serialize_json(data: Any) -> str:
    """Compact JSON, the exact form the payload is sent in."""
    return json.dumps(
        data, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def create_upload_client(
    base_url: str, token: Optional[str] = None, timeout: Optional[float] = None
) -> httpx.AsyncClient:
    """
    Build the HTTP client used for uploads. ``base_url`` points at the
    functions prefix, e.g. ``http://localhost:8888/.netlify/functions``.
    """
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=base_url, headers=headers, timeout=timeout)


@dataclass
class UploadOrchestrator:
    """
    Holds the selection/upload state of one interactive session.

    ``selections`` maps every store name to the picked file (or ``None``),
    ``results`` is replaced as a whole after each upload cycle and ``error``
    is the single shared message for validation and batch failures.
    """

    client: httpx.AsyncClient
    endpoint: str = UPLOAD_ENDPOINT
    selections: Dict[str, Optional[SelectedFile]] = field(
        default_factory=lambda: {name: None for name in STORE_NAMES}
    )
    uploading: bool = False
    results: List[UploadResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def can_submit(self) -> bool:
        return not self.uploading and any(
            f is not None for f in self.selections.values()
        )

    def select_file(self, store_name: str, file: SelectedFile) -> bool:
        """
        Select ``file`` for a store slot. Returns False, leaving the slot as
        it was, when the file is not declared as JSON.
        """
        if store_name not in self.selections:
            raise ValueError(f"Unknown store: {store_name}")
        if file.content_type != JSON_CONTENT_TYPE:
            self.error = INVALID_FILE_TYPE_ERROR
            return False
        self.selections[store_name] = file
        self.error = None
        return True

    def result_for(self, store_name: str) -> Optional[UploadResult]:
        for result in self.results:
            if result.store_name == store_name:
                return result
        return None

    async def upload_all(self) -> List[UploadResult]:
        if self.uploading:
            logger.warning("Upload already in progress; ignoring resubmit")
            return self.results

        selected = [
            (config, self.selections[config.name])
            for config in STORE_CONFIGS
            if self.selections.get(config.name) is not None
        ]
        if not selected:
            self.error = NO_FILES_SELECTED_ERROR
            return []

        self.uploading = True
        self.error = None
        self.results = []

        try:
            results = await asyncio.gather(
                *(self._upload_store(config, file) for config, file in selected)
            )
            self.results = list(results)
        except Exception as exc:
            logger.exception("Upload batch failed")
            self.error = f"Upload error: {exc}"
        finally:
            self.uploading = False
        return self.results

    async def _upload_store(
        self, config: StoreConfig, file: SelectedFile
    ) -> UploadResult:
        try:
            content = await file.text()
            try:
                data = json.loads(content, parse_constant=_reject_constant)
            except ValueError as exc:
                raise UploadError(f"Invalid JSON in {file.name}: {exc}") from exc

            serialized = serialize_json(data)
            body = serialize_json(
                {"storeName": config.name, "key": config.key, "data": data}
            )
            response = await self.client.post(
                self.endpoint,
                content=body.encode("utf-8"),
                headers={"Content-Type": JSON_CONTENT_TYPE},
            )
            response_data = _response_json(response)

            if not response.is_success:
                raise UploadError(response_data.get("error") or UPLOAD_FAILED_ERROR)

            logger.info("Uploaded %s (%s)", config.hint, file.name)
            return UploadResult(
                store_name=config.name,
                key=config.key,
                success=True,
                message=response_data.get("message"),
                timestamp=response_data.get("timestamp"),
                data_size=len(serialized.encode("utf-8")),
            )
        except Exception as exc:
            reason = str(exc) or exc.__class__.__name__
            logger.warning("Upload of %s failed: %s", config.hint, reason)
            return UploadResult(
                store_name=config.name,
                key=config.key,
                success=False,
                error=reason,
            )


def _response_json(response: httpx.Response) -> dict:
    try:
        payload = response.json()
    except ValueError:
        if response.is_success:
            raise UploadError("Upload endpoint returned an invalid response")
        return {}
    return payload if isinstance(payload, dict) else {}
