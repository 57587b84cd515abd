"""
Binary Asset Store

Uploads local files to external storage and deletes them by key.
Provides an abstract interface plus the Cloudinary implementation used in
production (signed REST calls over httpx).
"""
import hashlib
import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import httpx
from fastapi import UploadFile

from vidtube.config import settings
from vidtube.models import PendingAssetDeletion

logger = logging.getLogger(__name__)


@dataclass
class StoredAsset:
    """An object in the asset store: a stable URL plus the key used to delete it."""
    url: str
    key: str
    resource_type: str = "image"
    duration: Optional[float] = None  # seconds, for audio/video uploads


class AssetStore(ABC):
    """Asset Store Abstract Base Class"""

    @abstractmethod
    async def upload(self, path: str, resource_type: str = "auto") -> Optional[StoredAsset]:
        """
        Upload a local file.

        Returns:
        - StoredAsset on success, None when the path is empty or the upload failed
        """

    @abstractmethod
    async def delete(self, key: str, resource_type: str = "image") -> bool:
        """Delete an object by key. Returns True when the store confirmed it."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the store is configured"""


class CloudinaryAssetStore(AssetStore):
    """Cloudinary upload/destroy endpoints with signed requests."""

    def __init__(self, cloud_name: Optional[str] = None, api_key: Optional[str] = None,
                 api_secret: Optional[str] = None, api_base: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.cloud_name = cloud_name or settings.cloudinary_cloud_name
        self.api_key = api_key or settings.cloudinary_api_key
        self.api_secret = api_secret or settings.cloudinary_api_secret
        self.api_base = (api_base or settings.cloudinary_api_base).rstrip("/")
        self.timeout = timeout or settings.asset_store_timeout

    def is_available(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _sign(self, params: dict) -> str:
        # sha1("k1=v1&k2=v2" + api_secret), keys sorted
        payload = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1((payload + self.api_secret).encode("utf-8")).hexdigest()

    def _signed(self, params: dict) -> dict:
        params = {**params, "timestamp": str(int(time.time()))}
        return {**params, "signature": self._sign(params), "api_key": self.api_key}

    def _url(self, resource_type: str, action: str) -> str:
        return f"{self.api_base}/{self.cloud_name}/{resource_type}/{action}"

    async def upload(self, path: str, resource_type: str = "auto") -> Optional[StoredAsset]:
        if not path:
            return None
        if not self.is_available():
            raise RuntimeError("Cloudinary credentials are not configured")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                with open(path, "rb") as f:
                    files = {"file": (os.path.basename(path), f)}
                    resp = await client.post(self._url(resource_type, "upload"), data=self._signed({}), files=files)
                resp.raise_for_status()
                js = resp.json()
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.error("[assets] upload failed for %s: %s", path, e)
            return None
        return StoredAsset(
            url=js.get("secure_url") or js.get("url"),
            key=js["public_id"],
            resource_type=js.get("resource_type") or resource_type,
            duration=js.get("duration"),
        )

    async def delete(self, key: str, resource_type: str = "image") -> bool:
        if not key:
            return False
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self._url(resource_type, "destroy"), data=self._signed({"public_id": key}))
                resp.raise_for_status()
                result = resp.json().get("result")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("[assets] delete failed for %s (%s): %s", key, resource_type, e)
            return False
        # "not found" means there is nothing left to clean up
        return result in ("ok", "not found")


_store: Optional[AssetStore] = None


def get_asset_store() -> AssetStore:
    """FastAPI dependency returning the process-wide asset store."""
    global _store
    if _store is None:
        _store = CloudinaryAssetStore()
        if not _store.is_available():
            logger.warning("[assets] Cloudinary not configured; uploads will fail")
    return _store


# ---------------------------------------------------------------------------
# Upload helpers
# ---------------------------------------------------------------------------
async def spool_upload(upload: UploadFile) -> str:
    """Write a multipart upload to a local temp file; caller must remove it."""
    suffix = os.path.splitext(upload.filename or "")[1]
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix, dir=settings.upload_tmp_dir) as tmp:
        while chunk := await upload.read(1024 * 1024):
            tmp.write(chunk)
        return tmp.name


async def store_upload(store: AssetStore, upload: Optional[UploadFile], resource_type: str = "auto") -> Optional[StoredAsset]:
    """
    Push a multipart upload to the asset store.

    The local temp file is removed on every exit path.
    """
    if upload is None or not upload.filename:
        return None
    path = await spool_upload(upload)
    try:
        return await store.upload(path, resource_type=resource_type)
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


# ---------------------------------------------------------------------------
# Deletion with reconciliation
# ---------------------------------------------------------------------------
async def delete_assets(store: AssetStore, assets: Iterable[Tuple[str, str]]) -> int:
    """
    Best-effort deletion of (key, resource_type) pairs.

    Failures never raise; each one is recorded as a PendingAssetDeletion and
    retried by `retry_pending_deletions`.

    Returns:
        Number of deletions that failed and were queued
    """
    failed = 0
    for key, resource_type in assets:
        if not key:
            continue
        try:
            ok = await store.delete(key, resource_type)
            error = None if ok else "asset store did not confirm deletion"
        except Exception as e:
            ok, error = False, str(e)
        if not ok:
            failed += 1
            await PendingAssetDeletion.create(key=key, resource_type=resource_type, last_error=error)
            logger.warning("[assets] queued %s (%s) for deletion retry: %s", key, resource_type, error)
    return failed


async def retry_pending_deletions(store: AssetStore, max_attempts: int = 5) -> int:
    """
    Retry queued deletions. Rows are removed once confirmed; rows that
    reached `max_attempts` are left for manual cleanup.

    Returns:
        Number of assets deleted in this pass
    """
    done = 0
    pending = await PendingAssetDeletion.filter(attempts__lt=max_attempts).order_by("created_at")
    for row in pending:
        try:
            ok = await store.delete(row.key, row.resource_type)
            error = None if ok else "asset store did not confirm deletion"
        except Exception as e:
            ok, error = False, str(e)
        if ok:
            await row.delete()
            done += 1
        else:
            row.attempts += 1
            row.last_error = error
            await row.save()
    if pending:
        logger.info("[assets] retried %d pending deletion(s), %d confirmed", len(pending), done)
    return done
