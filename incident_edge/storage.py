# ================================
# FILE: incident_edge/storage.py
# ================================
import logging
from urllib.parse import quote

import httpx

log = logging.getLogger("uvicorn.error").getChild("storage")


class StorageError(Exception):
    pass


class SupabaseStorage:
    """Blob store backed by a Supabase Storage bucket (public read)."""

    def __init__(self, base_url: str, service_key: str, bucket: str, timeout: float = 10.0,
                 transport: httpx.BaseTransport | None = None):
        self.storage_url = f"{base_url.rstrip('/')}/storage/v1"
        self.bucket = bucket
        self.headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
        }
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self.transport, headers=self.headers)

    def upload(self, key: str, content: bytes, content_type: str | None = None) -> str:
        """Store ``content`` under ``key``; returns the object path inside the bucket."""
        headers = {
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "false",
        }
        url = f"{self.storage_url}/object/{self.bucket}/{quote(key)}"
        try:
            with self._client() as client:
                r = client.post(url, content=content, headers=headers)
        except httpx.HTTPError as e:
            raise StorageError(f"upload {key} failed: {type(e).__name__}") from e
        if r.status_code >= 400:
            raise StorageError(f"upload {key} failed: status={r.status_code} body={r.text[:400]}")
        log.info("[storage] uploaded %s (%d bytes) to %s", key, len(content), self.bucket)
        return key

    def public_url(self, path: str) -> str:
        return f"{self.storage_url}/object/public/{self.bucket}/{quote(path)}"

    def list_buckets(self) -> list[str]:
        try:
            with self._client() as client:
                r = client.get(f"{self.storage_url}/bucket")
        except httpx.HTTPError as e:
            raise StorageError(f"list buckets failed: {type(e).__name__}") from e
        if r.status_code >= 400:
            raise StorageError(f"list buckets failed: status={r.status_code}")
        return [b.get("name") for b in r.json()]
