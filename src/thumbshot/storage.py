"""Google Cloud Storage helpers for captured images."""

from __future__ import annotations

from google.cloud import storage  # type: ignore[attr-defined]

from .logging import jlog

CONTENT_TYPES = {"png": "image/png", "jpeg": "image/jpeg"}
_EXTENSIONS = {"png": "png", "jpeg": "jpg"}


def canonical_capture_path(bucket: str, sha256_hex: str, image_format: str = "png") -> str:
    ext = _EXTENSIONS.get(image_format, image_format)
    return f"gs://{bucket}/captures/{sha256_hex[:2]}/{sha256_hex}.{ext}"


def upload_capture(
    storage_client: storage.Client,
    bucket_name: str,
    blob_path: str,
    data: bytes,
    metadata: dict[str, str],
    *,
    image_format: str = "png",
    dry_run: bool = False,
) -> None:
    assert blob_path.startswith(f"gs://{bucket_name}/"), "blob_path must start with gs://<bucket>/"
    if dry_run:
        jlog("info", event="dry_run_upload", path=blob_path)
        return
    bucket = storage_client.bucket(bucket_name)
    name = blob_path.split(f"gs://{bucket_name}/", 1)[1]
    blob = bucket.blob(name)
    blob.cache_control = "public, max-age=3600"
    blob.metadata = dict(metadata or {})
    blob.upload_from_string(data, content_type=CONTENT_TYPES.get(image_format, "application/octet-stream"))
    jlog("info", event="capture_uploaded", path=blob_path, bytes=len(data))


__all__ = ["CONTENT_TYPES", "canonical_capture_path", "upload_capture"]
