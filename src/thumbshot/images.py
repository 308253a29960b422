"""Image probing and re-encoding utilities."""

from __future__ import annotations

import hashlib
from io import BytesIO

from PIL import Image, UnidentifiedImageError

_PIL_FORMATS = {"png": "PNG", "jpeg": "JPEG"}


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def probe_image(data: bytes) -> tuple[int, int] | None:
    """Return ``(width, height)`` if ``data`` decodes as an image, else None."""

    if not data:
        return None
    try:
        with Image.open(BytesIO(data)) as im:
            im.verify()
        with Image.open(BytesIO(data)) as im:
            return im.size
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError):
        return None


def reencode_image(data: bytes, fmt: str = "png", *, quality: int = 80) -> tuple[bytes, int, int]:
    """Decode ``data`` and re-encode it as ``fmt`` (png or jpeg).

    Returns the encoded payload and its dimensions. Raises ``ValueError`` when
    ``data`` is not a decodable image.
    """

    pil_format = _PIL_FORMATS.get(fmt)
    if pil_format is None:
        raise ValueError(f"unsupported format: {fmt}")
    try:
        with Image.open(BytesIO(data)) as im:
            im.load()
            if pil_format == "JPEG":
                im = im.convert("RGB")
            elif im.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                im = im.convert("RGBA")
            width, height = im.size
            out = BytesIO()
            if pil_format == "JPEG":
                im.save(out, format=pil_format, quality=quality)
            else:
                im.save(out, format=pil_format, optimize=True)
            return out.getvalue(), width, height
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValueError(f"undecodable image: {exc}") from exc


__all__ = ["probe_image", "reencode_image", "sha256_hex"]
