"""
Poster storage — writes uploaded images under MEDIA_ROOT and hands back a
public URL under MEDIA_URL. Images are stored as received.
"""
import base64
import binascii
import re
import time
from pathlib import Path

from loguru import logger

from watchlist.core.config import settings

UPLOAD_FAILED_MESSAGE = "Failed to read image. Please try again."

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+)?;base64,", re.IGNORECASE)


class PosterUploadError(Exception):
    """Raised when an image payload cannot be decoded or written."""


def poster_path(key: object) -> str:
    """Relative storage path for a new poster, e.g. ``posters/<key>_<ms>.jpg``."""
    return f"posters/{key}_{int(time.time() * 1000)}.jpg"


def decode_image_data(image_data: str) -> bytes:
    """Decode a base64 body or ``data:image/...;base64,`` URI."""
    body = _DATA_URI_RE.sub("", image_data.strip(), count=1)
    try:
        content = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PosterUploadError(UPLOAD_FAILED_MESSAGE) from exc
    if not content:
        raise PosterUploadError(UPLOAD_FAILED_MESSAGE)
    return content


class PosterStorage:
    def __init__(self, root: str | Path | None = None, base_url: str | None = None) -> None:
        self.root = Path(root or settings.MEDIA_ROOT).resolve()
        self.base_url = (base_url or settings.MEDIA_URL).rstrip("/")

    def _resolve(self, relative: str) -> Path | None:
        target = (self.root / relative).resolve()
        if target == self.root or self.root not in target.parents:
            return None
        return target

    def upload(self, image_data: str, path: str) -> str:
        """Store *image_data* at *path* and return its public URL."""
        content = decode_image_data(image_data)
        target = self._resolve(path)
        if target is None:
            raise PosterUploadError(UPLOAD_FAILED_MESSAGE)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            logger.exception(f"[Storage] writing {path} failed")
            raise PosterUploadError(UPLOAD_FAILED_MESSAGE) from exc
        return f"{self.base_url}/{path}"

    def delete(self, url: str | None) -> None:
        """Best-effort removal. Unknown URLs and missing files are ignored."""
        if not url or not url.startswith(f"{self.base_url}/"):
            return
        target = self._resolve(url[len(self.base_url) + 1:])
        if target is None:
            return
        try:
            target.unlink(missing_ok=True)
        except OSError:
            logger.warning(f"[Storage] could not delete {url}")


def get_storage() -> PosterStorage:
    """FastAPI dependency returning the configured poster store."""
    return PosterStorage()
