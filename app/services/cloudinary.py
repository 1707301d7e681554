import hashlib
import time
from typing import Dict, Optional

from app.core import config
from app.schemas.media import UploadTicket


def ensure_cloudinary_credentials() -> None:
    if not (config.CLOUDINARY_CLOUD_NAME and config.CLOUDINARY_API_KEY and config.CLOUDINARY_API_SECRET):
        raise RuntimeError(
            "Cloudinary credentials are missing. Please define CLOUDINARY_CLOUD_NAME, "
            "CLOUDINARY_API_KEY, and CLOUDINARY_API_SECRET in your environment."
        )


def create_signature(params: Dict[str, str], api_secret: Optional[str] = None) -> str:
    """
    Cloudinary request signature: sorted `key=value` pairs joined by `&`,
    secret appended, SHA-1 hex digest.
    """
    secret = api_secret if api_secret is not None else config.CLOUDINARY_API_SECRET
    canonical = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{canonical}{secret}".encode("utf-8")).hexdigest()


def build_upload_ticket(folder: Optional[str] = None, timestamp: Optional[int] = None) -> UploadTicket:
    ensure_cloudinary_credentials()

    timestamp = timestamp if timestamp is not None else round(time.time())
    params = {"timestamp": str(timestamp)}
    if folder:
        params["folder"] = folder

    return UploadTicket(
        signature=create_signature(params),
        timestamp=timestamp,
        cloudName=config.CLOUDINARY_CLOUD_NAME,
        apiKey=config.CLOUDINARY_API_KEY,
        folder=folder,
    )
