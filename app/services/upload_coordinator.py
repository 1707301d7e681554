"""
Client-side image upload flow for the bag forms.

Files are uploaded straight to the media host: for each file a signed ticket
is requested from our `/api/cloudinary/signature` endpoint, then the file is
posted to Cloudinary with that ticket. Uploads run concurrently and are
tracked by a stable id. Only uploaded items are submitted with the form, and
nothing may be submitted while any upload is still pending or in flight.
"""
import asyncio
import json
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import httpx
from loguru import logger

from app.core.config import CLOUDINARY_FOLDER
from app.schemas.enums import UploadStatus
from app.schemas.media import UploadItem, UploadTicket

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


class UploadFailed(Exception):
    pass


def reindex_default(remaining: int, removed_index: int, current_default: int) -> int:
    """New default position after removing `removed_index` from the list."""
    if remaining <= 0:
        return 0
    if current_default == removed_index:
        return 0
    if current_default > removed_index:
        current_default -= 1
    return current_default if current_default < remaining else 0


class UploadCoordinator:
    def __init__(
        self,
        client: httpx.AsyncClient,
        signature_url: str = "/api/cloudinary/signature",
        folder: Optional[str] = CLOUDINARY_FOLDER,
    ):
        self._client = client
        self._signature_url = signature_url
        self._folder = folder
        self._items: Dict[str, UploadItem] = {}
        self.default_index = 0

    # ---------- tracking ----------

    @property
    def items(self) -> List[UploadItem]:
        return list(self._items.values())

    def get(self, item_id: str) -> UploadItem:
        return self._items[item_id]

    def add_files(self, paths: Iterable[Path]) -> List[UploadItem]:
        added = []
        for path in paths:
            path = Path(path)
            item = UploadItem(id=str(uuid.uuid4()), path=path, preview_url=path.resolve().as_uri())
            self._items[item.id] = item
            added.append(item)
        return added

    def remove(self, item_id: str) -> None:
        ids = list(self._items)
        if item_id not in self._items:
            return
        removed_index = ids.index(item_id)
        del self._items[item_id]
        self.default_index = reindex_default(len(self._items), removed_index, self.default_index)

    def select_default(self, index: int) -> bool:
        items = self.items
        if not 0 <= index < len(items) or items[index].status != UploadStatus.uploaded:
            return False
        self.default_index = index
        return True

    def _update(self, item_id: str, **changes) -> None:
        # the item may have been removed while its upload was in flight
        item = self._items.get(item_id)
        if item is not None:
            self._items[item_id] = item.model_copy(update=changes)

    # ---------- network ----------

    async def request_ticket(self) -> UploadTicket:
        resp = await self._client.post(self._signature_url, json={"folder": self._folder})
        if resp.status_code >= 400:
            raise UploadFailed("Unable to start Cloudinary upload.")
        data = resp.json()
        if data.get("error"):
            raise UploadFailed(data["error"])
        return UploadTicket.model_validate(data)

    async def upload(self, item_id: str) -> None:
        item = self._items[item_id]
        self._update(item_id, status=UploadStatus.uploading, error=None)

        try:
            ticket = await self.request_ticket()
            fields = {
                "api_key": ticket.apiKey,
                "timestamp": str(ticket.timestamp),
                "signature": ticket.signature,
            }
            if ticket.folder:
                fields["folder"] = ticket.folder

            resp = await self._client.post(
                CLOUDINARY_UPLOAD_URL.format(cloud_name=ticket.cloudName),
                data=fields,
                files={"file": (item.path.name, item.path.read_bytes())},
            )
            payload = resp.json()
            if resp.status_code >= 400:
                raise UploadFailed((payload.get("error") or {}).get("message") or "Upload failed.")
        except (UploadFailed, httpx.HTTPError, OSError, ValueError) as e:
            message = str(e) or "Upload failed."
            logger.warning(f"[upload] {item.path.name} failed: {message}")
            self._update(item_id, status=UploadStatus.error, error=message)
            return

        self._update(
            item_id,
            status=UploadStatus.uploaded,
            url=payload.get("secure_url") or payload.get("url"),
            public_id=payload.get("public_id"),
        )
        logger.debug(f"[upload] {item.path.name} uploaded as {payload.get('public_id')}")

    async def upload_pending(self) -> None:
        pending = [i.id for i in self.items if i.status == UploadStatus.pending]
        await asyncio.gather(*(self.upload(item_id) for item_id in pending))

    async def add_and_upload(self, paths: Iterable[Path]) -> List[UploadItem]:
        added = self.add_files(paths)
        await asyncio.gather(*(self.upload(item.id) for item in added))
        return [self._items[item.id] for item in added if item.id in self._items]

    # ---------- submission ----------

    @property
    def uploaded_images(self) -> List[UploadItem]:
        return [
            i for i in self.items
            if i.status == UploadStatus.uploaded and i.url and i.public_id
        ]

    @property
    def uploads_in_flight(self) -> bool:
        return any(i.status in (UploadStatus.pending, UploadStatus.uploading) for i in self.items)

    @property
    def can_submit(self) -> bool:
        return bool(self.uploaded_images) and not self.uploads_in_flight

    def form_fields(self) -> Dict[str, str]:
        """`imagesPayload` and `defaultImageIndex` as the bag forms expect them."""
        uploaded = self.uploaded_images
        items = self.items
        default_id = items[self.default_index].id if self.default_index < len(items) else None
        submitted_default = next(
            (pos for pos, i in enumerate(uploaded) if i.id == default_id), 0
        )
        return {
            "imagesPayload": json.dumps([{"url": i.url, "publicId": i.public_id} for i in uploaded]),
            "defaultImageIndex": str(submitted_default),
        }
