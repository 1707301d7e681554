from pathlib import Path
from typing import Optional
from pydantic import BaseModel

from app.schemas.enums import UploadStatus


class UploadTicketRequest(BaseModel):
    folder: Optional[str] = None


class UploadTicket(BaseModel):
    signature: str
    timestamp: int
    cloudName: str
    apiKey: str
    folder: Optional[str] = None


class UploadItem(BaseModel):
    id: str
    path: Path
    preview_url: str
    status: UploadStatus = UploadStatus.pending
    url: Optional[str] = None
    public_id: Optional[str] = None
    error: Optional[str] = None
