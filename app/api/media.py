from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from app.schemas.media import UploadTicketRequest
from app.services.cloudinary import build_upload_ticket

router = APIRouter(prefix="/api/cloudinary", tags=["media"])


async def _read_ticket_request(request: Request) -> UploadTicketRequest:
    # body is optional; anything unreadable means "no folder"
    try:
        body: Optional[dict] = await request.json()
        return UploadTicketRequest.model_validate(body or {})
    except (ValueError, ValidationError):
        return UploadTicketRequest()


@router.post("/signature")
async def upload_signature(request: Request):
    payload = await _read_ticket_request(request)

    try:
        ticket = build_upload_ticket(payload.folder)
    except Exception as e:
        logger.error(f"[media] unable to sign upload: {e}")
        message = str(e) or "Unable to generate Cloudinary signature."
        return JSONResponse({"error": message}, status_code=500)

    logger.debug(f"[media] upload ticket issued | folder={ticket.folder} ts={ticket.timestamp}")
    return ticket.model_dump()
