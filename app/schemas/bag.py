from typing import List, Optional
from pydantic import BaseModel, Field

from app.schemas.base import TimestampedSchema


class Image(BaseModel):
    url: str
    public_id: Optional[str] = Field(default=None, alias="publicId")
    is_default: bool = Field(default=False, alias="isDefault")

    class Config:
        populate_by_name = True

    def to_store(self) -> dict:
        # stored rows always use the current (camelCase) field names
        return self.model_dump(by_alias=True)


class UploadedImage(BaseModel):
    """One entry of the `imagesPayload` form field."""

    url: str
    public_id: Optional[str] = Field(default=None, alias="publicId")

    class Config:
        populate_by_name = True


class BagView(TimestampedSchema):
    id: int
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    pricing: Optional[float] = None
    available: bool = False
    images: List[Image] = Field(default_factory=list)
