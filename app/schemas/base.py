from datetime import datetime
from pydantic import BaseModel

class BaseSchema(BaseModel):
    class Config:
        from_attributes = True
        populate_by_name = True

class TimestampedSchema(BaseSchema):
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ActionResult(BaseModel):
    """Uniform outcome of every admin form action."""

    error: str | None = None
    success: bool | None = None

    @classmethod
    def ok(cls) -> "ActionResult":
        return cls(success=True)

    @classmethod
    def fail(cls, message: str) -> "ActionResult":
        return cls(error=message)
