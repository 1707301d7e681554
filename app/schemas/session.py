from typing import Optional
from pydantic import BaseModel


class AdminSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None  # epoch seconds
    email: str


class AdminUser(BaseModel):
    id: str
    email: Optional[str] = None
