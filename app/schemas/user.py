from pydantic import BaseModel
from typing import Optional

from app.schemas.common import CamelModel


class TokenPayload(BaseModel):
    """Token payload schema"""
    sub: str
    exp: Optional[int] = None


class UserBrief(CamelModel):
    """User reference embedded in ticket responses"""
    id: int
    full_name: str
    user_number: Optional[str] = None
    email: Optional[str] = None
    user_role_id: int
