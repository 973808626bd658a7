from typing import Optional

from app.schemas.common import CamelModel


class LookupBrief(CamelModel):
    id: int
    name: str
    name_arabic: Optional[str] = None


class ToolBrief(CamelModel):
    """Tool lookup resolved to display names"""
    id: int
    title: str
    title_ar: Optional[str] = None
