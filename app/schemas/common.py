from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional, Generic, TypeVar, List, Any

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema exchanging camelCase keys with clients"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class APIResponse(BaseModel, Generic[T]):
    """Generic API Response wrapper"""
    success: bool = True
    message: str
    data: Optional[T] = None


class ErrorResponse(CamelModel):
    """Error body returned for every failed request"""
    success: bool = False
    message: str
    code: str
    missing_fields: Optional[List[str]] = None
    unauthorized_fields: Optional[List[str]] = None
    errors: Optional[List[Any]] = None
