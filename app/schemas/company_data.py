from typing import Optional

from app.schemas.common import CamelModel


class OptionOut(CamelModel):
    """Dropdown entry shared by every company-data endpoint"""
    id: int
    title: str
    subtitle: str = ""


class ContractOption(OptionOut):
    contract_reference: str
    contract_title: str


class BranchOption(OptionOut):
    branch_title: str
    branch_name_arabic: Optional[str] = None
    branch_name_english: Optional[str] = None


class ZoneOption(OptionOut):
    zone_title: str
    zone_number: Optional[str] = None
    zone_description: Optional[str] = None


class ServiceOption(OptionOut):
    name: str
    name_arabic: Optional[str] = None
    icon: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None


class UserOption(OptionOut):
    full_name: str
    user_number: Optional[str] = None
    email: Optional[str] = None


class LookupOption(OptionOut):
    name: str
    name_arabic: Optional[str] = None
