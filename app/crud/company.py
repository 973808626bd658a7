from sqlalchemy.orm import Session
from app.models.company import Company
from typing import Optional


def get_company_by_id(db: Session, company_id: int) -> Optional[Company]:
    """Get a non-deleted company by ID"""
    return db.query(Company).filter(
        Company.id == company_id,
        Company.is_deleted == False,
    ).first()


def company_short_name(company: Company) -> str:
    """First whitespace-delimited word of the company title, uppercased"""
    words = (company.title or "").split()
    if not words:
        return "TKT"
    return words[0].upper()
