from sqlalchemy.orm import Session
from app.models.contract import Contract
from typing import Optional, List


def get_contract_in_company(db: Session, contract_id: int, company_id: int) -> Optional[Contract]:
    """Get a contract by ID within a company"""
    return db.query(Contract).filter(
        Contract.id == contract_id,
        Contract.company_id == company_id,
        Contract.is_deleted == False,
    ).first()


def get_contracts_by_company(db: Session, company_id: int) -> List[Contract]:
    """Get all contracts for a company, newest first"""
    return db.query(Contract).filter(
        Contract.company_id == company_id,
        Contract.is_deleted == False,
    ).order_by(Contract.created_at.desc(), Contract.id.desc()).all()
