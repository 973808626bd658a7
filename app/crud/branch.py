from sqlalchemy.orm import Session
from app.models.branch import Branch
from typing import Optional, List


def get_branch_in_company(db: Session, branch_id: int, company_id: int) -> Optional[Branch]:
    """Get a branch by ID within a company"""
    return db.query(Branch).filter(
        Branch.id == branch_id,
        Branch.company_id == company_id,
        Branch.is_deleted == False,
    ).first()


def get_branches_by_company(db: Session, company_id: int) -> List[Branch]:
    """Get all branches for a company, newest first"""
    return db.query(Branch).filter(
        Branch.company_id == company_id,
        Branch.is_deleted == False,
    ).order_by(Branch.created_at.desc(), Branch.id.desc()).all()
