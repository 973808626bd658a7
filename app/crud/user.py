from sqlalchemy.orm import Session
from app.models.user import User
from typing import Optional, List, Iterable


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Get a non-deleted user by ID"""
    return db.query(User).filter(User.id == user_id, User.is_deleted == False).first()


def get_user_in_company(db: Session, user_id: int, company_id: int) -> Optional[User]:
    """Get an active, non-deleted user by ID within a company"""
    return db.query(User).filter(
        User.id == user_id,
        User.company_id == company_id,
        User.is_active == True,
        User.is_deleted == False,
    ).first()


def get_users_by_roles(db: Session, company_id: int, role_ids: Iterable[int]) -> List[User]:
    """Get active company users holding any of the given role codes, ordered by name"""
    return (
        db.query(User)
        .filter(
            User.company_id == company_id,
            User.user_role_id.in_([int(role_id) for role_id in role_ids]),
            User.is_active == True,
            User.is_deleted == False,
        )
        .order_by(User.full_name.asc())
        .all()
    )
