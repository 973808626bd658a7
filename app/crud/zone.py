from sqlalchemy.orm import Session
from app.models.zone import Zone
from typing import Optional, List


def get_zone_in_branch(db: Session, zone_id: int, branch_id: int) -> Optional[Zone]:
    """Get a zone by ID only if it belongs to the given branch"""
    return db.query(Zone).filter(
        Zone.id == zone_id,
        Zone.branch_id == branch_id,
        Zone.is_deleted == False,
    ).first()


def get_zones_by_branches(db: Session, branch_ids: List[int]) -> List[Zone]:
    """Get zones for a set of branches, newest first"""
    if not branch_ids:
        return []
    return db.query(Zone).filter(
        Zone.branch_id.in_(branch_ids),
        Zone.is_deleted == False,
    ).order_by(Zone.created_at.desc(), Zone.id.desc()).all()
