from sqlalchemy.orm import Session
from app.models.lookup import Lookup, LookupCategory
from typing import Optional, List, Iterable


def get_active_lookup(db: Session, lookup_id: int, category: LookupCategory) -> Optional[Lookup]:
    """Get an active lookup of the given category"""
    return db.query(Lookup).filter(
        Lookup.id == lookup_id,
        Lookup.category == category,
        Lookup.is_active == True,
    ).first()


def get_default_lookup(db: Session, category: LookupCategory) -> Optional[Lookup]:
    """Get the active lookup flagged as default within a category"""
    return db.query(Lookup).filter(
        Lookup.category == category,
        Lookup.is_default == True,
        Lookup.is_active == True,
    ).order_by(Lookup.order_id.asc(), Lookup.id.asc()).first()


def get_lookups_by_category(
    db: Session,
    category: LookupCategory,
    parent_lookup_id: Optional[int] = None,
) -> List[Lookup]:
    """Get active lookups of a category in display order"""
    query = db.query(Lookup).filter(
        Lookup.category == category,
        Lookup.is_active == True,
    )
    if parent_lookup_id is not None:
        query = query.filter(Lookup.parent_lookup_id == parent_lookup_id)
    return query.order_by(Lookup.order_id.asc(), Lookup.id.asc()).all()


def get_active_lookups_by_ids(db: Session, lookup_ids: Iterable[int], category: LookupCategory) -> List[Lookup]:
    ids = list(lookup_ids)
    if not ids:
        return []
    return db.query(Lookup).filter(
        Lookup.id.in_(ids),
        Lookup.category == category,
        Lookup.is_active == True,
    ).all()
