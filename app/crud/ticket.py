from sqlalchemy import func
from sqlalchemy.orm import Session, Query
from app.models.ticket import Ticket
from typing import Optional, List, Dict, Any, Callable
from uuid import uuid4


def _scoped_query(db: Session, company_id: int, scope: Optional[Dict[str, Any]] = None) -> Query:
    """Non-deleted company tickets narrowed by a role visibility scope"""
    query = db.query(Ticket).filter(
        Ticket.company_id == company_id,
        Ticket.is_deleted == False,
    )
    for column, value in (scope or {}).items():
        query = query.filter(getattr(Ticket, column) == value)
    return query


def get_ticket_in_company(
    db: Session,
    ticket_id: int,
    company_id: int,
    scope: Optional[Dict[str, Any]] = None,
) -> Optional[Ticket]:
    """Get a ticket by ID within a company and visibility scope"""
    return _scoped_query(db, company_id, scope).filter(Ticket.id == ticket_id).first()


def get_tickets_page(
    db: Session,
    company_id: int,
    scope: Optional[Dict[str, Any]] = None,
    skip: int = 0,
    limit: int = 20,
) -> List[Ticket]:
    """Get a page of tickets, newest first"""
    return (
        _scoped_query(db, company_id, scope)
        .order_by(Ticket.created_at.desc(), Ticket.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def count_tickets(
    db: Session,
    company_id: int,
    scope: Optional[Dict[str, Any]] = None,
    ticket_type_id: Optional[int] = None,
) -> int:
    """Count tickets within scope, optionally for a single ticket type"""
    query = _scoped_query(db, company_id, scope)
    if ticket_type_id is not None:
        query = query.filter(Ticket.ticket_type_id == ticket_type_id)
    return query.count()


def count_tickets_by_status(
    db: Session,
    company_id: int,
    scope: Optional[Dict[str, Any]] = None,
) -> Dict[int, int]:
    """Ticket counts keyed by ticket status lookup id"""
    rows = (
        _scoped_query(db, company_id, scope)
        .with_entities(Ticket.ticket_status_id, func.count(Ticket.id))
        .group_by(Ticket.ticket_status_id)
        .all()
    )
    return {status_id: count for status_id, count in rows}


def create_ticket_with_code(
    db: Session,
    values: Dict[str, Any],
    build_code: Callable[[int], str],
) -> Ticket:
    """
    Insert a ticket whose code depends on its own primary key.

    The row is flushed with a temporary code to obtain the id, the final
    code is written, and both statements are committed together.
    """
    db_ticket = Ticket(ticket_code_id=f"TMP-{uuid4().hex[:12]}", **values)
    db.add(db_ticket)
    try:
        db.flush()
        db_ticket.ticket_code_id = build_code(db_ticket.id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_ticket)
    return db_ticket


def update_ticket(db: Session, ticket: Ticket, values: Dict[str, Any], updated_by: int) -> Ticket:
    """Apply field writes and stamp the acting user"""
    for field, value in values.items():
        setattr(ticket, field, value)
    ticket.updated_by = updated_by

    db.commit()
    db.refresh(ticket)
    return ticket
