from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, ExpiredSignatureError
from sqlalchemy.orm import Session
import logging

from app.db.session import get_db
from app.core import roles
from app.core.errors import UnauthorizedError, NotFoundError, ValidationError, ForbiddenError
from app.core.security import decode_access_token
from app.models.user import User
from app.schemas.user import TokenPayload
from app.crud import user as crud_user
from app.services import ticket_lifecycle

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """Get current authenticated user"""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token required")

    try:
        payload = decode_access_token(credentials.credentials)
        token_data = TokenPayload(**payload)
        user_id = int(token_data.sub)
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except (JWTError, ValueError):
        raise UnauthorizedError("Invalid token")

    user = crud_user.get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    if not user.is_active:
        raise ValidationError("Inactive user")

    return user


def get_company_user(current_user: User = Depends(get_current_user)) -> User:
    """Authenticated user that belongs to a company"""
    if not current_user.company_id:
        logger.debug(f"User {current_user.id} has no company context")
        raise ValidationError("User is not associated with a company")
    return current_user


def get_ticket_creator(current_user: User = Depends(get_company_user)) -> User:
    """Company user allowed to create tickets; checked before the request body is validated"""
    if not roles.can_create_ticket(current_user.user_role_id):
        logger.warning(f"User {current_user.id} with role {current_user.user_role_id} attempted to create a ticket")
        raise ForbiddenError(ticket_lifecycle.CREATE_FORBIDDEN)
    return current_user


def get_ticket_updater(current_user: User = Depends(get_company_user)) -> User:
    """Company user allowed to update tickets; checked before the path and body are validated"""
    if roles.resolve_role(current_user.user_role_id) == roles.Role.RESTRICTED:
        logger.warning(f"Restricted user {current_user.id} attempted to update a ticket")
        raise ForbiddenError(ticket_lifecycle.UPDATE_RESTRICTED)
    if not roles.can_update_ticket(current_user.user_role_id):
        raise ForbiddenError(ticket_lifecycle.UPDATE_FORBIDDEN)
    return current_user
