

# deps/admin.py
from fastapi import Depends

from db import get_conn
from deps.auth import get_current_user, CurrentUser
from services import roles
from services.errors import AuthorizationError, NotFoundError


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """
    The one admin gate for state-changing and admin-only views.
    Roles are read from the database, not trusted from the token.
    """
    with get_conn() as conn:
        if roles.get_user(conn, user.user_id) is None:
            raise NotFoundError("User not found", code="USER_NOT_FOUND")
        user.roles = roles.get_user_roles(conn, user.user_id)

    if not roles.is_admin(user.roles):
        raise AuthorizationError()
    return user
