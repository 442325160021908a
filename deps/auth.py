

# deps/auth.py
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from uuid import UUID

from security import decode_token
from services.errors import AuthenticationError

bearer = HTTPBearer(auto_error=False)


class CurrentUser:
    def __init__(self, user_id: UUID, email: str | None = None, roles: list[str] | None = None):
        self.user_id = user_id
        self.email = email
        self.roles = roles or []


def get_current_user(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
) -> CurrentUser:
    if not creds:
        raise AuthenticationError()

    # must be "Bearer"
    if (creds.scheme or "").lower() != "bearer":
        raise AuthenticationError()

    payload = decode_token(creds.credentials)
    sub = payload.get("sub")
    if not sub:
        raise AuthenticationError()
    try:
        user_id = UUID(str(sub))
    except ValueError:
        raise AuthenticationError()
    return CurrentUser(user_id=user_id, email=payload.get("email"))
