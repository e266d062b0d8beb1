from typing import Callable

from fastapi import Depends, Header, HTTPException, status

from eventbook.core.permissions import ROLE_NAMES, Identity, Role, authorize
from eventbook.core.security import decode_access_token


def get_bearer_token(authorization: str | None = Header(None, alias="Authorization")) -> str:
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")
    return parts[1]


def get_current_identity(token: str = Depends(get_bearer_token)) -> Identity:
    identity = decode_access_token(token)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")
    return identity


def require_role(min_role: Role) -> Callable[[Identity], Identity]:
    """
    Use: Depends(require_role(Role.HOST))
    Lets min_role and every role above it through.
    """

    def _checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not authorize(identity.role, min_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient access level: requires '{ROLE_NAMES[min_role]}'",
            )
        return identity

    return _checker
