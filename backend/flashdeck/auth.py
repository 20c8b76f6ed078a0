"""Request owner resolution."""

from uuid import UUID

from fastapi import Header, HTTPException, status

OWNER_HEADER = "X-User-Id"


def get_current_owner_id(x_user_id: str | None = Header(default=None, alias=OWNER_HEADER)) -> str:
    """Return the caller's owner id as set by the upstream session layer."""

    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    try:
        return str(UUID(x_user_id))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user identifier") from exc
