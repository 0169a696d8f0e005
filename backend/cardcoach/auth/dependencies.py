"""FastAPI dependencies for request identity."""

from fastapi import HTTPException, Header, status
from pydantic import BaseModel


class CurrentUser(BaseModel):
    """
    Represents the user a request acts on behalf of.

    Attributes:
        user_id: The owner ID used to partition sets and cards.
    """

    user_id: str


async def get_current_user(
    x_user_id: str | None = Header(None, description="ID of the user making the request"),
) -> CurrentUser:
    """
    FastAPI dependency that resolves the current user from the X-User-Id header.

    Raises:
        HTTPException: 401 if the header is missing or blank.
    """
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return CurrentUser(user_id=x_user_id.strip())

