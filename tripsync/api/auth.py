"""Minimal auth dependency.

Stub implementation that reads the caller's user ID from a bearer token or
falls back to a test default. Real authentication lives outside this service.
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

DEFAULT_TEST_USER_ID = 1


async def get_current_user_id(
    authorization: Annotated[str | None, Header()] = None,
) -> int:
    """Extract the caller's user ID from the authorization header.

    Accepts "Bearer <user_id>"; without a header the test default is used.

    Args:
        authorization: Authorization header (e.g., "Bearer 42")

    Returns:
        User ID

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return DEFAULT_TEST_USER_ID

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]  # Strip "Bearer "
    try:
        return int(token)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format (expected numeric user id)",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
