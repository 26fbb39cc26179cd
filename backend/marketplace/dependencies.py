"""
GoEveryWork Marketplace — Request Dependencies
================================================

Authentication is delegated to the external identity provider. Its gateway
validates the session and forwards the authenticated user's id in the
X-User-ID header; this API only reads it.
"""

from typing import Optional

from fastapi import Header

from marketplace.exceptions import AuthenticationError

USER_ID_HEADER = "X-User-ID"


async def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
) -> str:
    """FastAPI dependency for endpoints that need a signed-in user. Raises 401 without one."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise AuthenticationError()
    return user_id
