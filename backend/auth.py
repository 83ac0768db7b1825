"""
Bearer token verification against Supabase Auth.

The service never decodes JWTs itself: the token is handed to
``client.auth.get_user(jwt)`` and the returned user id is trusted.
"""

import logging
from typing import Optional

from supabase import Client

from application.exceptions import AuthInvalidError, AuthRequiredError

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class SupabaseAuthVerifier:
    """verify(bearer token) -> user id, backed by Supabase Auth."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def verify(self, token: str) -> str:
        """
        Resolve a session token to a user id.

        Raises:
            AuthInvalidError: Token rejected or no user attached.
        """
        try:
            response = self._client.auth.get_user(token)
        except Exception as e:
            logger.info("Token verification failed: %s", e)
            raise AuthInvalidError() from e

        user = getattr(response, "user", None) if response else None
        if user is None or not getattr(user, "id", None):
            raise AuthInvalidError()
        return str(user.id)


def get_current_user(
    authorization: Optional[str], verifier: Optional[SupabaseAuthVerifier]
) -> str:
    """
    Authenticate a request from its Authorization header.

    Raises:
        AuthRequiredError: Missing or malformed header.
        AuthInvalidError: Token rejected, or no verifier configured.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthRequiredError()
    if verifier is None:
        logger.error("Auth requested but Supabase is not configured")
        raise AuthInvalidError("Authentication is not available")
    return verifier.verify(token)
