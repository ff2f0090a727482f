"""Per-request authentication and role authorization."""

from collections.abc import Iterable

from app.core.errors import AuthenticationError, ForbiddenError, TokenError
from app.core.security import TokenCodec
from app.schemas.auth import TokenClaims
from app.services.user_directory import UserDirectory


class AccessGate:
    """
    Unauthenticated -> Authenticated (valid token, live unbanned user)
    -> Authorized (role check). authenticate must run before authorize.
    """

    def __init__(self, codec: TokenCodec, directory: UserDirectory) -> None:
        self._codec = codec
        self._directory = directory

    def authenticate(self, authorization_header: str | None) -> TokenClaims:
        """Return the decoded claims for a Bearer header whose user still exists and is not banned."""
        token = self._codec.extract_from_header(authorization_header)
        if token is None:
            raise AuthenticationError("Authentication required")
        try:
            claims = self._codec.verify(token)
        except TokenError as e:
            raise AuthenticationError("Invalid or expired token", cause=e) from e

        user = self._directory.get_user_by_id(claims.user_id)
        if user is None:
            raise AuthenticationError("User not found")
        if user.is_banned:
            raise ForbiddenError("User is banned")
        return claims

    @staticmethod
    def authorize(claims: TokenClaims | None, required_roles: Iterable[str] = ()) -> TokenClaims:
        """
        Require at least one of required_roles in the token's roles.

        An empty required_roles means any authenticated caller passes.
        """
        if isinstance(required_roles, str):
            required_roles = [required_roles]
        required = set(required_roles)
        if claims is None:
            raise ForbiddenError("Insufficient permissions")
        if required and not required.intersection(claims.roles):
            raise ForbiddenError("Insufficient permissions")
        return claims
