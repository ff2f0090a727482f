"""Request dependencies: service container lookup, authentication and role checks."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Header, Request

from app.core.container import ServiceContainer
from app.schemas.auth import TokenClaims
from app.schemas.user import ROLE_ADMIN


def get_container(request: Request) -> ServiceContainer:
    """Return the collaborators built by create_app."""
    return request.app.state.container


def get_current_claims(
    container: Annotated[ServiceContainer, Depends(get_container)],
    authorization: Annotated[str | None, Header()] = None,
) -> TokenClaims:
    """Dependency: require a valid Bearer JWT for a live, unbanned user. Raises 401/403."""
    return container.gate.authenticate(authorization)


def require_roles(*roles: str) -> Callable[..., TokenClaims]:
    """Build a dependency that authenticates, then requires one of roles (none = any authenticated user)."""

    def dependency(
        claims: Annotated[TokenClaims, Depends(get_current_claims)],
        container: Annotated[ServiceContainer, Depends(get_container)],
    ) -> TokenClaims:
        return container.gate.authorize(claims, roles)

    return dependency


require_admin = require_roles(ROLE_ADMIN)
