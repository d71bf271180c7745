"""Request dependencies shared by the routers."""

from fastapi import Depends, Header, Request

from foodlens.containers import AppContainer
from foodlens.domain.auth import RequestContext
from foodlens.domain.errors import AuthError, NotFoundError


def get_container(request: Request) -> AppContainer:
    """Return the dependency container attached to the app."""
    return request.app.state.container


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    """Extract the bearer token from the Authorization header."""
    if not authorization:
        raise AuthError("Missing authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Invalid authorization header")
    return token.strip()


async def require_user(
    token: str = Depends(bearer_token),
    container: AppContainer = Depends(get_container),
) -> RequestContext:
    """Verify the bearer token and return the caller context."""
    user = container.auth_service.verify(token)
    return RequestContext(user=user, access_token=token)


async def require_owner(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> RequestContext:
    """Like ``require_user`` but reports auth failures as not-found."""
    try:
        token = bearer_token(authorization)
        user = container.auth_service.verify(token)
    except AuthError as exc:
        raise NotFoundError() from exc
    return RequestContext(user=user, access_token=token)
