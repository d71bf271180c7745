"""Authentication endpoints backed by the hosted auth provider."""

from fastapi import APIRouter, Depends

from foodlens.api.deps import bearer_token, get_container, require_user
from foodlens.api.models import (
    AuthResponse,
    CallbackRequest,
    Credentials,
    GoogleLoginRequest,
    GoogleLoginResponse,
    MessageResponse,
    RefreshRequest,
    UserOut,
    VerifyResponse,
)
from foodlens.containers import AppContainer
from foodlens.domain.auth import RequestContext

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
async def register(
    body: Credentials, container: AppContainer = Depends(get_container)
) -> AuthResponse:
    """Create an account."""
    result = container.auth_service.register(body.email, body.password)
    return AuthResponse.from_result(result)


@router.post("/login")
async def login(
    body: Credentials, container: AppContainer = Depends(get_container)
) -> AuthResponse:
    """Sign in with email and password."""
    result = container.auth_service.login(body.email, body.password)
    return AuthResponse.from_result(result)


@router.post("/login/google")
async def login_with_google(
    body: GoogleLoginRequest | None = None,
    container: AppContainer = Depends(get_container),
) -> GoogleLoginResponse:
    """Return the OAuth authorization URL."""
    redirect_uri = body.redirect_uri if body else None
    url = container.auth_service.authorization_url(redirect_uri)
    return GoogleLoginResponse(url=url, provider=container.auth_service.oauth_provider)


@router.post("/auth/callback")
async def auth_callback(
    body: CallbackRequest, container: AppContainer = Depends(get_container)
) -> AuthResponse:
    """Exchange OAuth callback credentials for a verified session."""
    if body.code:
        result = container.auth_service.exchange_code(
            body.code, body.redirect_uri, body.code_verifier
        )
    else:
        result = container.auth_service.complete_callback(
            body.access_token or "", body.refresh_token
        )
    return AuthResponse.from_result(result)


@router.post("/refresh")
async def refresh(
    body: RefreshRequest, container: AppContainer = Depends(get_container)
) -> AuthResponse:
    """Refresh a session."""
    result = container.auth_service.refresh(body.refresh_token)
    return AuthResponse.from_result(result)


@router.post("/logout", dependencies=[Depends(require_user)])
async def logout(
    token: str = Depends(bearer_token),
    container: AppContainer = Depends(get_container),
) -> MessageResponse:
    """Invalidate the caller's hosted session."""
    container.auth_service.logout(token)
    return MessageResponse(message="Logout successful")


@router.get("/verify")
async def verify(context: RequestContext = Depends(require_user)) -> VerifyResponse:
    """Confirm a bearer token and return its user."""
    return VerifyResponse(valid=True, user=UserOut.from_user(context.user))


@router.get("/profile")
async def profile(context: RequestContext = Depends(require_user)) -> UserOut:
    """Return the caller's identity."""
    return UserOut.from_user(context.user)
