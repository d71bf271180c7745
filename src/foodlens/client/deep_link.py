"""Parser for OAuth login-callback deep links.

Parameters may arrive in the fragment (implicit flow) or the query string
(authorization-code flow). Both are read; a key present in both takes the
fragment value.
"""

from dataclasses import dataclass
from urllib.parse import parse_qsl, urlsplit

CALLBACK_SEGMENTS = frozenset({"callback", "login-callback"})


@dataclass(frozen=True)
class AuthCode:
    """Authorization code to exchange for a session."""

    code: str


@dataclass(frozen=True)
class ImplicitTokens:
    """Tokens delivered directly by the provider."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None


@dataclass(frozen=True)
class CallbackError:
    """The provider reported an error or no credentials were present."""

    error: str
    description: str | None = None


CallbackResult = AuthCode | ImplicitTokens | CallbackError


def callback_params(url: str) -> dict[str, str]:
    """Return the merged query and fragment parameters of a URL."""
    parts = urlsplit(url)
    params = dict(parse_qsl(parts.query, keep_blank_values=False))
    params.update(parse_qsl(parts.fragment.lstrip("#"), keep_blank_values=False))
    return params


def parse_callback_url(url: str) -> CallbackResult:
    """Classify a login-callback URL."""
    params = callback_params(url)
    error = params.get("error")
    if error:
        return CallbackError(error=error, description=params.get("error_description"))
    code = params.get("code")
    if code:
        return AuthCode(code=code)
    access_token = params.get("access_token")
    if access_token:
        return ImplicitTokens(
            access_token=access_token,
            refresh_token=params.get("refresh_token"),
            expires_in=_parse_int(params.get("expires_in")),
        )
    return CallbackError(error="missing_credentials")


def is_login_callback(url: str, scheme: str) -> bool:
    """Return true when a URL uses the app scheme and a callback path."""
    parts = urlsplit(url)
    if parts.scheme.lower() != scheme.lower():
        return False
    segments = [parts.netloc, *parts.path.split("/")]
    segments = [segment for segment in segments if segment]
    return bool(segments) and segments[-1] in CALLBACK_SEGMENTS


def _parse_int(value: str | None) -> int | None:
    if value is None or not value.isdigit():
        return None
    return int(value)
