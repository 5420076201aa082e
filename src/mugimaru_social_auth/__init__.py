"""mugimaru social auth library."""

from .callback import build_callback_deep_link, parse_callback_url
from .config import AuthConfig, ProviderCredentials, load
from .digest import hashlib_sha256, sha256
from .exceptions import (
    AuthSessionError,
    ConfigurationError,
    MissingCodeError,
    MissingUserIdError,
    ProfileFetchError,
    ProviderError,
    SocialAuthError,
    SocialAuthErrorCodes,
    StateMismatchError,
    TokenExchangeError,
    UserCancelledError,
    WeakRandomSourceError,
)
from .flow import (
    authenticate_with_line,
    authenticate_with_x,
    create_authorization_request,
    run_oauth_pkce_flow,
)
from .http_client import OAuthHttpClient
from .jwt_claims import UntrustedClaims, extract_untrusted_claims
from .launcher import AuthorizationSession, AuthSessionLauncher, LoopbackSessionLauncher
from .logger import new_logger
from .models import (
    AuthorizationRequest,
    AuthSessionResult,
    AuthSessionState,
    CallbackResult,
    SocialAccount,
    SocialAuthProfile,
    SocialProvider,
    TokenResponse,
)
from .pkce import (
    WeakRandomSourceWarning,
    generate_code_challenge,
    generate_code_verifier,
    generate_state,
)
from .providers import LINE, X, ProviderSpec, get_provider
from .service import SocialLoginService
from .store import InMemorySocialAccountStore, SocialAccountStore

__all__ = [
    "AuthConfig",
    "ProviderCredentials",
    "load",
    "SocialProvider",
    "AuthorizationRequest",
    "CallbackResult",
    "TokenResponse",
    "SocialAuthProfile",
    "AuthSessionResult",
    "AuthSessionState",
    "SocialAccount",
    "sha256",
    "hashlib_sha256",
    "generate_state",
    "generate_code_verifier",
    "generate_code_challenge",
    "WeakRandomSourceWarning",
    "UntrustedClaims",
    "extract_untrusted_claims",
    "parse_callback_url",
    "build_callback_deep_link",
    "AuthSessionLauncher",
    "AuthorizationSession",
    "LoopbackSessionLauncher",
    "ProviderSpec",
    "LINE",
    "X",
    "get_provider",
    "OAuthHttpClient",
    "create_authorization_request",
    "run_oauth_pkce_flow",
    "authenticate_with_line",
    "authenticate_with_x",
    "SocialAccountStore",
    "InMemorySocialAccountStore",
    "SocialLoginService",
    "new_logger",
    "SocialAuthError",
    "SocialAuthErrorCodes",
    "ConfigurationError",
    "UserCancelledError",
    "AuthSessionError",
    "ProviderError",
    "StateMismatchError",
    "MissingCodeError",
    "MissingUserIdError",
    "TokenExchangeError",
    "ProfileFetchError",
    "WeakRandomSourceError",
]
