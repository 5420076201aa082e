"""プロバイダー定義 (エンドポイント・スコープ・プロフィール正規化)"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import structlog

from .exceptions import MissingUserIdError
from .jwt_claims import extract_untrusted_claims
from .models import SocialAuthProfile, SocialProvider, TokenResponse

ProfileNormalizer = Callable[[TokenResponse, dict[str, Any]], SocialAuthProfile]

LINE_AUTHORIZE_URL = "https://access.line.me/oauth2/v2.1/authorize"
LINE_TOKEN_URL = "https://api.line.me/oauth2/v2.1/token"
LINE_PROFILE_URL = "https://api.line.me/v2/profile"
LINE_SCOPE = "openid profile email"
LINE_DEFAULT_NAME = "LINE User"

X_AUTHORIZE_URL = "https://twitter.com/i/oauth2/authorize"
X_TOKEN_URL = "https://api.twitter.com/2/oauth2/token"
X_PROFILE_URL = "https://api.twitter.com/2/users/me?user.fields=name,username,profile_image_url"
X_SCOPE = "tweet.read users.read offline.access"
X_DEFAULT_NAME = "X User"

logger = structlog.stdlib.get_logger(__name__)


@dataclass(frozen=True)
class ProviderSpec:
    """OAuth PKCE フローをプロバイダーごとに差し替えるためのパラメータ。"""

    provider: SocialProvider
    label: str
    authorize_url: str
    token_url: str
    profile_url: str
    scope: str
    default_name: str
    normalize_profile: ProfileNormalizer


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def normalize_line_profile(token: TokenResponse, profile: dict[str, Any]) -> SocialAuthProfile:
    """LINE のプロフィールと ID トークンから SocialAuthProfile を組み立てる。

    プロフィール API はメールアドレスを返さないため、email は ID トークンのクレームからのみ取る。
    """
    claims = extract_untrusted_claims(token.id_token)
    external_id = _text(profile.get("userId"))
    if external_id is None and claims is not None and claims.sub:
        logger.info("line_user_id_from_id_token")
        external_id = claims.sub
    if external_id is None:
        raise MissingUserIdError("LINE profile did not include user id.")

    name = _text(profile.get("displayName")) or (claims.name if claims else None)
    return SocialAuthProfile(
        external_id=external_id,
        name=name or LINE_DEFAULT_NAME,
        email=claims.email if claims else None,
        avatar_url=_text(profile.get("pictureUrl")),
    )


def normalize_x_profile(token: TokenResponse, profile: dict[str, Any]) -> SocialAuthProfile:
    """X の /users/me レスポンスから SocialAuthProfile を組み立てる。

    X には ID トークンが無いため data.id が無ければ失敗とする。email は常に None。
    """
    data = profile.get("data")
    user: dict[str, Any] = data if isinstance(data, dict) else {}
    external_id = _text(user.get("id"))
    if external_id is None:
        raise MissingUserIdError("X profile did not include user id.")
    return SocialAuthProfile(
        external_id=external_id,
        name=_text(user.get("name")) or _text(user.get("username")) or X_DEFAULT_NAME,
        email=None,
        avatar_url=_text(user.get("profile_image_url")),
    )


LINE = ProviderSpec(
    provider=SocialProvider.LINE,
    label="LINE",
    authorize_url=LINE_AUTHORIZE_URL,
    token_url=LINE_TOKEN_URL,
    profile_url=LINE_PROFILE_URL,
    scope=LINE_SCOPE,
    default_name=LINE_DEFAULT_NAME,
    normalize_profile=normalize_line_profile,
)

X = ProviderSpec(
    provider=SocialProvider.X,
    label="X",
    authorize_url=X_AUTHORIZE_URL,
    token_url=X_TOKEN_URL,
    profile_url=X_PROFILE_URL,
    scope=X_SCOPE,
    default_name=X_DEFAULT_NAME,
    normalize_profile=normalize_x_profile,
)

_PROVIDERS = {spec.provider: spec for spec in (LINE, X)}


def get_provider(provider: SocialProvider | str) -> ProviderSpec:
    """プロバイダー名から ProviderSpec を返す。

    Raises:
        ValueError: 未対応のプロバイダーの場合
    """
    return _PROVIDERS[SocialProvider(provider)]
