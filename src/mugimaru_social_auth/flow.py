"""OAuth2 認可コード + PKCE フロー (LINE / X 共通)"""

from __future__ import annotations

import structlog

from .callback import parse_callback_url
from .config import AuthConfig, ProviderCredentials
from .digest import DigestFunc, hashlib_sha256
from .exceptions import SocialAuthError
from .http_client import OAuthHttpClient
from .launcher import AuthorizationSession, AuthSessionLauncher
from .models import AuthorizationRequest, SocialAuthProfile
from .pkce import generate_code_challenge, generate_code_verifier, generate_state
from .providers import LINE, X, ProviderSpec

logger = structlog.stdlib.get_logger(__name__)


def create_authorization_request(
    spec: ProviderSpec,
    config: AuthConfig,
    digest: DigestFunc = hashlib_sha256,
) -> AuthorizationRequest:
    """試行ごとに新しい state とコードベリファイアを持つ認可リクエストを作る。

    Raises:
        ConfigurationError: クライアント ID が設定されていない場合
        WeakRandomSourceError: 安全な乱数源が利用できない場合
    """
    return _build_request(spec, config, config.require_credentials(spec.provider), digest)


def _build_request(
    spec: ProviderSpec,
    config: AuthConfig,
    credentials: ProviderCredentials,
    digest: DigestFunc,
) -> AuthorizationRequest:
    state = generate_state(allow_weak_random=config.allow_weak_random)
    code_verifier = generate_code_verifier(allow_weak_random=config.allow_weak_random)
    return AuthorizationRequest(
        provider=spec.provider,
        authorize_endpoint=spec.authorize_url,
        client_id=credentials.client_id,
        redirect_uri=config.resolve_redirect_uri(),
        scope=spec.scope,
        state=state,
        code_verifier=code_verifier,
        code_challenge=generate_code_challenge(code_verifier, digest),
    )


async def run_oauth_pkce_flow(
    spec: ProviderSpec,
    config: AuthConfig,
    launcher: AuthSessionLauncher,
    http_client: OAuthHttpClient | None = None,
    digest: DigestFunc = hashlib_sha256,
) -> SocialAuthProfile:
    """認可 → コールバック検証 → トークン交換 → プロフィール取得を順に実行する。

    設定エラーはネットワークや画面操作の前に送出する。失敗時のリトライは行わず、
    呼び出し元は新しい認可リクエストからやり直す。

    Args:
        spec: プロバイダー定義
        config: 設定
        launcher: 認可画面を開くランチャー
        http_client: トークン / プロフィール取得クライアント。省略時は設定から生成
        digest: コードチャレンジに使う SHA-256 実装

    Returns:
        正規化済みプロフィール
    """
    credentials = config.require_credentials(spec.provider)
    request = _build_request(spec, config, credentials, digest)
    client = http_client or OAuthHttpClient(config.http_timeout_seconds)
    log = logger.bind(provider=spec.provider.value)

    log.info("authorization_started", redirect_uri=request.redirect_uri)
    try:
        session = AuthorizationSession(launcher)
        callback_url = await session.run(request.authorize_url(), request.redirect_uri)
        callback = parse_callback_url(callback_url, request.state)
        token = await client.exchange_code(spec, request, callback.code, credentials.client_secret)
        raw_profile = await client.fetch_profile(spec, token.access_token)
        profile = spec.normalize_profile(token, raw_profile)
    except SocialAuthError as e:
        log.warning("authorization_failed", code=e.code)
        raise
    log.info("authorization_succeeded")
    return profile


async def authenticate_with_line(
    config: AuthConfig,
    launcher: AuthSessionLauncher,
    http_client: OAuthHttpClient | None = None,
) -> SocialAuthProfile:
    """LINE ログインを実行する。"""
    return await run_oauth_pkce_flow(LINE, config, launcher, http_client)


async def authenticate_with_x(
    config: AuthConfig,
    launcher: AuthSessionLauncher,
    http_client: OAuthHttpClient | None = None,
) -> SocialAuthProfile:
    """X ログインを実行する。"""
    return await run_oauth_pkce_flow(X, config, launcher, http_client)
