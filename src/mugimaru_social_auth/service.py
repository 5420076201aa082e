"""ソーシャルログインとアカウント登録をまとめるサービス"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import structlog

from .config import AuthConfig
from .flow import run_oauth_pkce_flow
from .http_client import OAuthHttpClient
from .launcher import AuthSessionLauncher
from .models import SocialAccount, SocialAuthProfile, SocialProvider
from .providers import ProviderSpec, get_provider
from .store import SocialAccountStore

logger = structlog.stdlib.get_logger(__name__)


def to_social_account(
    spec: ProviderSpec, profile: SocialAuthProfile, now: datetime
) -> SocialAccount:
    """プロフィールを保存用アカウントに変換する。

    名前が空ならプロバイダー既定名、メールは前後空白除去と小文字化、空値は None にする。
    """
    email = (profile.email or "").strip().lower()
    avatar_url = (profile.avatar_url or "").strip()
    return SocialAccount(
        external_id=profile.external_id,
        provider=spec.provider,
        name=profile.name.strip() or spec.default_name,
        email=email or None,
        avatar_url=avatar_url or None,
        created_at=now,
        last_login_at=now,
    )


class SocialLoginService:
    """OAuth PKCE フローを実行し、結果のアカウントをストアに登録する。"""

    def __init__(
        self,
        config: AuthConfig,
        launcher: AuthSessionLauncher,
        store: SocialAccountStore,
        http_client: OAuthHttpClient | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._launcher = launcher
        self._store = store
        self._http_client = http_client
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def login(self, provider: SocialProvider | str) -> SocialAccount:
        """指定プロバイダーでログインし、登録済みアカウントを返す。

        Raises:
            ValueError: 未対応のプロバイダーの場合
            SocialAuthError: フローのいずれかの段階で失敗した場合
        """
        spec = get_provider(provider)
        profile = await run_oauth_pkce_flow(spec, self._config, self._launcher, self._http_client)
        account = await self._store.upsert(to_social_account(spec, profile, self._clock()))
        logger.info("social_account_upserted", provider=spec.provider.value)
        return account
