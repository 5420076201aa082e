"""トークン交換とプロフィール取得の HTTP クライアント実装"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from .exceptions import ProfileFetchError, TokenExchangeError
from .models import AuthorizationRequest, TokenResponse
from .providers import ProviderSpec

logger = structlog.stdlib.get_logger(__name__)


class OAuthHttpClient:
    """httpx を使ったトークンエンドポイント / プロフィールエンドポイントのクライアント。

    リトライはしない。失敗はすべて呼び出し元に伝播する。
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._timeout_seconds = timeout_seconds

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout_seconds)

    async def exchange_code(
        self,
        spec: ProviderSpec,
        request: AuthorizationRequest,
        code: str,
        client_secret: str | None = None,
    ) -> TokenResponse:
        """認可コードとコードベリファイアをアクセストークンと交換する。

        Raises:
            TokenExchangeError: 通信失敗、2xx 以外、またはレスポンスが不正な場合
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": request.redirect_uri,
            "client_id": request.client_id,
            "code_verifier": request.code_verifier,
        }
        if client_secret:
            data["client_secret"] = client_secret

        try:
            async with self._make_client() as client:
                resp = await client.post(
                    spec.token_url,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            raise TokenExchangeError(
                f"{spec.label} token exchange failed: {e}", cause=e
            ) from e

        if not resp.is_success:
            logger.warning(
                "token_exchange_failed", provider=spec.provider.value, status=resp.status_code
            )
            raise TokenExchangeError(
                f"{spec.label} token exchange failed ({resp.status_code}): {resp.text}",
                status=resp.status_code,
                body=resp.text,
            )

        try:
            return TokenResponse.from_response(_json_object(resp))
        except (ValueError, KeyError) as e:
            raise TokenExchangeError(
                f"{spec.label} token response was invalid: {e}",
                status=resp.status_code,
                body=resp.text,
                cause=e,
            ) from e

    async def fetch_profile(self, spec: ProviderSpec, access_token: str) -> dict[str, Any]:
        """アクセストークンを Bearer 認証に使ってプロフィールを取得する。

        Raises:
            ProfileFetchError: 通信失敗、2xx 以外、またはレスポンスが JSON オブジェクトでない場合
        """
        try:
            async with self._make_client() as client:
                resp = await client.get(
                    spec.profile_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            raise ProfileFetchError(f"{spec.label} profile fetch failed: {e}", cause=e) from e

        if not resp.is_success:
            logger.warning(
                "profile_fetch_failed", provider=spec.provider.value, status=resp.status_code
            )
            raise ProfileFetchError(
                f"{spec.label} profile fetch failed ({resp.status_code}): {resp.text}",
                status=resp.status_code,
                body=resp.text,
            )

        try:
            return _json_object(resp)
        except ValueError as e:
            raise ProfileFetchError(
                f"{spec.label} profile response was invalid: {e}",
                status=resp.status_code,
                body=resp.text,
                cause=e,
            ) from e


def _json_object(resp: httpx.Response) -> dict[str, Any]:
    data = resp.json()
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data
