"""ソーシャルログイン関連データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, StrEnum, auto
from typing import Any, Literal
from urllib.parse import urlencode

CODE_CHALLENGE_METHOD = "S256"


class SocialProvider(StrEnum):
    """対応しているソーシャルログインプロバイダー。"""

    LINE = "line"
    X = "x"


@dataclass(frozen=True)
class AuthorizationRequest:
    """1 回のサインイン試行に対応する認可リクエスト。

    state と code_verifier は試行ごとに生成し、再利用しない。
    code_verifier はトークン交換時にのみ送信し、認可 URL には含めない。
    """

    provider: SocialProvider
    authorize_endpoint: str
    client_id: str
    redirect_uri: str
    scope: str
    state: str = field(repr=False)
    code_verifier: str = field(repr=False)
    code_challenge: str

    def authorize_params(self) -> dict[str, str]:
        """認可エンドポイントに渡すクエリパラメータを返す。"""
        return {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "state": self.state,
            "scope": self.scope,
            "code_challenge": self.code_challenge,
            "code_challenge_method": CODE_CHALLENGE_METHOD,
        }

    def authorize_url(self) -> str:
        """ブラウザで開く認可 URL を返す。"""
        return f"{self.authorize_endpoint}?{urlencode(self.authorize_params())}"


@dataclass(frozen=True)
class CallbackResult:
    """検証済みコールバックから取り出した認可コード。"""

    code: str = field(repr=False)


@dataclass
class TokenResponse:
    """トークンエンドポイントのレスポンス。プロフィール取得に 1 度だけ使い、保存しない。"""

    access_token: str = field(repr=False)
    token_type: str = "Bearer"
    expires_in: int | None = None
    id_token: str | None = field(default=None, repr=False)
    refresh_token: str | None = field(default=None, repr=False)
    scope: str = ""

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> TokenResponse:
        """OAuth2 レスポンス辞書から TokenResponse を生成する。

        Raises:
            KeyError: access_token が含まれていない場合
            ValueError: access_token が空でない文字列でない、または expires_in が整数にできない場合
        """
        access_token = response["access_token"]
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("access_token must be a non-empty string")
        expires_in = response.get("expires_in")
        if expires_in is not None:
            try:
                expires_in = int(expires_in)
            except (TypeError, ValueError) as e:
                raise ValueError(f"expires_in is not an integer: {expires_in!r}") from e
        return cls(
            access_token=access_token,
            token_type=_optional_str(response.get("token_type")) or "Bearer",
            expires_in=expires_in,
            id_token=_optional_str(response.get("id_token")),
            refresh_token=_optional_str(response.get("refresh_token")),
            scope=_optional_str(response.get("scope")) or "",
        )


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class SocialAuthProfile:
    """プロバイダー非依存に正規化したプロフィール。"""

    external_id: str
    name: str
    email: str | None = None
    avatar_url: str | None = None


class AuthSessionState(Enum):
    """認証セッションの状態。"""

    IDLE = auto()
    AWAITING_REDIRECT = auto()
    SUCCEEDED = auto()
    CANCELLED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class AuthSessionResult:
    """ランチャーが返す認証セッションの結果。"""

    type: Literal["success", "cancel", "dismiss"]
    url: str | None = None


@dataclass
class SocialAccount:
    """ソーシャルログインで作成・更新されるアカウント。"""

    external_id: str
    provider: SocialProvider
    name: str
    email: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    last_login_at: datetime | None = None
