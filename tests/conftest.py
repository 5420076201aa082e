"""ソーシャルログインテスト共通フィクスチャ"""

from __future__ import annotations

from urllib.parse import parse_qs, urlencode, urlsplit

import pytest
from mugimaru_social_auth.config import AuthConfig
from mugimaru_social_auth.launcher import AuthSessionLauncher
from mugimaru_social_auth.models import AuthSessionResult

REDIRECT_URI = "https://mugimaru.example.com/auth/callback"


class EchoLauncher(AuthSessionLauncher):
    """認可 URL の state をそのまま返すテスト用ランチャー。"""

    def __init__(self) -> None:
        self.code = "auth-code-123"
        self.state_override: str | None = None
        self.auth_urls: list[str] = []

    async def open(self, auth_url: str, redirect_uri: str) -> AuthSessionResult:
        self.auth_urls.append(auth_url)
        params = parse_qs(urlsplit(auth_url).query)
        query = {
            "code": self.code,
            "state": self.state_override or params["state"][0],
        }
        return AuthSessionResult(type="success", url=f"{redirect_uri}?{urlencode(query)}")


@pytest.fixture
def echo_launcher() -> EchoLauncher:
    return EchoLauncher()


@pytest.fixture
def config() -> AuthConfig:
    return AuthConfig.model_validate(
        {
            "line": {"client_id": "line-channel", "client_secret": "line-secret"},
            "x": {"client_id": "x-client"},
            "redirect_uri": REDIRECT_URI,
        }
    )
