"""OAuthHttpClient のユニットテスト（respx モック）"""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest
import respx
from mugimaru_social_auth.exceptions import (
    ProfileFetchError,
    SocialAuthErrorCodes,
    TokenExchangeError,
)
from mugimaru_social_auth.http_client import OAuthHttpClient
from mugimaru_social_auth.models import AuthorizationRequest, SocialProvider
from mugimaru_social_auth.providers import LINE, X

REDIRECT_URI = "https://mugimaru.example.com/auth/callback"


@pytest.fixture
def request_() -> AuthorizationRequest:
    return AuthorizationRequest(
        provider=SocialProvider.LINE,
        authorize_endpoint=LINE.authorize_url,
        client_id="line-channel",
        redirect_uri=REDIRECT_URI,
        scope=LINE.scope,
        state="s-1",
        code_verifier="v" * 64,
        code_challenge="c" * 43,
    )


def _form(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(request.content.decode())


@respx.mock
async def test_exchange_code_posts_form(request_: AuthorizationRequest) -> None:
    """コードとベリファイアをフォームで送り、トークンを返すこと。"""
    route = respx.post(LINE.token_url).mock(
        return_value=httpx.Response(
            200, json={"access_token": "at-1", "expires_in": 3600, "id_token": "h.p.s"}
        )
    )
    token = await OAuthHttpClient().exchange_code(LINE, request_, "code-1")

    assert token.access_token == "at-1"
    assert token.expires_in == 3600
    assert token.id_token == "h.p.s"
    sent = route.calls.last.request
    assert sent.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert _form(sent) == {
        "grant_type": ["authorization_code"],
        "code": ["code-1"],
        "redirect_uri": [REDIRECT_URI],
        "client_id": ["line-channel"],
        "code_verifier": ["v" * 64],
    }


@respx.mock
async def test_exchange_code_sends_client_secret(request_: AuthorizationRequest) -> None:
    """クライアントシークレットが設定されていれば送信すること。"""
    route = respx.post(LINE.token_url).mock(
        return_value=httpx.Response(200, json={"access_token": "at-1"})
    )
    await OAuthHttpClient().exchange_code(LINE, request_, "code-1", client_secret="line-secret")
    assert _form(route.calls.last.request)["client_secret"] == ["line-secret"]


@respx.mock
async def test_exchange_code_http_error(request_: AuthorizationRequest) -> None:
    """2xx 以外はステータスと本文付きの TokenExchangeError になること。"""
    respx.post(LINE.token_url).mock(
        return_value=httpx.Response(400, text='{"error":"invalid_grant"}')
    )
    with pytest.raises(TokenExchangeError) as exc_info:
        await OAuthHttpClient().exchange_code(LINE, request_, "code-1")
    err = exc_info.value
    assert err.code == SocialAuthErrorCodes.TOKEN_EXCHANGE_FAILED
    assert err.status == 400
    assert err.body == '{"error":"invalid_grant"}'
    assert "LINE token exchange failed (400)" in str(err)


@respx.mock
async def test_exchange_code_network_error(request_: AuthorizationRequest) -> None:
    """通信エラーはステータス無しの TokenExchangeError になること。"""
    respx.post(LINE.token_url).mock(side_effect=httpx.ConnectError("connection failed"))
    with pytest.raises(TokenExchangeError) as exc_info:
        await OAuthHttpClient().exchange_code(LINE, request_, "code-1")
    assert exc_info.value.status is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["at-1"]),
        httpx.Response(200, json={"token_type": "Bearer"}),
        httpx.Response(200, json={"access_token": None}),
        httpx.Response(200, json={"access_token": 123}),
        httpx.Response(200, json={"access_token": ""}),
        httpx.Response(200, json={"access_token": "at-1", "expires_in": {}}),
        httpx.Response(200, json={"access_token": "at-1", "expires_in": [3600]}),
        httpx.Response(200, json={"access_token": "at-1", "expires_in": "soon"}),
    ],
)
@respx.mock
async def test_exchange_code_invalid_body(
    request_: AuthorizationRequest, response: httpx.Response
) -> None:
    """不正なトークンレスポンスは TokenExchangeError になること。"""
    respx.post(LINE.token_url).mock(return_value=response)
    with pytest.raises(TokenExchangeError) as exc_info:
        await OAuthHttpClient().exchange_code(LINE, request_, "code-1")
    assert exc_info.value.status == 200


@respx.mock
async def test_exchange_code_drops_non_string_optional_fields(
    request_: AuthorizationRequest,
) -> None:
    """文字列でない id_token などは None として扱うこと。"""
    respx.post(LINE.token_url).mock(
        return_value=httpx.Response(
            200,
            json={"access_token": "at-1", "expires_in": "3600", "id_token": 123, "scope": None},
        )
    )
    token = await OAuthHttpClient().exchange_code(LINE, request_, "code-1")
    assert token.expires_in == 3600
    assert token.id_token is None
    assert token.scope == ""
    assert token.token_type == "Bearer"


@respx.mock
async def test_fetch_profile_sends_bearer_token() -> None:
    """アクセストークンを Bearer ヘッダーで送ること。"""
    route = respx.route(method="GET", host="api.twitter.com", path="/2/users/me").mock(
        return_value=httpx.Response(200, json={"data": {"id": "42"}})
    )
    profile = await OAuthHttpClient().fetch_profile(X, "at-1")
    assert profile == {"data": {"id": "42"}}
    sent = route.calls.last.request
    assert sent.headers["Authorization"] == "Bearer at-1"
    assert sent.url.params["user.fields"] == "name,username,profile_image_url"


@respx.mock
async def test_fetch_profile_http_error() -> None:
    """2xx 以外は ProfileFetchError になること。"""
    respx.get(LINE.profile_url).mock(return_value=httpx.Response(401, text="unauthorized"))
    with pytest.raises(ProfileFetchError) as exc_info:
        await OAuthHttpClient().fetch_profile(LINE, "at-1")
    err = exc_info.value
    assert err.code == SocialAuthErrorCodes.PROFILE_FETCH_FAILED
    assert err.status == 401
    assert err.body == "unauthorized"


@respx.mock
async def test_fetch_profile_network_error() -> None:
    """通信エラーは ProfileFetchError になること。"""
    respx.get(LINE.profile_url).mock(side_effect=httpx.ReadTimeout("timed out"))
    with pytest.raises(ProfileFetchError) as exc_info:
        await OAuthHttpClient(timeout_seconds=1).fetch_profile(LINE, "at-1")
    assert exc_info.value.status is None


@respx.mock
async def test_fetch_profile_non_object() -> None:
    """JSON オブジェクトでないプロフィールは ProfileFetchError になること。"""
    respx.get(LINE.profile_url).mock(return_value=httpx.Response(200, json=[1, 2]))
    with pytest.raises(ProfileFetchError):
        await OAuthHttpClient().fetch_profile(LINE, "at-1")
