"""コールバック解析と state 検証のユニットテスト"""

import pytest
from mugimaru_social_auth.callback import build_callback_deep_link, parse_callback_url
from mugimaru_social_auth.exceptions import (
    MissingCodeError,
    ProviderError,
    SocialAuthErrorCodes,
    StateMismatchError,
)

CALLBACK = "https://mugimaru.example.com/auth/callback"


def test_valid_callback_returns_code() -> None:
    """state が一致し code があれば認可コードを返すこと。"""
    result = parse_callback_url(f"{CALLBACK}?code=abc123&state=s-1", "s-1")
    assert result.code == "abc123"


def test_deep_link_callback() -> None:
    """アプリのディープリンク形式でも解析できること。"""
    result = parse_callback_url("mugimaru://auth/callback?state=s-1&code=xyz", "s-1")
    assert result.code == "xyz"


@pytest.mark.parametrize(
    ("url", "expected_state"),
    [
        (f"{CALLBACK}?code=abc&state=other", "s-1"),
        (f"{CALLBACK}?code=abc", "s-1"),
        (f"{CALLBACK}?code=abc&state=", "s-1"),
        (f"{CALLBACK}?code=abc&state=s-1", ""),
        (f"{CALLBACK}?code=abc&state=S-1", "s-1"),
        (f"{CALLBACK}?code=abc&state=s-1x", "s-1"),
    ],
)
def test_state_mismatch(url: str, expected_state: str) -> None:
    """state が完全一致しない場合は StateMismatchError になること。"""
    with pytest.raises(StateMismatchError) as exc_info:
        parse_callback_url(url, expected_state)
    assert exc_info.value.code == SocialAuthErrorCodes.STATE_MISMATCH


def test_error_takes_precedence_over_state() -> None:
    """error があれば state の不一致より優先して報告されること。"""
    with pytest.raises(ProviderError) as exc_info:
        parse_callback_url(
            f"{CALLBACK}?error=access_denied&error_description=User+denied", "s-1"
        )
    err = exc_info.value
    assert err.code == SocialAuthErrorCodes.PROVIDER_ERROR
    assert err.error == "access_denied"
    assert err.error_description == "User denied"
    assert str(err) == "PROVIDER_ERROR: access_denied: User denied"


def test_error_without_description() -> None:
    """error_description が無い場合は error のみを報告すること。"""
    with pytest.raises(ProviderError) as exc_info:
        parse_callback_url(f"{CALLBACK}?error=server_error&state=s-1", "s-1")
    assert exc_info.value.error_description is None
    assert str(exc_info.value) == "PROVIDER_ERROR: server_error"


def test_missing_code() -> None:
    """state が一致しても code が無ければ MissingCodeError になること。"""
    with pytest.raises(MissingCodeError):
        parse_callback_url(f"{CALLBACK}?state=s-1", "s-1")


def test_non_ascii_state_does_not_crash() -> None:
    """ASCII 以外の state でも比較で例外にならないこと。"""
    with pytest.raises(StateMismatchError):
        parse_callback_url(f"{CALLBACK}?code=a&state=%E3%81%82", "s-1")


def test_build_deep_link_forwards_known_params() -> None:
    """既知のパラメータだけを順序どおりにディープリンクへ転送すること。"""
    link = build_callback_deep_link(
        {"state": "s 1", "code": "c/1", "utm_source": "ad", "error": None}
    )
    assert link == "mugimaru://auth/callback?code=c%2F1&state=s+1"


def test_build_deep_link_without_params() -> None:
    """パラメータが無ければクエリを付けないこと。"""
    assert build_callback_deep_link() == "mugimaru://auth/callback"
    assert build_callback_deep_link({}, scheme="dogs") == "dogs://auth/callback"


def test_build_deep_link_round_trips_through_parser() -> None:
    """転送したディープリンクをそのまま解析できること。"""
    link = build_callback_deep_link({"code": "abc", "state": "s-1"})
    assert parse_callback_url(link, "s-1").code == "abc"
