"""OAuth リダイレクトコールバックの解析と state 検証"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs, urlencode, urlsplit

from .config import DEFAULT_APP_SCHEME, REDIRECT_PATH
from .exceptions import MissingCodeError, ProviderError, StateMismatchError
from .models import CallbackResult

# Web のコールバックページからアプリへ転送するパラメータ
RELAY_PARAMS = ("code", "state", "error", "error_description")


def _first(params: dict[str, list[str]], name: str) -> str:
    values = params.get(name)
    return values[0] if values else ""


def _states_equal(actual: str, expected: str) -> bool:
    return hmac.compare_digest(actual.encode("utf-8"), expected.encode("utf-8"))


def parse_callback_url(url: str, expected_state: str) -> CallbackResult:
    """リダイレクト URL を解析し、認可コードを取り出す。

    判定順序:
        1. error があれば ProviderError (state が無い応答もあるため最初に判定する)
        2. state が無い、または expected_state と完全一致しなければ StateMismatchError
        3. code が無ければ MissingCodeError

    Raises:
        ProviderError: プロバイダーがエラーを返した場合
        StateMismatchError: state が一致しない場合
        MissingCodeError: 認可コードが含まれていない場合
    """
    params = parse_qs(urlsplit(url).query, keep_blank_values=True)

    error = _first(params, "error")
    if error:
        raise ProviderError(error, _first(params, "error_description") or None)

    state = _first(params, "state")
    if not state or not expected_state or not _states_equal(state, expected_state):
        raise StateMismatchError()

    code = _first(params, "code")
    if not code:
        raise MissingCodeError()

    return CallbackResult(code=code)


def build_callback_deep_link(
    params: Mapping[str, Any] | None = None, scheme: str = DEFAULT_APP_SCHEME
) -> str:
    """https コールバックで受けたパラメータをアプリのディープリンクに載せ替える。

    code / state / error / error_description のうち文字列のものだけを転送する。
    """
    query: dict[str, str] = {}
    for name in RELAY_PARAMS:
        value = (params or {}).get(name)
        if isinstance(value, str):
            query[name] = value
    qs = urlencode(query)
    base = f"{scheme}://{REDIRECT_PATH}"
    return f"{base}?{qs}" if qs else base
