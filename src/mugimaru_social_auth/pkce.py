"""OAuth2 PKCE (RFC 7636) の state / コードベリファイア / コードチャレンジ生成"""

from __future__ import annotations

import os
import random
import warnings

import structlog

from . import base64url
from .digest import DigestFunc, hashlib_sha256
from .exceptions import WeakRandomSourceError

# RFC 7636 の unreserved 文字
PKCE_CHARSET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
STATE_LENGTH = 32
CODE_VERIFIER_LENGTH = 64
MIN_CODE_VERIFIER_LENGTH = 43
MAX_CODE_VERIFIER_LENGTH = 128

# この値以上のバイトは捨てる (剰余による偏りを避ける)
_REJECT_FROM = 256 - 256 % len(PKCE_CHARSET)

logger = structlog.stdlib.get_logger(__name__)


class WeakRandomSourceWarning(UserWarning):
    """暗号論的でない乱数源にフォールバックしたことを示す警告。"""


def _random_bytes(length: int, allow_weak_random: bool) -> bytes:
    try:
        return os.urandom(length)
    except NotImplementedError as e:
        if not allow_weak_random:
            raise WeakRandomSourceError(
                "No cryptographically secure random source is available", cause=e
            ) from e
        logger.warning("weak_random_source", requested_bytes=length)
        warnings.warn(
            "Falling back to a non-cryptographic random source; "
            "state and code_verifier are weaker than RFC 7636 requires",
            WeakRandomSourceWarning,
            stacklevel=3,
        )
        return random.Random().randbytes(length)


def random_string(length: int, *, allow_weak_random: bool = False) -> str:
    """PKCE 文字集合から length 文字のランダム文字列を生成する。

    Args:
        length: 生成する文字数
        allow_weak_random: 安全な乱数源が無い場合に弱い乱数源へのフォールバックを許可するか

    Raises:
        WeakRandomSourceError: 安全な乱数源が無く、フォールバックも許可されていない場合
    """
    chars: list[str] = []
    while len(chars) < length:
        for byte in _random_bytes(length - len(chars), allow_weak_random):
            if byte >= _REJECT_FROM:
                continue
            chars.append(PKCE_CHARSET[byte % len(PKCE_CHARSET)])
    return "".join(chars)


def generate_state(*, allow_weak_random: bool = False) -> str:
    """CSRF 対策用の state を生成する。"""
    return random_string(STATE_LENGTH, allow_weak_random=allow_weak_random)


def generate_code_verifier(
    length: int = CODE_VERIFIER_LENGTH, *, allow_weak_random: bool = False
) -> str:
    """PKCE コードベリファイアを生成する。

    Args:
        length: 文字数 (43〜128)

    Returns:
        unreserved 文字のみで構成されるコードベリファイア
    """
    if not MIN_CODE_VERIFIER_LENGTH <= length <= MAX_CODE_VERIFIER_LENGTH:
        raise ValueError(
            f"code_verifier length must be {MIN_CODE_VERIFIER_LENGTH}-"
            f"{MAX_CODE_VERIFIER_LENGTH}, got {length}"
        )
    return random_string(length, allow_weak_random=allow_weak_random)


def generate_code_challenge(verifier: str, digest: DigestFunc = hashlib_sha256) -> str:
    """コードベリファイアから S256 コードチャレンジを生成する。

    Args:
        verifier: generate_code_verifier で生成したコードベリファイア
        digest: SHA-256 実装。既定は hashlib、純 Python 実装も指定できる

    Returns:
        SHA-256 ハッシュを Base64URL エンコードしたコードチャレンジ
    """
    return base64url.encode(digest(verifier.encode("ascii")))
