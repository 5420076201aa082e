"""署名を検証しない JWT ペイロードの取り出し

ここで得られるクレームは補助情報 (LINE のメールアドレスなど) にのみ使う。
本人確認の根拠にはしない。
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from . import base64url


@dataclass(frozen=True)
class UntrustedClaims:
    """署名未検証の JWT クレーム。"""

    sub: str | None = None
    name: str | None = None
    email: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def extract_untrusted_claims(token: Any) -> UntrustedClaims | None:
    """コンパクト JWT の 2 番目のセグメントをデコードする。

    署名は検証しない。文字列でない値、セグメント不足やデコード・JSON パースの失敗時は None を返す。
    """
    if not isinstance(token, str) or not token:
        return None
    parts = token.split(".")
    if len(parts) < 2:
        return None
    try:
        payload = json.loads(base64url.decode_text(parts[1]))
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return UntrustedClaims(
        sub=_optional_str(payload.get("sub")),
        name=_optional_str(payload.get("name")),
        email=_optional_str(payload.get("email")),
        raw=payload,
    )
