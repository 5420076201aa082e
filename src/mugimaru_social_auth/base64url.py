"""Base64URL (RFC 4648 §5, パディングなし) エンコード/デコード"""

from __future__ import annotations

import base64


def encode(data: bytes) -> str:
    """バイト列を URL-safe かつパディングなしの Base64 文字列に変換する。"""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def decode(data: str) -> bytes:
    """URL-safe Base64 文字列 (パディング有無どちらも可) をバイト列に戻す。

    Raises:
        ValueError: 長さが不正で復元できない場合
    """
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def decode_text(data: str) -> str:
    """URL-safe Base64 文字列をデコードしてテキストとして返す。

    UTF-8 として不正なバイト列は例外にせず、1 バイト 1 文字 (latin-1) で返す。
    """
    raw = decode(data)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")
