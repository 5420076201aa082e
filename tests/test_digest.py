"""純 Python SHA-256 実装のユニットテスト"""

import hashlib

import pytest
from mugimaru_social_auth.digest import DIGEST_SIZE, hashlib_sha256, sha256


def test_empty_input() -> None:
    """空入力のダイジェストが既知の値になること。"""
    assert sha256(b"").hex() == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


def test_abc_vector() -> None:
    """NIST テストベクタ "abc"。"""
    assert sha256(b"abc").hex() == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_two_block_vector() -> None:
    """NIST テストベクタ (448 ビット、2 ブロックにまたがる)。"""
    message = b"abcdbcdecdefdefgefghfghighijhijkijkljklmklmnlmnomnopnopq"
    assert sha256(message).hex() == (
        "248d6a61d20638b8e5c026930c3e6039a33ce45964ff2167f6ecedd419db06c1"
    )


@pytest.mark.parametrize("length", [1, 55, 56, 63, 64, 65, 119, 120, 128, 1000])
def test_matches_hashlib_at_padding_boundaries(length: int) -> None:
    """パディング境界付近の長さで hashlib と一致すること。"""
    message = bytes(i % 251 for i in range(length))
    assert sha256(message) == hashlib.sha256(message).digest()


def test_digest_length() -> None:
    """ダイジェストは常に 32 バイトであること。"""
    for message in (b"", b"x", b"y" * 300):
        assert len(sha256(message)) == DIGEST_SIZE


def test_wraparound_heavy_input() -> None:
    """0xff が続く入力でも 32 ビット加算の桁あふれが正しく処理されること。"""
    message = b"\xff" * 200
    assert sha256(message) == hashlib_sha256(message)


def test_accepts_bytearray() -> None:
    """bytearray も受け付けること。"""
    assert sha256(bytearray(b"abc")) == sha256(b"abc")
