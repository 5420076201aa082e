"""ソーシャルログイン設定 (pydantic BaseModel)"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError
from .models import SocialProvider

DEFAULT_APP_SCHEME = "mugimaru"
REDIRECT_PATH = "auth/callback"

ENV_PREFIX = "MUGIMARU_"
ENV_LINE_CHANNEL_ID = f"{ENV_PREFIX}LINE_CHANNEL_ID"
ENV_LINE_CHANNEL_SECRET = f"{ENV_PREFIX}LINE_CHANNEL_SECRET"
ENV_X_CLIENT_ID = f"{ENV_PREFIX}X_CLIENT_ID"
ENV_X_CLIENT_SECRET = f"{ENV_PREFIX}X_CLIENT_SECRET"
ENV_OAUTH_REDIRECT_URI = f"{ENV_PREFIX}OAUTH_REDIRECT_URI"
ENV_APP_SCHEME = f"{ENV_PREFIX}APP_SCHEME"
ENV_OAUTH_ALLOW_LOOPBACK = f"{ENV_PREFIX}OAUTH_ALLOW_LOOPBACK"
ENV_OAUTH_HTTP_TIMEOUT = f"{ENV_PREFIX}OAUTH_HTTP_TIMEOUT"

_CLIENT_ID_ENV = {
    SocialProvider.LINE: ENV_LINE_CHANNEL_ID,
    SocialProvider.X: ENV_X_CLIENT_ID,
}

_HTTPS_URL_RE = re.compile(r"^https://[^/\s?#]+(?:[^\s]*)?$")
_LOOPBACK_URL_RE = re.compile(r"^http://(?:127\.0\.0\.1|localhost)(?::\d{1,5})?(?:/[^\s]*)?$")
_TRUTHY = {"1", "true", "yes", "on"}


class ProviderCredentials(BaseModel):
    """プロバイダーごとのクライアント資格情報。"""

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    # PoC 用。公開クライアントの PKCE では不要
    client_secret: str | None = None

    @field_validator("client_id", mode="before")
    @classmethod
    def _strip_client_id(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("client_secret", mode="before")
    @classmethod
    def _blank_secret_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class AuthConfig(BaseModel):
    """ソーシャルログイン設定全体。起動時に 1 度だけ構築する。"""

    model_config = ConfigDict(frozen=True)

    line: ProviderCredentials | None = None
    x: ProviderCredentials | None = None
    redirect_uri: str | None = None
    app_scheme: str = DEFAULT_APP_SCHEME
    allow_loopback_redirect: bool = False
    allow_weak_random: bool = False
    http_timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("redirect_uri", mode="before")
    @classmethod
    def _blank_redirect_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("app_scheme", mode="before")
    @classmethod
    def _default_scheme(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_APP_SCHEME
        if isinstance(value, str):
            return value.strip() or DEFAULT_APP_SCHEME
        return value

    @model_validator(mode="after")
    def _check_redirect_uri(self) -> AuthConfig:
        uri = self.redirect_uri
        if uri is None or _HTTPS_URL_RE.match(uri):
            return self
        if self.allow_loopback_redirect and _LOOPBACK_URL_RE.match(uri):
            return self
        raise ConfigurationError(
            f"{ENV_OAUTH_REDIRECT_URI} must be a valid https URL. "
            "Example: https://your-app.example.com/auth/callback"
        )

    def resolve_redirect_uri(self) -> str:
        """設定済みのコールバック URL、無ければアプリのディープリンクを返す。"""
        if self.redirect_uri:
            return self.redirect_uri
        return f"{self.app_scheme}://{REDIRECT_PATH}"

    def require_credentials(self, provider: SocialProvider) -> ProviderCredentials:
        """プロバイダーの資格情報を返す。

        Raises:
            ConfigurationError: クライアント ID が設定されていない場合
        """
        credentials: ProviderCredentials | None = getattr(self, provider.value)
        if credentials is None:
            raise ConfigurationError(
                f"Missing environment variable: {_CLIENT_ID_ENV[provider]}"
            )
        return credentials

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AuthConfig:
        """環境変数から AuthConfig を構築する。空文字は未設定として扱う。"""
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        data: dict[str, Any] = {
            "redirect_uri": get(ENV_OAUTH_REDIRECT_URI),
            "app_scheme": get(ENV_APP_SCHEME),
            "allow_loopback_redirect": (get(ENV_OAUTH_ALLOW_LOOPBACK) or "").lower() in _TRUTHY,
        }
        line_id = get(ENV_LINE_CHANNEL_ID)
        if line_id:
            data["line"] = {"client_id": line_id, "client_secret": get(ENV_LINE_CHANNEL_SECRET)}
        x_id = get(ENV_X_CLIENT_ID)
        if x_id:
            data["x"] = {"client_id": x_id, "client_secret": get(ENV_X_CLIENT_SECRET)}
        timeout = get(ENV_OAUTH_HTTP_TIMEOUT)
        if timeout is not None:
            data["http_timeout_seconds"] = timeout
        return _validate(data)


def _validate(data: dict[str, Any]) -> AuthConfig:
    try:
        return AuthConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Config validation failed: {e}", cause=e) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file: {path}", cause=e) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML: {path}", cause=e) from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root must be a mapping: {path}")
    return data


def load(base_path: Path, env_path: Path | None = None) -> AuthConfig:
    """YAML 設定ファイルを読み込んで AuthConfig を返す。

    base_path: ベース設定ファイルパス（必須）
    env_path: 環境別設定ファイルパス（オプション）。存在する場合はベースにマージ。
    """
    data = _read_yaml(base_path)
    if env_path is not None and env_path.exists():
        data = _deep_merge(data, _read_yaml(env_path))
    return _validate(data)
