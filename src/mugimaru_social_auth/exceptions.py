"""social_auth ライブラリの例外型定義"""

from __future__ import annotations


class SocialAuthError(Exception):
    """social_auth ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class SocialAuthErrorCodes:
    """SocialAuthError のエラーコード定数。"""

    CONFIGURATION_ERROR: str = "CONFIGURATION_ERROR"
    USER_CANCELLED: str = "USER_CANCELLED"
    SESSION_FAILED: str = "SESSION_FAILED"
    PROVIDER_ERROR: str = "PROVIDER_ERROR"
    STATE_MISMATCH: str = "STATE_MISMATCH"
    MISSING_CODE: str = "MISSING_CODE"
    MISSING_USER_ID: str = "MISSING_USER_ID"
    TOKEN_EXCHANGE_FAILED: str = "TOKEN_EXCHANGE_FAILED"
    PROFILE_FETCH_FAILED: str = "PROFILE_FETCH_FAILED"
    WEAK_RANDOM_SOURCE: str = "WEAK_RANDOM_SOURCE"


class ConfigurationError(SocialAuthError):
    """必須設定の欠落、またはコールバック URL が不正。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(SocialAuthErrorCodes.CONFIGURATION_ERROR, message, cause)


class UserCancelledError(SocialAuthError):
    """ユーザーが認証画面を閉じた。"""

    def __init__(self, message: str = "Authentication was cancelled.") -> None:
        super().__init__(SocialAuthErrorCodes.USER_CANCELLED, message)


class AuthSessionError(SocialAuthError):
    """認証セッションの仕組み自体が失敗した。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(SocialAuthErrorCodes.SESSION_FAILED, message, cause)


class ProviderError(SocialAuthError):
    """プロバイダーが error パラメータ付きでリダイレクトした。"""

    def __init__(self, error: str, error_description: str | None = None) -> None:
        message = f"{error}: {error_description}" if error_description else error
        super().__init__(SocialAuthErrorCodes.PROVIDER_ERROR, message)
        self.error = error
        self.error_description = error_description


class StateMismatchError(SocialAuthError):
    """state パラメータが一致しない (CSRF 対策)。"""

    def __init__(self, message: str = "Invalid OAuth state.") -> None:
        super().__init__(SocialAuthErrorCodes.STATE_MISMATCH, message)


class MissingCodeError(SocialAuthError):
    """コールバックに認可コードが含まれていない。"""

    def __init__(
        self, message: str = "Authorization code was not returned by provider."
    ) -> None:
        super().__init__(SocialAuthErrorCodes.MISSING_CODE, message)


class MissingUserIdError(SocialAuthError):
    """プロフィールにユーザー ID が含まれていない。"""

    def __init__(self, message: str) -> None:
        super().__init__(SocialAuthErrorCodes.MISSING_USER_ID, message)


class _HttpStatusError(SocialAuthError):
    def __init__(
        self,
        code: str,
        message: str,
        status: int | None = None,
        body: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(code, message, cause)
        self.status = status
        self.body = body


class TokenExchangeError(_HttpStatusError):
    """トークンエンドポイントが 2xx 以外を返した、または通信に失敗した。"""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            SocialAuthErrorCodes.TOKEN_EXCHANGE_FAILED, message, status, body, cause
        )


class ProfileFetchError(_HttpStatusError):
    """プロフィールエンドポイントが 2xx 以外を返した、または通信に失敗した。"""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            SocialAuthErrorCodes.PROFILE_FETCH_FAILED, message, status, body, cause
        )


class WeakRandomSourceError(SocialAuthError):
    """暗号論的乱数源が利用できない。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(SocialAuthErrorCodes.WEAK_RANDOM_SOURCE, message, cause)
