"""対話的な認可セッションの起動と状態管理"""

from __future__ import annotations

import asyncio
import html
import webbrowser
from abc import ABC, abstractmethod
from typing import Callable
from urllib.parse import urlsplit

import structlog
from aiohttp import web

from .exceptions import AuthSessionError, SocialAuthError, UserCancelledError
from .models import AuthSessionResult, AuthSessionState

logger = structlog.stdlib.get_logger(__name__)

_LOOPBACK_HOSTS = ("127.0.0.1", "localhost")


class AuthSessionLauncher(ABC):
    """認可画面を開き、リダイレクトを待つランチャーの抽象基底クラス。"""

    @abstractmethod
    async def open(self, auth_url: str, redirect_uri: str) -> AuthSessionResult:
        """auth_url を開き、redirect_uri へのリダイレクトかユーザーの中断まで待機する。

        Returns:
            success (url にコールバック URL) / cancel / dismiss のいずれか
        """
        ...


class AuthorizationSession:
    """1 回の認可セッション。

    IDLE → AWAITING_REDIRECT → SUCCEEDED / CANCELLED / FAILED の順に遷移し、再実行できない。
    """

    def __init__(self, launcher: AuthSessionLauncher) -> None:
        self._launcher = launcher
        self._state = AuthSessionState.IDLE

    @property
    def state(self) -> AuthSessionState:
        return self._state

    async def run(self, auth_url: str, redirect_uri: str) -> str:
        """セッションを開始し、プロバイダーから返されたコールバック URL を返す。

        Raises:
            UserCancelledError: ユーザーが認可画面を閉じた場合
            AuthSessionError: ランチャー自体が失敗した、または URL が返されなかった場合
        """
        if self._state is not AuthSessionState.IDLE:
            raise AuthSessionError("Authorization session has already been started")
        self._state = AuthSessionState.AWAITING_REDIRECT
        try:
            result = await self._launcher.open(auth_url, redirect_uri)
        except asyncio.CancelledError:
            self._state = AuthSessionState.CANCELLED
            raise
        except SocialAuthError:
            self._state = AuthSessionState.FAILED
            raise
        except Exception as e:
            self._state = AuthSessionState.FAILED
            raise AuthSessionError(f"Authentication session failed: {e}", cause=e) from e

        if result.type != "success":
            self._state = AuthSessionState.CANCELLED
            raise UserCancelledError()
        if not result.url:
            self._state = AuthSessionState.FAILED
            raise AuthSessionError("Provider did not return a callback URL.")
        self._state = AuthSessionState.SUCCEEDED
        return result.url


def _callback_page(error: str | None) -> str:
    if error:
        title = "Authentication Failed"
        body = f"<p>Error: {html.escape(error)}</p>"
    else:
        title = "Authentication Complete"
        body = ""
    return (
        f"<html><body><h1>{title}</h1>{body}"
        "<p>You can close this window and return to the app.</p></body></html>"
    )


class LoopbackSessionLauncher(AuthSessionLauncher):
    """システムブラウザで認可 URL を開き、ループバックアドレスでコールバックを受けるランチャー。

    redirect_uri は http://127.0.0.1[:port]/path または http://localhost[:port]/path であること。
    """

    def __init__(
        self,
        open_browser: Callable[[str], bool] | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Args:
            open_browser: URL を開く関数。既定は webbrowser.open
            timeout: コールバック待ちの上限秒数。None なら無制限、超過時は dismiss を返す
        """
        self._open_browser = open_browser or webbrowser.open
        self._timeout = timeout

    async def open(self, auth_url: str, redirect_uri: str) -> AuthSessionResult:
        target = urlsplit(redirect_uri)
        if target.scheme != "http" or target.hostname not in _LOOPBACK_HOSTS:
            raise AuthSessionError(
                f"Loopback launcher requires an http loopback redirect URI, got {redirect_uri!r}"
            )
        host = target.hostname
        port = target.port or 80
        path = target.path or "/"
        base_uri = redirect_uri.split("?", 1)[0]

        received: asyncio.Future[str] = asyncio.get_running_loop().create_future()

        async def handle_callback(request: web.Request) -> web.Response:
            if not received.done():
                received.set_result(f"{base_uri}?{request.query_string}")
            return web.Response(
                text=_callback_page(request.query.get("error")),
                content_type="text/html",
            )

        app = web.Application()
        app.router.add_get(path, handle_callback)
        runner = web.AppRunner(app)
        await runner.setup()
        try:
            site = web.TCPSite(runner, host=host, port=port)
            await site.start()
            logger.info("loopback_callback_listening", host=host, port=port, path=path)

            if not await asyncio.to_thread(self._open_browser, auth_url):
                raise AuthSessionError("Could not open a browser for authorization")

            try:
                url = await asyncio.wait_for(received, timeout=self._timeout)
            except TimeoutError:
                logger.info("loopback_callback_timeout", timeout=self._timeout)
                return AuthSessionResult(type="dismiss")
            return AuthSessionResult(type="success", url=url)
        finally:
            await runner.cleanup()
