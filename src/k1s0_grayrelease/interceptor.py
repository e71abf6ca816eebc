"""灰度判定に応じて遷移先 url を書き換える NavigationPort デコレーター"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from .models import NavigationRequest
from .navigation import NavigationPort, PageStack, current_page
from .paths import (
    SEPARATOR,
    is_gray_page,
    join_query,
    resolve_url,
    split_query,
    strip_gray_prefix,
    with_gray_prefix,
)
from .session import GrayReleaseSession
from .store import GrayVersionStore


class GrayNavigationPort(NavigationPort):
    """内側のナビゲーターをラップし、遷移先を灰度版/正式版に振り分ける。"""

    def __init__(
        self,
        inner: NavigationPort,
        page_stack: PageStack,
        store: GrayVersionStore,
        session: GrayReleaseSession,
    ) -> None:
        self._inner = inner
        self._page_stack = page_stack
        self._store = store
        self._session = session

    def navigate_to(self, request: NavigationRequest) -> Any:
        return self._inner.navigate_to(self._rewrite(request))

    def redirect_to(self, request: NavigationRequest) -> Any:
        return self._inner.redirect_to(self._rewrite(request))

    def relaunch(self, request: NavigationRequest) -> Any:
        return self._inner.relaunch(self._rewrite(request))

    def rewrite_url(self, url: str) -> str:
        """url を現在の判定結果に従った絶対パスに書き換える。"""
        page = current_page(self._page_stack)
        source = page.route if page is not None else ""
        target, query = split_query(url)

        path = strip_gray_prefix(resolve_url(source, target), self._session.subpackage_root)
        if is_gray_page(path, self._session.gray_pages) and self._store.is_gray_version():
            path = with_gray_prefix(path, self._session.subpackage_root)
        return join_query(SEPARATOR + path, query)

    def _rewrite(self, request: NavigationRequest) -> NavigationRequest:
        if request.not_proxy or not self._session.enabled:
            return request
        return replace(request, url=self.rewrite_url(request.url))
