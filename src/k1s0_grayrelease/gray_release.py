"""GrayRelease ファサード"""

from __future__ import annotations

from collections.abc import Iterable

from .config import GrayReleaseConfig
from .interceptor import GrayNavigationPort
from .models import GrayRule, UserInfo
from .navigation import NavigationPort, PageStack
from .redirect import GrayRedirector
from .rule_source import GrayRuleSource, HttpRuleFetcher, RuleFetcher
from .session import GrayReleaseSession
from .storage import KeyValueStorage
from .store import DEFAULT_STORAGE_KEY, GrayVersionStore


class GrayRelease:
    """灰度リリースの入口。

    アプリ起動時に enable() を 1 回呼び、返されたナビゲーターで遷移する。
    ログイン・ユーザー切り替え後に on_identity_change(_async) を呼ぶ。
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        navigator: NavigationPort,
        page_stack: PageStack,
        fetcher: RuleFetcher,
        gray_pages: Iterable[str] = (),
        subpackage_root: str = "grayVersion",
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._raw_navigator = navigator
        self._page_stack = page_stack
        self._store = GrayVersionStore(storage, storage_key)
        self._rule_source = GrayRuleSource(self._store, fetcher)
        self._session = GrayReleaseSession(
            gray_pages=tuple(gray_pages), subpackage_root=subpackage_root
        )
        self._navigator: NavigationPort = navigator
        self._redirector = self._build_redirector()

    @classmethod
    def from_config(
        cls,
        config: GrayReleaseConfig,
        storage: KeyValueStorage,
        navigator: NavigationPort,
        page_stack: PageStack,
    ) -> GrayRelease:
        """設定からルール配信 API クライアントを含めて組み立てる。"""
        return cls(
            storage=storage,
            navigator=navigator,
            page_stack=page_stack,
            fetcher=HttpRuleFetcher(config.rule_endpoint),
            gray_pages=config.gray_pages,
            subpackage_root=config.subpackage_root,
            storage_key=config.storage_key,
        )

    @property
    def session(self) -> GrayReleaseSession:
        return self._session

    @property
    def navigator(self) -> NavigationPort:
        """アプリが遷移に使うナビゲーター。有効時は灰度書き換え付き。"""
        return self._navigator

    def enable(
        self,
        rule: GrayRule | None = None,
        gray_pages: Iterable[str] | None = None,
    ) -> NavigationPort:
        """灰度リリースを有効化する。

        保存済みの判定結果は必ず削除される。rule.is_open が False なら無効のまま。
        rule.is_test が True の場合、そのルールをテスト用上書きとして保存する。
        2 回目以降の呼び出しは状態を完全にリセットする。
        """
        rule = rule if rule is not None else GrayRule.closed()
        pages = tuple(gray_pages) if gray_pages is not None else self._session.gray_pages

        self._store.clear()
        self._session = GrayReleaseSession(
            enabled=rule.is_open,
            gray_pages=pages,
            subpackage_root=self._session.subpackage_root,
        )
        if not rule.is_open:
            self._navigator = self._raw_navigator
        else:
            if rule.is_test:
                self._store.save_rule(rule)
            self._navigator = GrayNavigationPort(
                self._raw_navigator, self._page_stack, self._store, self._session
            )
        self._redirector = self._build_redirector()
        return self._navigator

    def on_identity_change(self, user: UserInfo | None) -> bool:
        return self._redirector.on_identity_change(user)

    async def on_identity_change_async(self, user: UserInfo | None) -> bool:
        return await self._redirector.on_identity_change_async(user)

    def update_decision(self, user: UserInfo | None) -> bool | None:
        return self._redirector.update_decision(user)

    async def update_decision_async(self, user: UserInfo | None) -> bool | None:
        return await self._redirector.update_decision_async(user)

    def is_gray_version(self) -> bool:
        """現在のユーザーが灰度版の対象かどうか（保存済みの判定結果）。"""
        return self._store.is_gray_version()

    def _build_redirector(self) -> GrayRedirector:
        return GrayRedirector(
            self._session,
            self._store,
            self._rule_source,
            self._navigator,
            self._page_stack,
        )
