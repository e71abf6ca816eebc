"""ユーザー切り替え時の灰度判定更新とリダイレクト"""

from __future__ import annotations

import logging

from .evaluator import is_target_user
from .models import GrayRule, NavigationRequest, UserInfo
from .navigation import NavigationPort, PageStack, current_page
from .paths import (
    SEPARATOR,
    format_query,
    is_gray_page,
    join_query,
    strip_gray_prefix,
    with_gray_prefix,
)
from .rule_source import GrayRuleSource
from .session import GrayReleaseSession
from .store import GrayVersionStore

logger = logging.getLogger(__name__)


class GrayRedirector:
    """ログイン・ユーザー切り替え時に判定結果を保存し、必要なら現在ページを切り替える。

    リダイレクトは判定結果が前回と異なり、かつ現在ページが灰度版を持つ場合だけ、
    書き換え対象外 (not_proxy) の redirect_to を 1 回だけ発行する。

    非同期版ではルール取得中に新しい呼び出しが始まった場合、古い取得結果を破棄する。
    """

    def __init__(
        self,
        session: GrayReleaseSession,
        store: GrayVersionStore,
        rule_source: GrayRuleSource,
        navigator: NavigationPort,
        page_stack: PageStack,
    ) -> None:
        self._session = session
        self._store = store
        self._rule_source = rule_source
        self._navigator = navigator
        self._page_stack = page_stack
        self._sequence = 0

    def update_decision(self, user: UserInfo | None) -> bool | None:
        """キャッシュ済みルールで判定結果を更新する。無効時は None。"""
        if not self._session.enabled:
            return None
        self._sequence += 1
        return self._decide(self._rule_source.cached_rule(), user)[1]

    async def update_decision_async(self, user: UserInfo | None) -> bool | None:
        """ルールを再取得して判定結果を更新する。無効時・破棄時は None。"""
        if not self._session.enabled:
            return None
        rule = await self._fetch_latest()
        if rule is None:
            return None
        return self._decide(rule, user)[1]

    def on_identity_change(self, user: UserInfo | None) -> bool:
        """キャッシュ済みルールで判定し、必要ならリダイレクトする。

        Returns:
            リダイレクトを発行したら True
        """
        if not self._session.enabled:
            return False
        self._sequence += 1
        return self._redirect_if_changed(*self._decide(self._rule_source.cached_rule(), user))

    async def on_identity_change_async(self, user: UserInfo | None) -> bool:
        """ルールを再取得して判定し、必要ならリダイレクトする。"""
        if not self._session.enabled:
            return False
        rule = await self._fetch_latest()
        if rule is None:
            return False
        return self._redirect_if_changed(*self._decide(rule, user))

    async def _fetch_latest(self) -> GrayRule | None:
        self._sequence += 1
        sequence = self._sequence
        # ルールは判定結果と一緒に _decide で保存する
        rule = await self._rule_source.fetch_rule(persist=False)
        if sequence != self._sequence:
            logger.debug(
                "Discarding superseded gray rule fetch",
                extra={"sequence": sequence, "latest": self._sequence},
            )
            return None
        return rule

    def _decide(self, rule: GrayRule, user: UserInfo | None) -> tuple[bool, bool]:
        previous = self._store.is_gray_version()
        is_target = is_target_user(rule, user)
        self._store.save(rule, is_target)
        return previous, is_target

    def _redirect_if_changed(self, previous: bool, is_target: bool) -> bool:
        page = current_page(self._page_stack)
        if page is None:
            return False
        root = self._session.subpackage_root
        path = strip_gray_prefix(page.route, root)
        if not is_gray_page(path, self._session.gray_pages):
            return False
        if is_target == previous:
            return False

        if is_target:
            path = with_gray_prefix(path, root)
        url = join_query(SEPARATOR + path, format_query(page.options))
        logger.info(
            "Redirecting to %s version",
            "gray" if is_target else "production",
            extra={"url": url},
        )
        self._navigator.redirect_to(NavigationRequest(url=url, not_proxy=True))
        return True
