"""灰度ルールの取得"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from .config import RuleEndpointSection
from .exceptions import GrayReleaseError, GrayReleaseErrorCodes
from .models import GrayRule
from .store import GrayVersionStore

logger = logging.getLogger(__name__)

SUCCESS_CODE = 200


class RuleFetcher(ABC):
    """ルール配信元からルールを取得するクライアント抽象基底クラス。"""

    @abstractmethod
    async def fetch(self) -> GrayRule:
        """最新のルールを取得する。

        Raises:
            GrayReleaseError: 取得に失敗した場合
        """
        ...


class HttpRuleFetcher(RuleFetcher):
    """httpx を使ったルール配信 API クライアント。"""

    def __init__(self, config: RuleEndpointSection) -> None:
        self._config = config
        headers: dict[str, str] = {"Accept": "application/json"}
        if config.api_key:
            headers["X-API-Key"] = config.api_key
        self._headers = headers

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=self._headers,
            timeout=self._config.timeout_seconds,
        )

    def _handle_error(self, resp: httpx.Response) -> None:
        if not resp.is_success:
            raise GrayReleaseError(
                code=GrayReleaseErrorCodes.HTTP_ERROR,
                message=f"fetch gray rule: HTTP {resp.status_code}: {resp.text}",
            )

    async def fetch(self) -> GrayRule:
        try:
            async with self._make_client() as client:
                resp = await client.get(self._config.path)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise GrayReleaseError(
                code=GrayReleaseErrorCodes.CONNECTION_ERROR,
                message=f"Failed to fetch gray rule: {e}",
                cause=e,
            ) from e
        self._handle_error(resp)
        try:
            body: Any = resp.json()
        except ValueError as e:
            raise GrayReleaseError(
                code=GrayReleaseErrorCodes.MALFORMED_RULE,
                message=f"gray rule response is not JSON: {e}",
                cause=e,
            ) from e
        if not isinstance(body, dict) or body.get("code") != SUCCESS_CODE:
            code = body.get("code") if isinstance(body, dict) else None
            raise GrayReleaseError(
                code=GrayReleaseErrorCodes.RULE_REJECTED,
                message=f"gray rule service returned code {code!r}",
            )
        return GrayRule.from_dict(body.get("data"))


class InMemoryRuleFetcher(RuleFetcher):
    """テスト用インメモリルール取得クライアント。"""

    def __init__(self, rule: GrayRule | None = None) -> None:
        self._rule = rule if rule is not None else GrayRule.closed()
        self._error: GrayReleaseError | None = None
        self.fetch_count = 0

    def set_rule(self, rule: GrayRule) -> None:
        """返却するルールを設定する（エラー設定は解除される）。"""
        self._rule = rule
        self._error = None

    def set_error(self, error: GrayReleaseError) -> None:
        """次回以降の fetch で送出するエラーを設定する。"""
        self._error = error

    async def fetch(self) -> GrayRule:
        self.fetch_count += 1
        if self._error is not None:
            raise self._error
        return self._rule


class GrayRuleSource:
    """テスト用上書き・キャッシュ・リモート取得の順でルールを解決する。

    取得失敗はすべて「機能無効」ルールに縮退し、呼び出し元には例外を返さない。
    """

    def __init__(self, store: GrayVersionStore, fetcher: RuleFetcher) -> None:
        self._store = store
        self._fetcher = fetcher

    def cached_rule(self) -> GrayRule:
        """キャッシュ済みのルールを返す（同期、ネットワークアクセスなし）。"""
        return self._store.load().rule

    async def fetch_rule(self, persist: bool = True) -> GrayRule:
        """最新のルールを取得する。

        persist が False の場合、取得したルールの保存は呼び出し側に任せる。
        """
        cached = self.cached_rule()
        if cached.is_test:
            return cached
        try:
            rule = await self._fetcher.fetch()
        except GrayReleaseError as e:
            logger.warning(
                "Failed to fetch gray rule, gray release disabled",
                extra={"code": e.code, "error": str(e)},
            )
            return GrayRule.closed()
        except Exception as e:
            logger.warning(
                "Unexpected error fetching gray rule, gray release disabled",
                extra={"error": repr(e)},
            )
            return GrayRule.closed()
        if persist:
            self._store.save_rule(rule)
        return rule
