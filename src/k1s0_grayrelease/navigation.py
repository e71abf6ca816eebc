"""NavigationPort 抽象基底クラスとインメモリ実装"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol

from .models import NavigationRequest, PageEntry
from .paths import SEPARATOR, split_query


class PageStack(Protocol):
    """ホストのナビゲーションスタック参照プロトコル。"""

    def get_current_pages(self) -> list[PageEntry]: ...


class NavigationPort(ABC):
    """ページ遷移を行うナビゲーター抽象基底クラス。"""

    @abstractmethod
    def navigate_to(self, request: NavigationRequest) -> Any:
        """現在ページを残して遷移する。"""
        ...

    @abstractmethod
    def redirect_to(self, request: NavigationRequest) -> Any:
        """現在ページを置き換えて遷移する。"""
        ...

    @abstractmethod
    def relaunch(self, request: NavigationRequest) -> Any:
        """スタックをすべて閉じて遷移する。"""
        ...


def current_page(page_stack: PageStack) -> PageEntry | None:
    """スタック最上位のページを返す。空なら None。"""
    pages = page_stack.get_current_pages()
    return pages[-1] if pages else None


def _page_from_url(url: str) -> PageEntry:
    path, query = split_query(url)
    options: dict[str, str] = {}
    for pair in query.lstrip("?").split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        options[key] = value
    return PageEntry(route=path.lstrip(SEPARATOR), options=options)


class InMemoryNavigator(NavigationPort):
    """テスト用インメモリナビゲーター。PageStack も兼ねる。"""

    def __init__(self, pages: list[PageEntry] | None = None) -> None:
        self._pages: list[PageEntry] = list(pages or [])
        self.calls: list[tuple[str, NavigationRequest]] = []

    def get_current_pages(self) -> list[PageEntry]:
        return list(self._pages)

    def navigate_to(self, request: NavigationRequest) -> None:
        self.calls.append(("navigate_to", request))
        self._pages.append(_page_from_url(request.url))

    def redirect_to(self, request: NavigationRequest) -> None:
        self.calls.append(("redirect_to", request))
        if self._pages:
            self._pages.pop()
        self._pages.append(_page_from_url(request.url))

    def relaunch(self, request: NavigationRequest) -> None:
        self.calls.append(("relaunch", request))
        self._pages = [_page_from_url(request.url)]
