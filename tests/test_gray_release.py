"""GrayRelease ファサードのユニットテスト"""

import httpx
import respx
from k1s0_grayrelease import (
    GrayNavigationPort,
    GrayRelease,
    GrayReleaseConfig,
    GrayRule,
    InMemoryKeyValueStorage,
    InMemoryNavigator,
    InMemoryRuleFetcher,
    NavigationRequest,
    PageEntry,
    RuleEndpointSection,
    UserInfo,
)

GRAY_PAGES = ["pages/order/"]


def make_gray_release(
    fetcher: InMemoryRuleFetcher | None = None,
    page: PageEntry | None = None,
) -> tuple[GrayRelease, InMemoryKeyValueStorage, InMemoryNavigator]:
    storage = InMemoryKeyValueStorage()
    navigator = InMemoryNavigator([page or PageEntry("pages/home/index")])
    gray_release = GrayRelease(
        storage=storage,
        navigator=navigator,
        page_stack=navigator,
        fetcher=fetcher or InMemoryRuleFetcher(),
        gray_pages=GRAY_PAGES,
    )
    return gray_release, storage, navigator


def test_enable_clears_stale_decision() -> None:
    """enable で前回の判定結果が削除される。"""
    gray_release, storage, _ = make_gray_release()
    storage.set("GRAY_VERSION", {"isOpen": True, "all": True, "isGrayVersion": True})
    gray_release.enable(GrayRule(is_open=True))
    assert storage.get("GRAY_VERSION") is None
    assert gray_release.is_gray_version() is False


def test_enable_closed_rule_keeps_raw_navigator() -> None:
    """isOpen=false なら書き換えなしのナビゲーターを返す。"""
    gray_release, _, navigator = make_gray_release()
    assert gray_release.enable(GrayRule.closed()) is navigator
    assert gray_release.session.enabled is False
    assert gray_release.on_identity_change(UserInfo(area_code="110105")) is False


def test_enable_open_rule_returns_intercepting_navigator() -> None:
    gray_release, _, _ = make_gray_release()
    port = gray_release.enable(GrayRule(is_open=True))
    assert isinstance(port, GrayNavigationPort)
    assert gray_release.navigator is port
    assert gray_release.session.gray_pages == ("pages/order/",)


def test_enable_test_rule_is_persisted_as_override() -> None:
    """テスト用ルールは保存され、同期判定にそのまま使われる。"""
    gray_release, storage, _ = make_gray_release()
    gray_release.enable(GrayRule.from_dict({"isTest": True, "isOpen": True, "phonePrefix": "138"}))
    assert storage.get("GRAY_VERSION")["isTest"] is True
    assert gray_release.update_decision(UserInfo(mobile_phone="13800138000")) is True
    assert gray_release.is_gray_version() is True


async def test_test_rule_skips_network_on_async_login() -> None:
    fetcher = InMemoryRuleFetcher(GrayRule.closed())
    gray_release, _, _ = make_gray_release(fetcher)
    gray_release.enable(GrayRule(is_open=True, all_users=True, is_test=True))
    assert await gray_release.update_decision_async(UserInfo()) is True
    assert fetcher.fetch_count == 0


async def test_login_then_navigate_end_to_end() -> None:
    """ログイン後の遷移が灰度版に振り分けられる。"""
    fetcher = InMemoryRuleFetcher(GrayRule.from_dict({"isOpen": True, "areaCode": ["11"]}))
    gray_release, _, navigator = make_gray_release(fetcher)
    port = gray_release.enable(GrayRule(is_open=True))

    assert await gray_release.on_identity_change_async(UserInfo(area_code="110105")) is False
    assert gray_release.is_gray_version() is True

    port.navigate_to(NavigationRequest(url="../order/detail?id=3"))
    assert navigator.calls[-1][1].url == "/grayVersion/pages/order/detail?id=3"

    # 別ユーザーに切り替えると灰度版ページから正式版へ戻される
    assert await gray_release.on_identity_change_async(UserInfo(area_code="310000")) is True
    assert navigator.calls[-1][0] == "redirect_to"
    assert navigator.calls[-1][1].url == "/pages/order/detail?id=3"
    assert navigator.calls[-1][1].not_proxy is True


async def test_second_enable_resets_state() -> None:
    fetcher = InMemoryRuleFetcher(GrayRule(is_open=True, all_users=True))
    gray_release, _, navigator = make_gray_release(fetcher)
    gray_release.enable(GrayRule(is_open=True))
    await gray_release.update_decision_async(UserInfo())
    assert gray_release.is_gray_version() is True

    assert gray_release.enable(GrayRule.closed(), gray_pages=[]) is navigator
    assert gray_release.is_gray_version() is False
    assert gray_release.session.gray_pages == ()


@respx.mock
async def test_from_config_uses_http_fetcher() -> None:
    """設定から組み立てると HTTP でルールを取得する。"""
    route = respx.get("http://rules:8080/api/grayVersionRule").mock(
        return_value=httpx.Response(200, json={"code": 200, "data": {"isOpen": True, "all": True}})
    )
    config = GrayReleaseConfig(
        subpackage_root="canary",
        gray_pages=["pages/order/"],
        rule_endpoint=RuleEndpointSection(base_url="http://rules:8080"),
    )
    storage = InMemoryKeyValueStorage()
    navigator = InMemoryNavigator([PageEntry("pages/order/list")])
    gray_release = GrayRelease.from_config(config, storage, navigator, navigator)
    gray_release.enable(GrayRule(is_open=True))

    assert await gray_release.on_identity_change_async(UserInfo()) is True
    assert route.called
    assert navigator.calls[-1][1].url == "/canary/pages/order/list"


def test_session_carries_configured_pages_across_enable() -> None:
    """enable 前のセッションも設定値を持ち、gray_pages 省略時は直前の値を引き継ぐ。"""
    gray_release, _, _ = make_gray_release()
    assert gray_release.session.enabled is False
    assert gray_release.session.gray_pages == ("pages/order/",)
    assert gray_release.session.subpackage_root == "grayVersion"

    gray_release.enable(GrayRule(is_open=True), gray_pages=["pages/user/"])
    gray_release.enable(GrayRule(is_open=True))
    assert gray_release.session.gray_pages == ("pages/user/",)
    assert gray_release.session.subpackage_root == "grayVersion"
