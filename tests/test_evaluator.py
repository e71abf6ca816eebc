"""灰度ルール評価のユニットテスト"""

import pytest
from k1s0_grayrelease import GrayRule, UserInfo, is_target_user


def make_rule(**data: object) -> GrayRule:
    return GrayRule.from_dict({"isOpen": True, **data})


@pytest.mark.parametrize(
    "data",
    [
        {"all": True},
        {"areaCode": ["all"]},
        {"areaCode": ["11"]},
        {"phonePrefix": "138"},
        {"whiteList": ["13800138000"]},
    ],
)
def test_closed_rule_never_matches(data: dict[str, object]) -> None:
    """isOpen=false なら他の条件に関係なく False。"""
    rule = GrayRule.from_dict({"isOpen": False, **data})
    user = UserInfo(area_code="110105", mobile_phone="13800138000")
    assert is_target_user(rule, user) is False


def test_all_users() -> None:
    """all=true なら誰でも対象。"""
    assert is_target_user(make_rule(all=True), UserInfo()) is True


def test_all_areas_sentinel_first_element() -> None:
    """areaCode の先頭が "all" なら地域コードがなくても対象。"""
    rule = make_rule(areaCode=["all", "110000"])
    assert is_target_user(rule, UserInfo()) is True
    assert is_target_user(rule, None) is True


def test_all_sentinel_only_checked_at_first_position() -> None:
    """"all" が先頭以外にあってもワイルドカード扱いしない。"""
    rule = make_rule(areaCode=["110000", "all"])
    assert is_target_user(rule, UserInfo(area_code="220000")) is False


def test_area_code_prefix_match() -> None:
    """地域コードの前方一致。"""
    rule = make_rule(areaCode=["11"])
    assert is_target_user(rule, UserInfo(area_code="110105")) is True
    assert is_target_user(rule, UserInfo(area_code="220000")) is False


def test_area_code_is_case_sensitive() -> None:
    rule = make_rule(areaCode=["ab"])
    assert is_target_user(rule, UserInfo(area_code="AB01")) is False


def test_empty_area_codes_never_match() -> None:
    """空リストは一致しない。"""
    assert is_target_user(make_rule(areaCode=[]), UserInfo(area_code="110105")) is False


def test_phone_prefix() -> None:
    """電話番号プレフィックス一致。"""
    rule = make_rule(phonePrefix="138")
    assert is_target_user(rule, UserInfo(mobile_phone="13812345678")) is True
    assert is_target_user(rule, UserInfo(mobile_phone="13912345678")) is False


def test_empty_phone_prefix_does_not_match_everyone() -> None:
    rule = make_rule(phonePrefix="")
    assert is_target_user(rule, UserInfo(mobile_phone="13912345678")) is False


def test_white_list() -> None:
    """ホワイトリスト一致。"""
    rule = make_rule(whiteList=["13800138000"])
    assert is_target_user(rule, UserInfo(mobile_phone="13800138000")) is True
    assert is_target_user(rule, UserInfo(mobile_phone="13800138001")) is False


def test_open_rule_without_conditions() -> None:
    """条件なしの有効ルールは誰も対象にしない。"""
    assert is_target_user(make_rule(), UserInfo(area_code="110105")) is False
