"""grayrelease データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import GrayReleaseError, GrayReleaseErrorCodes

ALL_AREAS_SENTINEL = "all"


@dataclass(frozen=True)
class AllAreas:
    """全地域を対象とする地域フィルタ。"""


@dataclass(frozen=True)
class SpecificCodes:
    """指定した地域コード（前方一致）のみを対象とする地域フィルタ。"""

    codes: tuple[str, ...] = ()


AreaFilter = AllAreas | SpecificCodes


def _area_filter_from_wire(value: Any) -> AreaFilter:
    if value is None:
        return SpecificCodes()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise GrayReleaseError(
            code=GrayReleaseErrorCodes.MALFORMED_RULE,
            message=f"areaCode must be a list of strings: {value!r}",
        )
    # 先頭要素のみ判定する
    if value and value[0] == ALL_AREAS_SENTINEL:
        return AllAreas()
    return SpecificCodes(tuple(value))


def _area_filter_to_wire(area_filter: AreaFilter) -> list[str]:
    if isinstance(area_filter, AllAreas):
        return [ALL_AREAS_SENTINEL]
    return list(area_filter.codes)


def _optional_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise GrayReleaseError(
            code=GrayReleaseErrorCodes.MALFORMED_RULE,
            message=f"{key} must be a string: {value!r}",
        )
    return value


def _optional_bool(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise GrayReleaseError(
            code=GrayReleaseErrorCodes.MALFORMED_RULE,
            message=f"{key} must be a boolean: {value!r}",
        )
    return value


@dataclass
class UserInfo:
    """ユーザー情報。判定に使うのは area_code と mobile_phone のみ。"""

    area_code: str = ""
    mobile_phone: str = ""
    user_id: str = ""
    user_name: str = ""
    user_avatar: str = ""
    user_role: str = ""
    user_status: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserInfo:
        return cls(
            area_code=data.get("areaCode") or "",
            mobile_phone=data.get("mobilePhone") or "",
            user_id=data.get("userId") or "",
            user_name=data.get("userName") or "",
            user_avatar=data.get("userAvatar") or "",
            user_role=data.get("userRole") or "",
            user_status=data.get("userStatus") or "",
        )


@dataclass(frozen=True)
class GrayRule:
    """灰度（カナリア）ルール。"""

    is_open: bool = False
    area_codes: AreaFilter = field(default_factory=SpecificCodes)
    phone_prefix: str = ""
    white_list: frozenset[str] = frozenset()
    all_users: bool = False
    is_test: bool = False

    @classmethod
    def closed(cls) -> GrayRule:
        """機能無効（isOpen=false）のルールを返す。"""
        return cls(is_open=False)

    @classmethod
    def from_dict(cls, data: Any) -> GrayRule:
        """ワイヤー形式（camelCase）の辞書から GrayRule を生成する。

        Raises:
            GrayReleaseError: 辞書でない、または型が不正な場合 (MALFORMED_RULE)
        """
        if not isinstance(data, dict):
            raise GrayReleaseError(
                code=GrayReleaseErrorCodes.MALFORMED_RULE,
                message=f"gray rule must be an object: {data!r}",
            )
        white_list = data.get("whiteList") or []
        if not isinstance(white_list, list) or not all(
            isinstance(v, str) for v in white_list
        ):
            raise GrayReleaseError(
                code=GrayReleaseErrorCodes.MALFORMED_RULE,
                message=f"whiteList must be a list of strings: {white_list!r}",
            )
        return cls(
            is_open=_optional_bool(data, "isOpen"),
            area_codes=_area_filter_from_wire(data.get("areaCode")),
            phone_prefix=_optional_str(data, "phonePrefix"),
            white_list=frozenset(white_list),
            all_users=_optional_bool(data, "all"),
            is_test=_optional_bool(data, "isTest"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "isOpen": self.is_open,
            "areaCode": _area_filter_to_wire(self.area_codes),
            "phonePrefix": self.phone_prefix,
            "whiteList": sorted(self.white_list),
            "all": self.all_users,
        }
        if self.is_test:
            result["isTest"] = True
        return result


@dataclass(frozen=True)
class GrayVersionRecord:
    """永続化レコード。ルールと、そのルールで算出した判定結果。"""

    rule: GrayRule = field(default_factory=GrayRule.closed)
    is_gray_version: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> GrayVersionRecord:
        rule = GrayRule.from_dict(data)
        return cls(rule=rule, is_gray_version=_optional_bool(data, "isGrayVersion"))

    def to_dict(self) -> dict[str, Any]:
        result = self.rule.to_dict()
        result["isGrayVersion"] = self.is_gray_version
        return result


@dataclass
class PageEntry:
    """ナビゲーションスタック上の 1 ページ。route は先頭スラッシュなし。"""

    route: str
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class NavigationRequest:
    """ナビゲーション呼び出しパラメータ。

    not_proxy が True の呼び出しはインターセプターによる書き換えを受けない。
    extra には url 以外の呼び出しパラメータをそのまま保持する。
    """

    url: str
    not_proxy: bool = False
    extra: dict[str, Any] = field(default_factory=dict)
