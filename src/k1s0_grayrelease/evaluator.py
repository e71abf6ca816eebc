"""灰度ルール評価"""

from __future__ import annotations

from .models import AllAreas, GrayRule, UserInfo


def is_target_user(rule: GrayRule, user: UserInfo | None) -> bool:
    """ユーザーが灰度版の対象かどうかを判定する。

    先に一致した条件で確定する:
    ルール無効 → 全ユーザー → 全地域 → 地域コード前方一致
    → 電話番号プレフィックス → ホワイトリスト。
    """
    if not rule.is_open:
        return False
    if rule.all_users:
        return True
    if isinstance(rule.area_codes, AllAreas):
        return True

    user_area_code = user.area_code if user is not None else ""
    if any(user_area_code.startswith(code) for code in rule.area_codes.codes):
        return True

    user_mobile_phone = user.mobile_phone if user is not None else ""
    if rule.phone_prefix and user_mobile_phone.startswith(rule.phone_prefix):
        return True

    return user_mobile_phone in rule.white_list
