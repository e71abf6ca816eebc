"""灰度リリースのセッション状態"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GrayReleaseSession:
    """enable 時に確定し、以降変更されない機能スイッチと灰度ページ集合。"""

    enabled: bool = False
    gray_pages: tuple[str, ...] = ()
    subpackage_root: str = "grayVersion"
