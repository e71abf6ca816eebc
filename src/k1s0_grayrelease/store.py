"""灰度判定結果の永続化"""

from __future__ import annotations

import logging

from .exceptions import GrayReleaseError
from .models import GrayRule, GrayVersionRecord
from .storage import KeyValueStorage

DEFAULT_STORAGE_KEY = "GRAY_VERSION"

logger = logging.getLogger(__name__)


class GrayVersionStore:
    """ルールと判定結果を 1 レコードとして単一キーに保持するストア。"""

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key

    def load(self) -> GrayVersionRecord:
        """レコードを読み込む。

        キーが存在しない、または壊れている場合は「ルール無効・非灰度」を返す。
        """
        data = self._storage.get(self._key)
        if data is None:
            return GrayVersionRecord()
        try:
            return GrayVersionRecord.from_dict(data)
        except GrayReleaseError as e:
            logger.warning(
                "Discarding corrupt gray version record",
                extra={"key": self._key, "error": str(e)},
            )
            return GrayVersionRecord()

    def save(self, rule: GrayRule, is_gray_version: bool) -> None:
        self._storage.set(
            self._key,
            GrayVersionRecord(rule=rule, is_gray_version=is_gray_version).to_dict(),
        )

    def save_rule(self, rule: GrayRule) -> None:
        """取得したルールを保存する。判定結果は既存の値を引き継ぐ。"""
        self.save(rule, self.load().is_gray_version)

    def clear(self) -> None:
        self._storage.remove(self._key)

    def is_gray_version(self) -> bool:
        return self.load().is_gray_version
