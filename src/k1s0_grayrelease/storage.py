"""KeyValueStorage 抽象基底クラスとインメモリ実装"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any


class KeyValueStorage(ABC):
    """ホスト側の永続キーバリューストレージ。読み書きは同期的かつアトミック。"""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """キーに対応する値を取得する。存在しなければ None。"""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """キーと値を保存する（丸ごと置き換え）。"""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """キーを削除する。存在しなくてもエラーにしない。"""
        ...


class InMemoryKeyValueStorage(KeyValueStorage):
    """テスト用インメモリストレージ。"""

    def __init__(self) -> None:
        self._store: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        if key not in self._store:
            return None
        return copy.deepcopy(self._store[key])

    def set(self, key: str, value: Any) -> None:
        self._store[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        self._store.pop(key, None)
