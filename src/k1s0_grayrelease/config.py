"""設定型定義と YAML 設定ファイル読み込み"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import GrayReleaseError, GrayReleaseErrorCodes

# 環境別ファイルでキー単位に上書きできるセクション
_SECTIONS = ("rule_endpoint", "log")


class RuleEndpointSection(BaseModel):
    """灰度ルール配信 API の接続設定。"""

    model_config = ConfigDict(extra="forbid")

    base_url: str = ""
    path: str = "/api/grayVersionRule"
    timeout_seconds: float = Field(default=5.0, gt=0)
    api_key: str = ""

    @field_validator("base_url")
    @classmethod
    def check_scheme(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://: {v!r}")
        return v

    @field_validator("path")
    @classmethod
    def check_absolute_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"path must start with '/': {v!r}")
        return v


class LogSection(BaseModel):
    """ログ設定。level は大文字に正規化する。"""

    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"
    format: Literal["json", "text"] = "json"

    @field_validator("level")
    @classmethod
    def check_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v!r}")
        return level


class GrayReleaseConfig(BaseModel):
    """灰度リリース設定全体。"""

    model_config = ConfigDict(extra="forbid")

    subpackage_root: str = Field(default="grayVersion", min_length=1)
    storage_key: str = Field(default="GRAY_VERSION", min_length=1)
    gray_pages: list[str] = Field(default_factory=list)
    rule_endpoint: RuleEndpointSection = Field(default_factory=RuleEndpointSection)
    log: LogSection = Field(default_factory=LogSection)

    @field_validator("subpackage_root")
    @classmethod
    def check_root_is_single_segment(cls, v: str) -> str:
        if "/" in v:
            raise ValueError(f"subpackage_root must be a single directory name: {v!r}")
        return v

    @field_validator("gray_pages")
    @classmethod
    def check_gray_pages(cls, v: list[str]) -> list[str]:
        """ページ route と同じく先頭スラッシュなしの相対パスで指定する。"""
        seen: set[str] = set()
        for page in v:
            if not page:
                raise ValueError("gray_pages entries must not be empty")
            if page.startswith("/"):
                raise ValueError(f"gray_pages entries must not start with '/': {page!r}")
            if page in seen:
                raise ValueError(f"duplicate gray_pages entry: {page!r}")
            seen.add(page)
        return v


def _read_layer(path: Path) -> dict[str, Any]:
    """設定レイヤーを 1 つ読み込む。空ファイルは空の辞書として扱う。"""
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise GrayReleaseError(
            code=GrayReleaseErrorCodes.READ_FILE,
            message=f"cannot read gray release config {path}: {e.strerror}",
            cause=e,
        ) from e
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" at line {mark.line + 1}" if mark is not None else ""
        raise GrayReleaseError(
            code=GrayReleaseErrorCodes.PARSE_YAML,
            message=f"invalid YAML in {path}{where}",
            cause=e,
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise GrayReleaseError(
            code=GrayReleaseErrorCodes.PARSE_YAML,
            message=f"{path}: top level must be a mapping, got {type(data).__name__}",
        )
    return data


def _overlay(base: dict[str, Any], env: dict[str, Any]) -> dict[str, Any]:
    """環境別レイヤーを重ねる。

    rule_endpoint と log はキー単位で上書きし、gray_pages などそれ以外の値は丸ごと置き換える。
    """
    merged = dict(base)
    for key, value in env.items():
        section = merged.get(key)
        if key in _SECTIONS and isinstance(section, dict) and isinstance(value, dict):
            merged[key] = {**section, **value}
        else:
            merged[key] = value
    return merged


def _describe(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(p) for p in detail["loc"]) or "<root>"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


def load(base_path: Path, env_path: Path | None = None) -> GrayReleaseConfig:
    """設定ファイルを読み込んで GrayReleaseConfig を返す。

    env_path が存在すれば base_path の内容に重ねる。存在しなければ無視する。

    Raises:
        GrayReleaseError: READ_FILE_ERROR, PARSE_YAML_ERROR, VALIDATION_ERROR
    """
    data = _read_layer(base_path)
    if env_path is not None and env_path.exists():
        data = _overlay(data, _read_layer(env_path))
    try:
        return GrayReleaseConfig.model_validate(data)
    except ValidationError as e:
        raise GrayReleaseError(
            code=GrayReleaseErrorCodes.VALIDATION,
            message=f"invalid gray release config: {_describe(e)}",
            cause=e,
        ) from e
