"""grayrelease ライブラリの例外型定義"""

from __future__ import annotations


class GrayReleaseError(Exception):
    """grayrelease ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class GrayReleaseErrorCodes:
    """GrayReleaseError のエラーコード定数。"""

    HTTP_ERROR: str = "HTTP_ERROR"
    CONNECTION_ERROR: str = "CONNECTION_ERROR"
    RULE_REJECTED: str = "RULE_REJECTED"
    MALFORMED_RULE: str = "MALFORMED_RULE"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
