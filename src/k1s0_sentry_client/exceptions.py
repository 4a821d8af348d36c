"""sentry_client ライブラリの例外型定義"""

from __future__ import annotations


class SentryClientError(Exception):
    """sentry_client ライブラリのエラー基底クラス。"""

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


class SentryClientErrorCodes:
    """SentryClientError のエラーコード定数。"""

    INVALID_DSN: str = "INVALID_DSN"
    UNSUPPORTED_SCHEME: str = "UNSUPPORTED_SCHEME"
    INVALID_CONFIG: str = "INVALID_CONFIG"
    DELIVERY_FAILED: str = "DELIVERY_FAILED"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"

    # クライアント構築時に発生する設定エラー
    CONFIG_ERRORS: frozenset[str] = frozenset({INVALID_DSN, UNSUPPORTED_SCHEME, INVALID_CONFIG})
