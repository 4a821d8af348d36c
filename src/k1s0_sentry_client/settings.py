"""クライアント設定の読み込み (YAML / 環境変数)"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .dsn import parse_dsn
from .exceptions import SentryClientError, SentryClientErrorCodes
from .models import ClientConfig


class ClientSettings(BaseModel):
    """sentry セクションの設定。dsn か servers のどちらかが必須。"""

    dsn: str = ""
    servers: list[str] = Field(default_factory=list)
    public_key: str = ""
    secret_key: str = ""
    project: str = "1"
    site: str = ""
    name: str = ""
    auto_log_stacks: bool = True
    verify_ssl: bool = True
    timeout_seconds: float = Field(default=10.0, gt=0)
    skip_frames: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _require_destination(self) -> ClientSettings:
        if not self.dsn and not self.servers:
            raise ValueError("either dsn or servers must be set")
        return self

    def to_client_config(self) -> ClientConfig:
        """ClientConfig に変換する。

        Raises:
            SentryClientError: DSN やサーバー設定が不正な場合
        """
        if self.dsn:
            parsed = parse_dsn(self.dsn)
            servers, project = parsed.servers, parsed.project
            public_key, secret_key = parsed.public_key, parsed.secret_key
        else:
            servers, project = tuple(self.servers), self.project
            public_key, secret_key = self.public_key, self.secret_key
        options: dict[str, Any] = {}
        if self.name:
            options["name"] = self.name
        return ClientConfig(
            servers=servers,
            project=project,
            public_key=public_key,
            secret_key=secret_key,
            site=self.site,
            auto_log_stacks=self.auto_log_stacks,
            verify_ssl=self.verify_ssl,
            timeout_seconds=self.timeout_seconds,
            skip_frames=self.skip_frames,
            **options,
        )


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SentryClientError(
            code=SentryClientErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise SentryClientError(
            code=SentryClientErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise SentryClientError(
            code=SentryClientErrorCodes.PARSE_YAML,
            message=f"Config root must be a mapping: {path}",
        )
    return data


def load(path: Path) -> ClientSettings:
    """設定ファイルの sentry セクションを読み込んで ClientSettings を返す。"""
    data = _read_yaml(path)
    try:
        return ClientSettings.model_validate(data.get("sentry") or {})
    except ValidationError as e:
        raise SentryClientError(
            code=SentryClientErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e


def from_env(environ: Mapping[str, str] | None = None) -> ClientSettings:
    """環境変数 SENTRY_DSN / SENTRY_SITE / SENTRY_NAME から設定を得る。"""
    environ = os.environ if environ is None else environ
    dsn = environ.get("SENTRY_DSN", "")
    if not dsn:
        raise SentryClientError(
            code=SentryClientErrorCodes.INVALID_CONFIG,
            message="SENTRY_DSN is not set",
        )
    return ClientSettings(
        dsn=dsn,
        site=environ.get("SENTRY_SITE", ""),
        name=environ.get("SENTRY_NAME", ""),
    )
