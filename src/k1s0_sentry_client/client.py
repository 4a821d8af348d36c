"""SentryClient ファサード"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .builder import EventBuilder, StackArg
from .context import RequestContextProvider
from .dsn import parse_dsn
from .models import ClientConfig, Level
from .settings import ClientSettings, from_env, load
from .stacktrace import StackFormatter, get_stack_info
from .transport import EventSender, Transport


def _client_config(
    servers: Sequence[str],
    project: str,
    public_key: str,
    secret_key: str,
    name: str | None,
    **options: Any,
) -> ClientConfig:
    if name:
        options["name"] = name
    return ClientConfig(
        servers=tuple(servers),
        project=project,
        public_key=public_key,
        secret_key=secret_key,
        **options,
    )


class SentryClient:
    """イベントを組み立てて送信し、イベント ID を返すクライアント。

    送信はベストエフォートで、配送に失敗しても capture 系メソッドは例外を送出しない。
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        context_provider: RequestContextProvider | None = None,
        stack_formatter: StackFormatter = get_stack_info,
        transports: dict[str, Transport] | None = None,
    ) -> None:
        self._config = config
        self._builder = EventBuilder(config, context_provider, stack_formatter)
        self._sender = EventSender(config, transports)

    @classmethod
    def from_dsn(
        cls,
        dsn: str,
        site: str = "",
        auto_log_stacks: bool = True,
        name: str | None = None,
        *,
        verify_ssl: bool = True,
        timeout_seconds: float = 10.0,
        skip_frames: int = 0,
        **kwargs: Any,
    ) -> SentryClient:
        """DSN 文字列からクライアントを生成する。

        Raises:
            SentryClientError: DSN が不正な場合
        """
        parsed = parse_dsn(dsn)
        config = _client_config(
            parsed.servers,
            parsed.project,
            parsed.public_key,
            parsed.secret_key,
            name,
            site=site,
            auto_log_stacks=auto_log_stacks,
            verify_ssl=verify_ssl,
            timeout_seconds=timeout_seconds,
            skip_frames=skip_frames,
        )
        return cls(config, **kwargs)

    @classmethod
    def from_servers(
        cls,
        servers: Sequence[str],
        public_key: str,
        secret_key: str,
        project: str = "1",
        site: str = "",
        auto_log_stacks: bool = True,
        name: str | None = None,
        *,
        verify_ssl: bool = True,
        timeout_seconds: float = 10.0,
        skip_frames: int = 0,
        **kwargs: Any,
    ) -> SentryClient:
        """エンドポイント URL のリストと鍵を直接指定してクライアントを生成する。

        Raises:
            SentryClientError: 設定が不正な場合
        """
        config = _client_config(
            servers,
            project,
            public_key,
            secret_key,
            name,
            site=site,
            auto_log_stacks=auto_log_stacks,
            verify_ssl=verify_ssl,
            timeout_seconds=timeout_seconds,
            skip_frames=skip_frames,
        )
        return cls(config, **kwargs)

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs: Any) -> SentryClient:
        return cls(settings.to_client_config(), **kwargs)

    @classmethod
    def from_file(cls, path: Path, **kwargs: Any) -> SentryClient:
        return cls.from_settings(load(path), **kwargs)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs: Any) -> SentryClient:
        return cls.from_settings(from_env(environ), **kwargs)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def get_ident(self, ident: str) -> str:
        return self._builder.get_ident(ident)

    def capture_message(
        self,
        template: str,
        params: Sequence[Any] = (),
        level: Level | int | str = Level.INFO,
        stack: StackArg = None,
    ) -> str:
        """メッセージを送信してイベント ID を返す。"""
        event = self._builder.message(
            template,
            params,
            level,
            stack,
            stacklevel=self._config.skip_frames + 2,
        )
        self._sender.send(event)
        return event.event_id

    def capture_exception(self, exc: BaseException) -> str:
        """例外を送信してイベント ID を返す。"""
        event = self._builder.exception(exc, stacklevel=self._config.skip_frames + 2)
        self._sender.send(event)
        return event.event_id

    def capture(self, data: Mapping[str, Any], stack: StackArg = None) -> str:
        """任意のイベントデータを送信してイベント ID を返す。"""
        event = self._builder.capture(data, stack, stacklevel=self._config.skip_frames + 2)
        self._sender.send(event)
        return event.event_id
