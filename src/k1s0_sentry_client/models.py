"""sentry_client データモデル"""

from __future__ import annotations

import socket
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any
from urllib.parse import urlsplit

from .dsn import SUPPORTED_SCHEMES
from .exceptions import SentryClientError, SentryClientErrorCodes

VERSION = "0.1.0"
DEFAULT_CLIENT_ID = f"k1s0-sentry-client/{VERSION}"

MESSAGE_INTERFACE = "sentry.interfaces.Message"
EXCEPTION_INTERFACE = "sentry.interfaces.Exception"
STACKTRACE_INTERFACE = "sentry.interfaces.Stacktrace"
HTTP_INTERFACE = "sentry.interfaces.Http"

_EVENT_KEYS = frozenset(
    {
        "event_id",
        "timestamp",
        "level",
        "server_name",
        "project",
        "site",
        "message",
        MESSAGE_INTERFACE,
        EXCEPTION_INTERFACE,
        STACKTRACE_INTERFACE,
        HTTP_INTERFACE,
    }
)


class Level(IntEnum):
    """イベントの重大度。"""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    WARN = 30
    ERROR = 40

    @classmethod
    def parse(cls, value: Level | int | str) -> Level:
        """Level・整数値・レベル名 ("info" など) から Level を得る。

        Raises:
            ValueError: 未知のレベルの場合
        """
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise ValueError(f"Unknown level: {value!r}") from None
        return cls(value)


@dataclass(frozen=True)
class StackFrame:
    """スタックフレーム 1 件。"""

    filename: str
    lineno: int
    function: str
    module: str = ""
    context_line: str = ""
    vars: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "lineno": self.lineno,
            "function": self.function,
            "module": self.module,
            "context_line": self.context_line,
            "vars": dict(self.vars),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StackFrame:
        return cls(
            filename=data.get("filename", ""),
            lineno=int(data.get("lineno", 0)),
            function=data.get("function", ""),
            module=data.get("module", ""),
            context_line=data.get("context_line", ""),
            vars=dict(data.get("vars", {})),
        )


@dataclass(frozen=True)
class MessageInterface:
    """sentry.interfaces.Message"""

    message: str
    params: tuple[Any, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "params": list(self.params)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MessageInterface:
        return cls(message=data.get("message", ""), params=tuple(data.get("params", ())))


@dataclass(frozen=True)
class ExceptionInterface:
    """sentry.interfaces.Exception"""

    value: str
    type: str
    module: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "type": self.type, "module": self.module}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExceptionInterface:
        return cls(
            value=data.get("value", ""),
            type=str(data.get("type", "")),
            module=data.get("module", ""),
        )


@dataclass(frozen=True)
class StacktraceInterface:
    """sentry.interfaces.Stacktrace"""

    frames: tuple[StackFrame, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"frames": [f.to_dict() for f in self.frames]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StacktraceInterface:
        return cls(frames=tuple(StackFrame.from_dict(f) for f in data.get("frames", [])))


@dataclass(frozen=True)
class HttpInterface:
    """sentry.interfaces.Http

    リクエスト外で呼ばれた場合も空の値で埋めて送信する。
    """

    method: str = ""
    url: str = ""
    query_string: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "query_string": self.query_string,
            "data": dict(self.data),
            "cookies": dict(self.cookies),
            "headers": dict(self.headers),
            "env": dict(self.env),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HttpInterface:
        return cls(
            method=data.get("method", ""),
            url=data.get("url", ""),
            query_string=data.get("query_string", ""),
            data=dict(data.get("data") or {}),
            cookies=dict(data.get("cookies") or {}),
            headers=dict(data.get("headers") or {}),
            env=dict(data.get("env") or {}),
        )


@dataclass(frozen=True)
class Event:
    """コレクターへ送信する 1 件のイベント。"""

    event_id: str
    timestamp: str
    level: Level
    server_name: str
    project: str
    site: str = ""
    message: str = ""
    message_interface: MessageInterface | None = None
    exception: ExceptionInterface | None = None
    stacktrace: StacktraceInterface | None = None
    http: HttpInterface | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """ワイヤーフォーマットの辞書に変換する。"""
        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "message": self.message,
                "level": int(self.level),
                "timestamp": self.timestamp,
                "server_name": self.server_name,
                "event_id": self.event_id,
                "project": self.project,
                "site": self.site,
            }
        )
        if self.message_interface is not None:
            data[MESSAGE_INTERFACE] = self.message_interface.to_dict()
        if self.exception is not None:
            data[EXCEPTION_INTERFACE] = self.exception.to_dict()
        if self.stacktrace is not None:
            data[STACKTRACE_INTERFACE] = self.stacktrace.to_dict()
        if self.http is not None:
            data[HTTP_INTERFACE] = self.http.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        """ワイヤーフォーマットの辞書から Event を生成する。"""
        message_interface = data.get(MESSAGE_INTERFACE)
        exception = data.get(EXCEPTION_INTERFACE)
        stacktrace = data.get(STACKTRACE_INTERFACE)
        http = data.get(HTTP_INTERFACE)
        return cls(
            event_id=data["event_id"],
            timestamp=data["timestamp"],
            level=Level.parse(data.get("level", Level.ERROR)),
            server_name=data.get("server_name", ""),
            project=str(data.get("project", "")),
            site=data.get("site", ""),
            message=data.get("message", ""),
            message_interface=(
                MessageInterface.from_dict(message_interface) if message_interface else None
            ),
            exception=ExceptionInterface.from_dict(exception) if exception else None,
            stacktrace=StacktraceInterface.from_dict(stacktrace) if stacktrace else None,
            http=HttpInterface.from_dict(http) if http else None,
            extra={k: v for k, v in data.items() if k not in _EVENT_KEYS},
        )


@dataclass(frozen=True)
class ClientConfig:
    """クライアント設定。構築後は変更しない。"""

    servers: tuple[str, ...]
    project: str
    public_key: str
    secret_key: str
    site: str = ""
    name: str = field(default_factory=socket.gethostname)
    auto_log_stacks: bool = True
    verify_ssl: bool = True
    timeout_seconds: float = 10.0
    # 自動取得したスタックから追加で取り除く呼び出し元フレーム数 (ラッパー関数など)
    skip_frames: int = 0
    client_id: str = DEFAULT_CLIENT_ID

    def __post_init__(self) -> None:
        object.__setattr__(self, "servers", tuple(self.servers))
        object.__setattr__(self, "project", str(self.project))
        if not self.servers:
            raise SentryClientError(
                code=SentryClientErrorCodes.INVALID_CONFIG,
                message="At least one server is required",
            )
        for server in self.servers:
            scheme = urlsplit(server).scheme.lower()
            if scheme not in SUPPORTED_SCHEMES:
                raise SentryClientError(
                    code=SentryClientErrorCodes.UNSUPPORTED_SCHEME,
                    message=f"Unsupported server scheme: {server}",
                )
        for name in ("project", "public_key", "secret_key"):
            if not getattr(self, name):
                raise SentryClientError(
                    code=SentryClientErrorCodes.INVALID_CONFIG,
                    message=f"{name} cannot be empty",
                )
        for name in ("public_key", "client_id"):
            if not getattr(self, name).isascii():
                raise SentryClientError(
                    code=SentryClientErrorCodes.INVALID_CONFIG,
                    message=f"{name} must be ASCII",
                )
        if self.skip_frames < 0:
            raise SentryClientError(
                code=SentryClientErrorCodes.INVALID_CONFIG,
                message="skip_frames must be >= 0",
            )
