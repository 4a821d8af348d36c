"""イベント組み立て"""

from __future__ import annotations

import inspect
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from .context import NullRequestContextProvider, RequestContextProvider
from .models import (
    EXCEPTION_INTERFACE,
    HTTP_INTERFACE,
    MESSAGE_INTERFACE,
    STACKTRACE_INTERFACE,
    ClientConfig,
    Event,
    ExceptionInterface,
    HttpInterface,
    Level,
    MessageInterface,
    StacktraceInterface,
)
from .stacktrace import RawFrame, StackFormatter, get_stack_info, walk_stack_from, walk_traceback

UNKNOWN_EXCEPTION_MESSAGE = "<unknown exception>"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

StackArg = Sequence[RawFrame] | bool | None


def generate_event_id() -> str:
    """UUID v4 からハイフンを除いた 32 文字のイベント ID を生成する。"""
    return uuid.uuid4().hex


def utc_timestamp(now: datetime | None = None) -> str:
    """秒精度の UTC タイムスタンプ文字列を返す。"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _coerce(value: Any, cls: Any) -> Any:
    if value is None or isinstance(value, cls):
        return value
    return cls.from_dict(value)


class EventBuilder:
    """呼び出し元のデータとリクエストコンテキストから Event を組み立てる。"""

    def __init__(
        self,
        config: ClientConfig,
        context_provider: RequestContextProvider | None = None,
        stack_formatter: StackFormatter = get_stack_info,
    ) -> None:
        self._config = config
        self._context_provider = context_provider or NullRequestContextProvider()
        self._stack_formatter = stack_formatter

    def get_ident(self, ident: str) -> str:
        """イベント ID から Sentry で検索可能な識別子を返す。"""
        return ident

    def capture(
        self,
        data: Mapping[str, Any],
        stack: StackArg = None,
        *,
        stacklevel: int = 1,
    ) -> Event:
        """Event を組み立てる。

        Args:
            data: イベントのフィールド。ワイヤー形式のキーで指定する。
            stack: 明示的なスタック、True (現在のスタックを取得)、または None
            stacklevel: スタックを自動取得する際に内側から取り除くフレーム数。
                1 の場合は capture 自身のフレームだけを取り除く。
        """
        fields = dict(data)
        if (not stack and self._config.auto_log_stacks) or stack is True:
            frame = inspect.currentframe()
            try:
                stack = walk_stack_from(frame, skip=stacklevel)
            finally:
                del frame

        stacktrace = _coerce(fields.pop(STACKTRACE_INTERFACE, None), StacktraceInterface)
        if stack and stacktrace is None:
            stacktrace = StacktraceInterface(frames=tuple(self._stack_formatter(stack)))

        http = fields.pop(HTTP_INTERFACE, None)
        if http is None:
            http = self._context_provider.get_request_context()

        return Event(
            event_id=generate_event_id(),
            timestamp=fields.pop("timestamp", None) or utc_timestamp(),
            level=Level.parse(fields.pop("level", None) or Level.ERROR),
            server_name=self._config.name,
            project=self._config.project,
            site=self._config.site,
            message=str(fields.pop("message", "")),
            message_interface=_coerce(fields.pop(MESSAGE_INTERFACE, None), MessageInterface),
            exception=_coerce(fields.pop(EXCEPTION_INTERFACE, None), ExceptionInterface),
            stacktrace=stacktrace,
            http=_coerce(http, HttpInterface),
            extra={
                k: v
                for k, v in fields.items()
                if k not in ("server_name", "event_id", "project", "site")
            },
        )

    def message(
        self,
        template: str,
        params: Sequence[Any] = (),
        level: Level | int | str = Level.INFO,
        stack: StackArg = None,
        *,
        stacklevel: int = 1,
    ) -> Event:
        """printf 形式のメッセージイベントを組み立てる。"""
        params = tuple(params)
        data = {
            "message": template % params if params else template,
            "level": Level.parse(level),
            MESSAGE_INTERFACE: MessageInterface(message=template, params=params),
        }
        return self.capture(data, stack, stacklevel=stacklevel + 1)

    def exception(self, exc: BaseException, *, stacklevel: int = 1) -> Event:
        """例外イベントを組み立てる。例外自身のトレースバックをスタックとして使う。"""
        message = str(exc) or UNKNOWN_EXCEPTION_MESSAGE
        frames = walk_traceback(exc.__traceback__)
        module = ""
        if frames:
            last_frame, lineno = frames[-1]
            module = f"{last_frame.f_code.co_filename}:{lineno}"
        data = {
            "message": message,
            EXCEPTION_INTERFACE: ExceptionInterface(
                value=message,
                type=type(exc).__name__,
                module=module,
            ),
        }
        return self.capture(data, frames or None, stacklevel=stacklevel + 1)
