"""EventBuilder のユニットテスト"""

import re

from k1s0_sentry_client.builder import (
    UNKNOWN_EXCEPTION_MESSAGE,
    EventBuilder,
    generate_event_id,
    utc_timestamp,
)
from k1s0_sentry_client.models import (
    ClientConfig,
    HttpInterface,
    Level,
    StackFrame,
    StacktraceInterface,
)

EVENT_ID_PATTERN = re.compile(r"^[0-9a-f]{12}4[0-9a-f]{3}[89ab][0-9a-f]{15}$")


class StaticContextProvider:
    def get_request_context(self) -> HttpInterface:
        return HttpInterface(method="GET", url="http://app.example.com/", env={"A": "1"})


def make_builder(auto_log_stacks: bool = True, **kwargs) -> EventBuilder:
    config = ClientConfig(
        servers=("https://sentry.example.com/api/store/",),
        project="1",
        public_key="pub",
        secret_key="sec",
        site="main",
        name="test-host",
        auto_log_stacks=auto_log_stacks,
    )
    return EventBuilder(config, StaticContextProvider(), **kwargs)


def test_generate_event_id_format() -> None:
    """イベント ID がハイフンなしの UUID v4 形式であること。"""
    assert EVENT_ID_PATTERN.match(generate_event_id())


def test_generate_event_id_unique() -> None:
    ids = {generate_event_id() for _ in range(10_000)}
    assert len(ids) == 10_000


def test_utc_timestamp_format() -> None:
    assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$", utc_timestamp())


def test_capture_defaults() -> None:
    """タイムスタンプとレベルが補完され、サーバー情報がマージされること。"""
    event = make_builder(auto_log_stacks=False).capture({"message": "hi"})
    assert EVENT_ID_PATTERN.match(event.event_id)
    assert event.level is Level.ERROR
    assert event.server_name == "test-host"
    assert event.project == "1"
    assert event.site == "main"
    assert event.http is not None
    assert event.http.url == "http://app.example.com/"
    assert event.stacktrace is None


def test_capture_keeps_caller_timestamp_and_level() -> None:
    event = make_builder(auto_log_stacks=False).capture(
        {"message": "hi", "timestamp": "2024-01-01T00:00:00Z", "level": Level.DEBUG}
    )
    assert event.timestamp == "2024-01-01T00:00:00Z"
    assert event.level is Level.DEBUG


def test_capture_server_fields_override_caller() -> None:
    event = make_builder(auto_log_stacks=False).capture(
        {"message": "hi", "project": "99", "event_id": "x"}
    )
    assert event.project == "1"
    assert event.event_id != "x"
    assert "project" not in event.extra


def test_message_renders_params() -> None:
    event = make_builder(auto_log_stacks=False).message("Hello %s", ["world"], level=Level.INFO)
    assert event.message == "Hello world"
    assert event.level is Level.INFO
    assert event.message_interface is not None
    assert event.message_interface.message == "Hello %s"
    assert event.message_interface.params == ("world",)


def test_message_without_params_is_verbatim() -> None:
    event = make_builder(auto_log_stacks=False).message("100% done")
    assert event.message == "100% done"


def test_auto_stack_excludes_capture_frame() -> None:
    """自動取得したスタックに capture 自身のフレームが含まれないこと。"""
    event = make_builder(auto_log_stacks=True).capture({"message": "hi"})
    assert event.stacktrace is not None
    frames = event.stacktrace.frames
    assert frames
    assert frames[-1].function == "test_auto_stack_excludes_capture_frame"
    assert all(f.module != "k1s0_sentry_client.builder" for f in frames)


def test_message_auto_stack_innermost_is_caller() -> None:
    event = make_builder(auto_log_stacks=True).message("hi")
    assert event.stacktrace is not None
    assert event.stacktrace.frames[-1].function == "test_message_auto_stack_innermost_is_caller"


def test_no_stack_when_auto_disabled() -> None:
    event = make_builder(auto_log_stacks=False).capture({"message": "hi"})
    assert event.stacktrace is None


def test_stack_true_forces_capture() -> None:
    event = make_builder(auto_log_stacks=False).capture({"message": "hi"}, stack=True)
    assert event.stacktrace is not None
    assert event.stacktrace.frames[-1].function == "test_stack_true_forces_capture"


def test_supplied_stacktrace_is_kept() -> None:
    supplied = StacktraceInterface(frames=(StackFrame(filename="x.py", lineno=1, function="f"),))
    event = make_builder(auto_log_stacks=True).capture(
        {"message": "hi", "sentry.interfaces.Stacktrace": supplied}
    )
    assert event.stacktrace == supplied


def test_custom_stack_formatter() -> None:
    calls = []

    def formatter(frames):
        calls.append(len(frames))
        return [StackFrame(filename="fmt.py", lineno=1, function="fmt")]

    event = make_builder(auto_log_stacks=True, stack_formatter=formatter).capture({"message": "hi"})
    assert calls and calls[0] > 0
    assert event.stacktrace is not None
    assert event.stacktrace.frames[0].filename == "fmt.py"


def _raise_value_error(message: str) -> None:
    raise ValueError(message)


def test_exception_uses_traceback() -> None:
    try:
        _raise_value_error("boom")
    except ValueError as e:
        event = make_builder(auto_log_stacks=False).exception(e)
    assert event.message == "boom"
    assert event.exception is not None
    assert event.exception.value == "boom"
    assert event.exception.type == "ValueError"
    raise_line = _raise_value_error.__code__.co_firstlineno + 1
    assert event.exception.module.endswith(f"test_builder.py:{raise_line}")
    assert event.stacktrace is not None
    assert [f.function for f in event.stacktrace.frames] == [
        "test_exception_uses_traceback",
        "_raise_value_error",
    ]


def test_exception_empty_message_placeholder() -> None:
    """空メッセージの例外はプレースホルダーになること。"""
    event = make_builder(auto_log_stacks=False).exception(RuntimeError())
    assert event.exception is not None
    assert event.exception.value == UNKNOWN_EXCEPTION_MESSAGE
    assert event.message == UNKNOWN_EXCEPTION_MESSAGE
    assert event.stacktrace is None


def test_get_ident() -> None:
    assert make_builder().get_ident("abc") == "abc"
