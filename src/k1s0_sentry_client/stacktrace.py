"""生のコールスタックを StackFrame 列に整形する。"""

from __future__ import annotations

import linecache
import traceback
from collections.abc import Callable, Sequence
from types import FrameType, TracebackType

from .models import StackFrame

RawFrame = tuple[FrameType, int]
StackFormatter = Callable[[Sequence[RawFrame]], list[StackFrame]]

MAX_VAR_LENGTH = 200


def _safe_repr(value: object) -> str:
    try:
        text = repr(value)
    except Exception:
        return "<unrepresentable>"
    if len(text) > MAX_VAR_LENGTH:
        return text[: MAX_VAR_LENGTH - 3] + "..."
    return text


def walk_stack_from(frame: FrameType | None, skip: int = 0) -> list[RawFrame]:
    """frame から外側へ辿ったスタックを、外側のフレームから順に返す。

    Args:
        frame: 最も内側のフレーム
        skip: 内側から取り除くフレーム数
    """
    frames = list(traceback.walk_stack(frame))
    del frames[:skip]
    frames.reverse()
    return frames


def walk_traceback(tb: TracebackType | None) -> list[RawFrame]:
    """トレースバックを外側のフレームから順に返す。"""
    return list(traceback.walk_tb(tb))


def get_stack_info(frames: Sequence[RawFrame]) -> list[StackFrame]:
    """(frame, lineno) の列を StackFrame のリストに変換する。"""
    result: list[StackFrame] = []
    for frame, lineno in frames:
        code = frame.f_code
        filename = code.co_filename
        context_line = linecache.getline(filename, lineno, frame.f_globals).strip()
        result.append(
            StackFrame(
                filename=filename,
                lineno=lineno,
                function=code.co_name,
                module=str(frame.f_globals.get("__name__", "")),
                context_line=context_line,
                vars={name: _safe_repr(value) for name, value in frame.f_locals.items()},
            )
        )
    return result
