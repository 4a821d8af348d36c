"""イベントに添付する HTTP リクエストコンテキストの取得"""

from __future__ import annotations

import os
from collections.abc import Mapping
from http.cookies import SimpleCookie
from typing import Any, Protocol

from .models import HttpInterface


class RequestContextProvider(Protocol):
    """現在のリクエストコンテキストを返すプロトコル。"""

    def get_request_context(self) -> HttpInterface: ...


class NullRequestContextProvider:
    """リクエスト外 (バッチ・CLI など) 用のプロバイダー。

    HTTP 項目は空のまま、環境変数のスナップショットだけを添付する。
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def get_request_context(self) -> HttpInterface:
        environ = os.environ if self._environ is None else self._environ
        return HttpInterface(env=dict(environ))


class WsgiRequestContextProvider:
    """WSGI environ からリクエストコンテキストを組み立てるプロバイダー。"""

    def __init__(self, environ: Mapping[str, Any], data: Mapping[str, Any] | None = None) -> None:
        self._environ = environ
        self._data = dict(data or {})

    def get_request_context(self) -> HttpInterface:
        environ = self._environ
        return HttpInterface(
            method=environ.get("REQUEST_METHOD", ""),
            url=get_current_url(environ),
            query_string=environ.get("QUERY_STRING", ""),
            data=dict(self._data),
            cookies=_parse_cookies(environ.get("HTTP_COOKIE", "")),
            headers=_get_headers(environ),
            env={k: v for k, v in environ.items() if isinstance(v, str)},
        )


def get_current_url(environ: Mapping[str, Any]) -> str:
    """現在のリクエストの絶対 URL を再構築する。"""
    https = str(environ.get("HTTPS", "")).lower()
    if (https and https != "off") or str(environ.get("SERVER_PORT", "")) == "443":
        scheme = "https"
    else:
        scheme = environ.get("wsgi.url_scheme") or "http"
    host = environ.get("HTTP_HOST") or environ.get("SERVER_NAME", "")
    if not host:
        return ""
    uri = environ.get("REQUEST_URI")
    if not uri:
        uri = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
        if environ.get("QUERY_STRING"):
            uri += "?" + environ["QUERY_STRING"]
    return f"{scheme}://{host}{uri}"


def _get_headers(environ: Mapping[str, Any]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            name = key[5:]
        elif key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            name = key
        else:
            continue
        if value:
            headers[name.replace("_", "-").title()] = str(value)
    return headers


def _parse_cookies(raw: str) -> dict[str, str]:
    cookie: SimpleCookie = SimpleCookie()
    cookie.load(raw)
    return {name: morsel.value for name, morsel in cookie.items()}
