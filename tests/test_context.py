"""リクエストコンテキストプロバイダーのユニットテスト"""

from k1s0_sentry_client.context import (
    NullRequestContextProvider,
    WsgiRequestContextProvider,
    get_current_url,
)


def make_environ(**kwargs) -> dict:
    environ = {
        "REQUEST_METHOD": "POST",
        "HTTP_HOST": "app.example.com",
        "REQUEST_URI": "/orders?id=5",
        "QUERY_STRING": "id=5",
        "SERVER_PORT": "80",
        "HTTP_USER_AGENT": "pytest",
        "HTTP_COOKIE": "session=abc; theme=dark",
        "CONTENT_TYPE": "application/x-www-form-urlencoded",
        "wsgi.url_scheme": "http",
        "wsgi.input": object(),
    }
    environ.update(kwargs)
    return environ


def test_null_provider_empty_http_fields() -> None:
    """リクエスト外では HTTP 項目が空で、環境変数だけが入ること。"""
    ctx = NullRequestContextProvider({"PATH": "/usr/bin"}).get_request_context()
    assert ctx.method == ""
    assert ctx.url == ""
    assert ctx.headers == {}
    assert ctx.env == {"PATH": "/usr/bin"}


def test_wsgi_provider_builds_context() -> None:
    ctx = WsgiRequestContextProvider(make_environ(), data={"qty": "2"}).get_request_context()
    assert ctx.method == "POST"
    assert ctx.url == "http://app.example.com/orders?id=5"
    assert ctx.query_string == "id=5"
    assert ctx.data == {"qty": "2"}
    assert ctx.cookies == {"session": "abc", "theme": "dark"}
    assert ctx.headers["User-Agent"] == "pytest"
    assert ctx.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert "wsgi.input" not in ctx.env


def test_get_current_url_https_by_port() -> None:
    assert get_current_url(make_environ(SERVER_PORT="443")) == "https://app.example.com/orders?id=5"


def test_get_current_url_https_flag_off() -> None:
    assert get_current_url(make_environ(HTTPS="off")).startswith("http://")


def test_get_current_url_without_request_uri() -> None:
    environ = make_environ(SCRIPT_NAME="/app", PATH_INFO="/items")
    del environ["REQUEST_URI"]
    assert get_current_url(environ) == "http://app.example.com/app/items?id=5"
