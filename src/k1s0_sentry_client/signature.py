"""Sentry 認証ヘッダーの署名生成と検証"""

from __future__ import annotations

import hashlib
import hmac

PROTOCOL_VERSION = "2.0"


def get_signature(message: str | bytes, timestamp: float | str, key: str) -> str:
    """``"{timestamp} {message}"`` の HMAC-SHA1 署名を16進文字列で返す。"""
    if isinstance(message, bytes):
        message = message.decode("utf-8")
    text = f"{timestamp} {message}"
    return hmac.new(key.encode("utf-8"), text.encode("utf-8"), hashlib.sha1).hexdigest()


def verify_signature(
    message: str | bytes,
    timestamp: float | str,
    key: str,
    signature: str,
) -> bool:
    """署名が一致するか検証する。"""
    expected = get_signature(message, timestamp, key)
    return hmac.compare_digest(expected, signature)


def get_auth_header(
    signature: str,
    timestamp: float | str,
    client: str,
    api_key: str | None = None,
) -> str:
    """X-Sentry-Auth ヘッダー値を組み立てる。"""
    header = [
        f"sentry_timestamp={timestamp}",
        f"sentry_signature={signature}",
        f"sentry_client={client}",
        f"sentry_version={PROTOCOL_VERSION}",
    ]
    if api_key:
        header.append(f"sentry_key={api_key}")
    return "Sentry " + ", ".join(header)
