"""イベントのエンコードと HTTP 送信"""

from __future__ import annotations

import base64
import json
import logging
import time
import zlib
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import urlsplit

import httpx

from .exceptions import SentryClientError, SentryClientErrorCodes
from .models import ClientConfig, Event
from .signature import get_auth_header, get_signature

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/octet-stream"


def encode_event(data: dict[str, Any]) -> str:
    """イベント辞書を JSON → zlib → base64 の順でエンコードする。"""
    raw = json.dumps(data).encode("utf-8")
    return base64.b64encode(zlib.compress(raw)).decode("ascii")


def decode_event(message: str | bytes) -> dict[str, Any]:
    """encode_event の逆変換。"""
    raw = zlib.decompress(base64.b64decode(message))
    data: dict[str, Any] = json.loads(raw.decode("utf-8"))
    return data


class Transport(ABC):
    """1 エンドポイントへの送信を担う抽象基底クラス。"""

    @abstractmethod
    def send(self, url: str, data: str, headers: dict[str, str]) -> None:
        """送信する。失敗した場合は SentryClientError を送出する。"""
        ...


class HttpTransport(Transport):
    """httpx を使った HTTP(S) トランスポート。"""

    def __init__(self, verify: bool = True, timeout_seconds: float = 10.0) -> None:
        self._verify = verify
        self._timeout = timeout_seconds

    def send(self, url: str, data: str, headers: dict[str, str]) -> None:
        try:
            with httpx.Client(verify=self._verify, timeout=self._timeout) as client:
                resp = client.post(url, content=data.encode("ascii"), headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SentryClientError(
                code=SentryClientErrorCodes.DELIVERY_FAILED,
                message=f"Event delivery failed: HTTP {e.response.status_code}",
                cause=e,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise SentryClientError(
                code=SentryClientErrorCodes.DELIVERY_FAILED,
                message=f"Event delivery failed: {e}",
                cause=e,
            ) from e


# スキームごとの登録済みトランスポート。udp などは未登録。
TRANSPORTS: dict[str, type[Transport]] = {
    "http": HttpTransport,
    "https": HttpTransport,
}


class EventSender:
    """設定済みの全エンドポイントへイベントを送信する。

    送信はベストエフォートで、失敗はログに残すだけで呼び出し元には伝えない。
    """

    def __init__(
        self,
        config: ClientConfig,
        transports: dict[str, Transport] | None = None,
    ) -> None:
        self._config = config
        if transports is None:
            transports = {
                scheme: cls(verify=config.verify_ssl, timeout_seconds=config.timeout_seconds)
                for scheme, cls in TRANSPORTS.items()
            }
        self._transports = transports

    def _transport_for(self, url: str) -> Transport:
        scheme = urlsplit(url).scheme.lower()
        transport = self._transports.get(scheme)
        if transport is None:
            raise SentryClientError(
                code=SentryClientErrorCodes.UNSUPPORTED_SCHEME,
                message=f"No transport registered for scheme: {scheme}",
            )
        return transport

    def build_headers(self, message: str, timestamp: float) -> dict[str, str]:
        """署名付きの送信ヘッダーを組み立てる。"""
        signature = get_signature(message, timestamp, self._config.secret_key)
        return {
            "X-Sentry-Auth": get_auth_header(
                signature,
                timestamp,
                self._config.client_id,
                self._config.public_key,
            ),
            "Content-Type": CONTENT_TYPE,
        }

    def send(self, event: Event) -> None:
        """イベントを送信する。例外は送出しない。"""
        try:
            message = encode_event(event.to_dict())
        except (TypeError, ValueError) as e:
            logger.warning(
                "Failed to encode event",
                extra={"event_id": event.event_id, "error": str(e)},
            )
            return

        for url in self._config.servers:
            try:
                headers = self.build_headers(message, time.time())
                self._transport_for(url).send(url, message, headers)
            except Exception as e:
                logger.warning(
                    "Failed to send event",
                    extra={"event_id": event.event_id, "server": url, "error": str(e)},
                )
                continue
            logger.debug("Event sent", extra={"event_id": event.event_id, "server": url})
