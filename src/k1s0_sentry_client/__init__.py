"""k1s0 sentry client library."""

from .builder import EventBuilder, generate_event_id
from .client import SentryClient
from .context import (
    NullRequestContextProvider,
    RequestContextProvider,
    WsgiRequestContextProvider,
)
from .dsn import DsnConfig, parse_dsn
from .exceptions import SentryClientError, SentryClientErrorCodes
from .models import (
    VERSION,
    ClientConfig,
    Event,
    ExceptionInterface,
    HttpInterface,
    Level,
    MessageInterface,
    StackFrame,
    StacktraceInterface,
)
from .settings import ClientSettings
from .signature import get_auth_header, get_signature, verify_signature
from .transport import EventSender, HttpTransport, Transport, decode_event, encode_event

__version__ = VERSION

__all__ = [
    "SentryClient",
    "EventBuilder",
    "EventSender",
    "Transport",
    "HttpTransport",
    "ClientConfig",
    "ClientSettings",
    "DsnConfig",
    "Event",
    "Level",
    "StackFrame",
    "MessageInterface",
    "ExceptionInterface",
    "StacktraceInterface",
    "HttpInterface",
    "RequestContextProvider",
    "NullRequestContextProvider",
    "WsgiRequestContextProvider",
    "SentryClientError",
    "SentryClientErrorCodes",
    "parse_dsn",
    "generate_event_id",
    "get_signature",
    "get_auth_header",
    "verify_signature",
    "encode_event",
    "decode_event",
]
