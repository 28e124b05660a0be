"""
Configuration for request publishers.

All configs are immutable (frozen dataclasses) so a publisher can be shared
between threads and subscribed to many times without races.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlsplit

from .exceptions import InvalidURLError

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ENUMS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPMethod(str, Enum):
    """HTTP methods."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class ParameterEncoding(str, Enum):
    """Where request parameters go."""
    QUERY = "query"  # URL query string
    JSON = "json"  # JSON request body


class ErrorDelivery(str, Enum):
    """
    How classified failures reach the subscriber.

    FAILURE: completion with the exception (default).
    VALUE: serialized ErrorModel emitted as a value, then finished.
    """
    FAILURE = "failure"
    VALUE = "value"


DEFAULT_HEADERS: Mapping[str, str] = MappingProxyType({"Content-Type": "application/json"})

# Characters left as-is when percent encoding a URL (query-allowed set plus '%'
# so already encoded URLs are not encoded twice)
URL_SAFE_CHARACTERS = "!$&'()*+,-./:;=?@_~%"


def encoding_for_method(method: "HTTPMethod") -> ParameterEncoding:
    """GET sends parameters in the query string, everything else as JSON."""
    if method == HTTPMethod.GET:
        return ParameterEncoding.QUERY
    return ParameterEncoding.JSON


def percent_encode_url(url: str) -> str:
    """
    Percent encode a URL for sending.

    Args:
        url: Raw URL, may contain spaces or non-ASCII characters

    Returns:
        Encoded URL

    Raises:
        InvalidURLError: URL is empty, contains control characters, cannot be
            encoded as UTF-8 or has no scheme/host

    Examples:
        >>> percent_encode_url("https://api.example.com/search?q=a b")
        'https://api.example.com/search?q=a%20b'
    """
    if not url or not url.strip():
        raise InvalidURLError(url, "URL is empty")

    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        raise InvalidURLError(url, "URL contains control characters")

    try:
        encoded = quote(url, safe=URL_SAFE_CHARACTERS)
    except UnicodeEncodeError:
        raise InvalidURLError(url)

    parts = urlsplit(encoded)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidURLError(url, "URL must be absolute http(s)")

    return encoded


def _freeze(d: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    if d is None:
        return None
    return MappingProxyType(dict(d))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Timeout configuration.

    Args:
        request: Time allowed for the request (seconds)
        connect: Separate connect timeout (defaults to request)

    Examples:
        >>> TimeoutConfig()  # 1200 seconds
        >>> TimeoutConfig(request=30, connect=5)
    """
    request: float = 1200.0
    connect: Optional[float] = None

    def __post_init__(self):
        """Validation."""
        if self.request <= 0:
            raise ValueError("request timeout must be positive")
        if self.connect is not None and self.connect <= 0:
            raise ValueError("connect timeout must be positive")

    def as_tuple(self) -> Tuple[float, float]:
        """Return (connect, read) for requests."""
        return (self.connect or self.request, self.request)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRANSPORT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TransportConfig:
    """
    Configuration of the default requests-based transport.

    Args:
        timeout: Timeout used when a request doesn't carry its own
        max_workers: Worker threads performing network I/O
        pool_connections: Number of connection pools to cache
        pool_maxsize: Max connections kept per pool
        verify_ssl: Verify SSL certificates
        allow_redirects: Follow redirects

    Examples:
        >>> TransportConfig(max_workers=4)
        >>> TransportConfig(timeout=TimeoutConfig(request=30), verify_ssl=False)
    """
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    max_workers: int = 8
    pool_connections: int = 10
    pool_maxsize: int = 10
    verify_ssl: bool = True
    allow_redirects: bool = True

    def __post_init__(self):
        """Validation."""
        if self.max_workers <= 0:
            raise ValueError("max_workers must be positive")
        if self.pool_connections <= 0:
            raise ValueError("pool_connections must be positive")
        if self.pool_maxsize <= 0:
            raise ValueError("pool_maxsize must be positive")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# REQUEST CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class RequestConfig:
    """
    Immutable description of one request.

    Produced by RequestBuilder and handed to the transport on every
    subscription. URL validity is checked when a subscriber attaches, not here.

    Args:
        url: Target URL (not yet percent encoded)
        method: HTTP method
        headers: Request headers (replaces the defaults entirely)
        parameters: Query parameters for GET, JSON body otherwise
        timeout: Per-request timeout (None = transport default)
        error_delivery: How failures reach the subscriber

    Examples:
        >>> config = RequestConfig(url="https://api.example.com/users")
        >>> config.encoding
        <ParameterEncoding.QUERY: 'query'>
        >>> config.with_method("POST").encoding
        <ParameterEncoding.JSON: 'json'>
    """
    url: str = ""
    method: HTTPMethod = HTTPMethod.GET
    headers: Mapping[str, str] = field(default_factory=lambda: DEFAULT_HEADERS)
    parameters: Optional[Mapping[str, Any]] = None
    timeout: Optional[TimeoutConfig] = None
    error_delivery: ErrorDelivery = ErrorDelivery.FAILURE

    def __post_init__(self):
        """Normalize enums and freeze mutable dicts."""
        if not isinstance(self.method, HTTPMethod):
            object.__setattr__(self, 'method', HTTPMethod(str(self.method).upper()))
        if not isinstance(self.error_delivery, ErrorDelivery):
            object.__setattr__(self, 'error_delivery', ErrorDelivery(self.error_delivery))
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', _freeze(self.headers or {}))
        if self.parameters is not None and not isinstance(self.parameters, MappingProxyType):
            object.__setattr__(self, 'parameters', _freeze(self.parameters))

    @property
    def encoding(self) -> ParameterEncoding:
        return encoding_for_method(self.method)

    def encoded_url(self) -> str:
        """
        Percent encoded URL.

        Raises:
            InvalidURLError: URL cannot be encoded
        """
        return percent_encode_url(self.url)

    def request_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for requests.Session.request (without url/method)."""
        kwargs: Dict[str, Any] = {"headers": dict(self.headers)}
        if self.parameters is not None:
            if self.encoding == ParameterEncoding.QUERY:
                kwargs["params"] = dict(self.parameters)
            else:
                kwargs["json"] = dict(self.parameters)
        return kwargs

    def with_url(self, url: str) -> "RequestConfig":
        return replace(self, url=url)

    def with_method(self, method: Union[HTTPMethod, str]) -> "RequestConfig":
        return replace(self, method=method)

    def with_headers(self, headers: Mapping[str, str]) -> "RequestConfig":
        """
        New config with headers merged into the existing ones.

        Example:
            >>> config.with_headers({"X-API-Key": "secret"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)

    def with_parameters(self, parameters: Optional[Mapping[str, Any]]) -> "RequestConfig":
        return replace(self, parameters=parameters)
