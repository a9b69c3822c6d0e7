from __future__ import annotations

import logging
import threading
from time import monotonic
from typing import Any, Callable, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300.0
DEFAULT_IDLE_TIMEOUT_SECONDS = 10.0


class HttpTransport(Protocol):
    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response: ...


TransportFactory = Callable[[], HttpTransport]

_transport_override: HttpTransport | None = None


def set_http_transport(transport: HttpTransport | None) -> None:
    """Route every SureTax client through ``transport``; ``None`` clears the override.

    Not synchronized. Set it before clients are used concurrently (test setup),
    never while calls are in flight.
    """
    global _transport_override
    _transport_override = transport


def get_http_transport() -> HttpTransport | None:
    return _transport_override


class IdleRecyclingAdapter(HTTPAdapter):
    """HTTPAdapter that drops pooled connections after a quiet period.

    Pools are only cleared when no request is in flight through this adapter.
    """

    def __init__(self, *, idle_timeout: float = DEFAULT_IDLE_TIMEOUT_SECONDS, **kwargs: Any) -> None:
        if idle_timeout <= 0:
            raise ValueError("idle_timeout must be > 0")
        self.idle_timeout = idle_timeout
        self._state_lock = threading.Lock()
        self._in_flight = 0
        self._last_used = monotonic()
        super().__init__(**kwargs)

    def send(self, request: requests.PreparedRequest, *args: Any, **kwargs: Any) -> requests.Response:
        with self._state_lock:
            idle_for = monotonic() - self._last_used
            if self._in_flight == 0 and idle_for > self.idle_timeout:
                logger.debug("Recycling idle connections after %.1fs", idle_for)
                self.poolmanager.clear()
            self._in_flight += 1
        try:
            return super().send(request, *args, **kwargs)
        finally:
            with self._state_lock:
                self._in_flight -= 1
                self._last_used = monotonic()


def default_session_factory(idle_timeout: float = DEFAULT_IDLE_TIMEOUT_SECONDS) -> requests.Session:
    session = requests.Session()
    # Retry policy belongs to the caller
    adapter = IdleRecyclingAdapter(idle_timeout=idle_timeout, max_retries=Retry(total=0, read=False))
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class LazyTransport:
    """Builds a transport on first use, exactly once.

    The lock covers only the check-and-construct step, never the HTTP call made
    with the returned transport.
    """

    def __init__(self, factory: TransportFactory) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._transport: HttpTransport | None = None

    @property
    def initialized(self) -> bool:
        return self._transport is not None

    def get(self) -> HttpTransport:
        with self._lock:
            if self._transport is None:
                self._transport = self._factory()
                logger.debug("Constructed default SureTax transport %s", type(self._transport).__name__)
            return self._transport


__all__ = [
    "DEFAULT_IDLE_TIMEOUT_SECONDS",
    "DEFAULT_TIMEOUT_SECONDS",
    "HttpTransport",
    "IdleRecyclingAdapter",
    "LazyTransport",
    "TransportFactory",
    "default_session_factory",
    "get_http_transport",
    "set_http_transport",
]
