from __future__ import annotations

import logging
from functools import partial
from time import monotonic
from typing import TYPE_CHECKING

import requests

from domain.suretax import CancelRequest, CancelResponse, TaxRequest, TaxResponse

from .suretax_envelope import decode_cancel_response, decode_tax_response, encode_cancel_request, encode_tax_request
from .suretax_errors import TransportError, UnexpectedStatusError
from .suretax_transport import (
    DEFAULT_IDLE_TIMEOUT_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    HttpTransport,
    LazyTransport,
    TransportFactory,
    default_session_factory,
    get_http_transport,
)

if TYPE_CHECKING:
    from config import AppSettings

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}
_CHUNK_SIZE = 64 * 1024


class SureTaxClient:
    """Client for the SureTax tax calculation and cancellation endpoints.

    Only HTTP 200 counts as success here. The business outcome of a call lives
    in ``ResponseCode`` / ``Successful`` of the returned record and is left to
    the caller.
    """

    def __init__(
        self,
        *,
        url: str,
        cancel_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT_SECONDS,
        session: HttpTransport | None = None,
        session_factory: TransportFactory | None = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be > 0")

        self.url = url
        self.cancel_url = cancel_url
        self.timeout = timeout
        self._session = session
        self._default_session = LazyTransport(
            session_factory or partial(default_session_factory, idle_timeout=idle_timeout)
        )

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None, **kwargs: object) -> SureTaxClient:
        if settings is None:
            from config import config

            settings = config()
        return cls(
            url=settings.suretax_url,
            cancel_url=settings.suretax_cancel_url,
            timeout=settings.suretax_timeout_seconds,
            idle_timeout=settings.suretax_idle_timeout_seconds,
            **kwargs,  # type: ignore[arg-type]
        )

    def send(self, request: TaxRequest) -> TaxResponse:
        session = self._resolve_session()
        body = encode_tax_request(request)
        content = self._post(session, self.url, body)
        return decode_tax_response(content)

    def cancel(self, request: CancelRequest) -> CancelResponse:
        session = self._resolve_session()
        body = encode_cancel_request(request)
        content = self._post(session, self.cancel_url, body)
        return decode_cancel_response(content)

    def _resolve_session(self) -> HttpTransport:
        override = get_http_transport()
        if override is not None:
            return override
        if self._session is not None:
            return self._session
        return self._default_session.get()

    def _post(self, session: HttpTransport, url: str, body: bytes) -> bytes:
        logger.debug("Request Data: %s", body.decode("utf-8"))
        deadline = monotonic() + self.timeout
        try:
            response = session.request(
                "POST", url, data=body, headers=_JSON_HEADERS, timeout=self.timeout, stream=True
            )
        except requests.RequestException as exc:
            raise TransportError(f"SureTax request to {url} failed: {exc}") from exc

        logger.debug("Response Code: %s Status: %s", response.status_code, response.reason)

        # Read the whole body even when it is discarded so the connection can be reused
        content = self._read_body(response, url, deadline)

        if response.status_code != requests.codes.ok:
            raise UnexpectedStatusError(response.status_code, response.reason or "")

        logger.debug("Response Data: %s", content.decode("utf-8", errors="replace"))
        return content

    def _read_body(self, response: requests.Response, url: str, deadline: float) -> bytes:
        # requests only bounds each socket read, the deadline bounds the whole exchange
        chunks: list[bytes] = []
        try:
            if monotonic() > deadline:
                raise self._deadline_error(response, url)
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                chunks.append(chunk)
                if monotonic() > deadline:
                    raise self._deadline_error(response, url)
        except requests.RequestException as exc:
            raise TransportError(
                f"Reading SureTax response from {url} failed: {exc}", status_code=response.status_code
            ) from exc
        finally:
            response.close()
        return b"".join(chunks)

    def _deadline_error(self, response: requests.Response, url: str) -> TransportError:
        return TransportError(
            f"SureTax response from {url} not completed within {self.timeout}s", status_code=response.status_code
        )


__all__ = ["SureTaxClient"]
