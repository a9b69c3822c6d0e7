from __future__ import annotations

from typing import Any


class SureTaxError(RuntimeError):
    # Whether repeating the same call may succeed
    transient: bool = False

    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class EncodingError(SureTaxError):
    """The outbound record could not be serialized."""


class TransportError(SureTaxError):
    """The HTTP exchange failed before a status line was received."""

    transient = True


class UnexpectedStatusError(SureTaxError):
    def __init__(self, status_code: int, status: str) -> None:
        super().__init__(f"SureTax returned {status_code} {status}".rstrip(), status_code=status_code)
        self.status = status


class EnvelopeUnmarshalError(SureTaxError):
    """The response body is not a valid ``{"d": "<json>"}`` wrapper."""


class PayloadUnmarshalError(SureTaxError):
    """The inner payload is not valid JSON for the expected record."""


__all__ = [
    "EncodingError",
    "EnvelopeUnmarshalError",
    "PayloadUnmarshalError",
    "SureTaxError",
    "TransportError",
    "UnexpectedStatusError",
]
