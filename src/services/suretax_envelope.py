"""Double JSON encoding used by the SureTax endpoints.

Outbound payloads are serialized to a JSON string first, and that string (not
the object) becomes the single field of an outer JSON object. The tax
endpoint answers the same way under ``d``; the cancel endpoint answers with
the bare record.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from domain.suretax import (
    CancelRequest,
    CancelRequestEnvelope,
    CancelResponse,
    RequestEnvelope,
    ResponseEnvelope,
    TaxRequest,
    TaxResponse,
)

from .suretax_errors import EncodingError, EnvelopeUnmarshalError, PayloadUnmarshalError

ModelT = TypeVar("ModelT", bound=BaseModel)


def serialize_payload(model: BaseModel) -> str:
    if not isinstance(model, BaseModel):
        raise EncodingError(f"Cannot serialize {type(model).__name__}, expected a SureTax record")
    try:
        return model.model_dump_json(by_alias=True)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise EncodingError(f"Failed to serialize {type(model).__name__}") from exc


def wrap_payload(envelope_cls: type[BaseModel], payload: str) -> bytes:
    # Envelopes have exactly one string field
    (field_name,) = envelope_cls.model_fields
    envelope = envelope_cls.model_validate({field_name: payload})
    return serialize_payload(envelope).encode("utf-8")


def unwrap_response(body: bytes | str) -> str:
    try:
        envelope = ResponseEnvelope.model_validate_json(body)
    except ValidationError as exc:
        raise EnvelopeUnmarshalError(
            f"Response wrapper unmarshal failed: {exc.errors()[0]['msg']}", payload=_as_text(body)
        ) from exc
    return envelope.d


def unwrap_request(envelope_cls: type[BaseModel], body: bytes | str) -> str:
    try:
        envelope = envelope_cls.model_validate_json(body)
    except ValidationError as exc:
        raise EnvelopeUnmarshalError(
            f"{envelope_cls.__name__} unmarshal failed: {exc.errors()[0]['msg']}", payload=_as_text(body)
        ) from exc
    (field_name,) = envelope_cls.model_fields
    return getattr(envelope, field_name)


def parse_payload(model_cls: type[ModelT], payload: bytes | str) -> ModelT:
    try:
        return model_cls.model_validate_json(payload)
    except ValidationError as exc:
        raise PayloadUnmarshalError(
            f"{model_cls.__name__} unmarshal failed: {exc.errors()[0]['msg']}", payload=_as_text(payload)
        ) from exc


def encode_tax_request(request: TaxRequest) -> bytes:
    return wrap_payload(RequestEnvelope, serialize_payload(request))


def encode_cancel_request(request: CancelRequest) -> bytes:
    return wrap_payload(CancelRequestEnvelope, serialize_payload(request))


def decode_tax_response(body: bytes | str) -> TaxResponse:
    return parse_payload(TaxResponse, unwrap_response(body))


def decode_cancel_response(body: bytes | str) -> CancelResponse:
    return parse_payload(CancelResponse, body)


def decode_tax_request(body: bytes | str) -> TaxRequest:
    return parse_payload(TaxRequest, unwrap_request(RequestEnvelope, body))


def decode_cancel_request(body: bytes | str) -> CancelRequest:
    return parse_payload(CancelRequest, unwrap_request(CancelRequestEnvelope, body))


def encode_tax_response(response: TaxResponse) -> bytes:
    return wrap_payload(ResponseEnvelope, serialize_payload(response))


def _as_text(body: bytes | str) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


__all__ = [
    "decode_cancel_request",
    "decode_cancel_response",
    "decode_tax_request",
    "decode_tax_response",
    "encode_cancel_request",
    "encode_tax_request",
    "encode_tax_response",
    "parse_payload",
    "serialize_payload",
    "unwrap_request",
    "unwrap_response",
    "wrap_payload",
]
