from __future__ import annotations

import json

import pytest

from domain.suretax import (
    Address,
    CancelRequest,
    ItemMessage,
    LineItem,
    TaxGroup,
    TaxLine,
    TaxRequest,
    TaxResponse,
)
from services.suretax_envelope import (
    decode_cancel_request,
    decode_cancel_response,
    decode_tax_request,
    decode_tax_response,
    encode_cancel_request,
    encode_tax_request,
    encode_tax_response,
    serialize_payload,
    unwrap_response,
)
from services.suretax_errors import EncodingError, EnvelopeUnmarshalError, PayloadUnmarshalError
from tests.helpers.suretax_samples import (
    CANCEL_RESPONSE_PAYLOAD,
    TAX_REQUEST_JSON,
    TAX_RESPONSE_PAYLOAD,
    TRANS_ID,
    make_tax_request,
    tax_response_body,
)


def test_encode_tax_request_embeds_payload_as_string() -> None:
    body = encode_tax_request(make_tax_request())

    outer = json.loads(body)
    assert list(outer) == ["request"]
    assert isinstance(outer["request"], str)
    assert outer["request"] == TAX_REQUEST_JSON
    assert body == ('{"request":' + json.dumps(TAX_REQUEST_JSON) + "}").encode("utf-8")


def test_encoded_request_reads_back_line_item_fields() -> None:
    body = encode_tax_request(make_tax_request())

    inner = json.loads(json.loads(body)["request"])

    assert inner["ClientNumber"] == "000000001"
    assert inner["ItemList"][0]["Units"] == "4"
    assert inner["ItemList"][0]["Seconds"] == "4"
    assert inner["ItemList"][0]["TaxSitusRule"] == "01"


def test_tax_request_round_trip_keeps_empty_values() -> None:
    request = make_tax_request(business_unit="", stan="")
    assert request.item_list[0].tax_exemption_code_list == []

    assert decode_tax_request(encode_tax_request(request)) == request


def test_tax_request_round_trip_with_populated_optionals() -> None:
    item = LineItem(
        line_number="7",
        tax_exemption_code_list=["00", "01"],
        udf="note",
        udf2="ünïcode",
        gl_account="GL-1",
        parameter1="a",
        parameter10="j",
        address=Address(city="Riverwoods", state="IL", postal_code="60015", plus4="1234"),
    )
    request = TaxRequest(client_number="42", stan="S-1", item_list=[item, LineItem(line_number="8")])

    assert decode_tax_request(encode_tax_request(request)) == request


def test_cancel_request_uses_request_cancel_key() -> None:
    request = CancelRequest(
        client_number="000000001", client_tracking="Certi", trans_id=str(TRANS_ID), validation_key="key"
    )

    body = encode_cancel_request(request)

    outer = json.loads(body)
    assert list(outer) == ["requestCancel"]
    assert json.loads(outer["requestCancel"]) == {
        "ClientNumber": "000000001",
        "ClientTracking": "Certi",
        "TransId": "616039832",
        "ValidationKey": "key",
    }
    assert decode_cancel_request(body) == request


def test_decode_tax_response_recorded_payload() -> None:
    response = decode_tax_response(tax_response_body())

    assert response.trans_id == TRANS_ID
    assert response.response_code == "9999"
    assert response.succeeded
    assert response.item_messages == [
        ItemMessage(line_number="0", message="Bill To Number is Required", response_code="9131")
    ]
    assert len(response.group_list) == 1
    group = response.group_list[0]
    assert group.invoice_number == "INV-002"
    assert len(group.tax_list) == 4
    assert group.tax_list[0].tax_amount == "8.46"
    assert group.tax_list[0].tax_authority_id == "12009"
    assert group.tax_list[3].tax_rate == pytest.approx(0.02289)


def test_tax_response_round_trip() -> None:
    response = TaxResponse(
        client_tracking="Certi",
        header_message="Success with Item errors",
        item_messages=[ItemMessage(line_number="2", message="Bad zip", response_code="9150")],
        response_code="9001",
        successful="Y",
        trans_id=1,
        total_tax="1.50",
        group_list=[
            TaxGroup(
                line_number="1",
                state_code="IL",
                tax_list=[TaxLine(tax_rate=0.0625, percent_taxable=1.0, fee_rate=0.25, tax_amount="1.50")],
            ),
            TaxGroup(line_number="3"),
        ],
    )

    assert decode_tax_response(encode_tax_response(response)) == response


def test_decode_tax_response_rejects_non_json_body() -> None:
    with pytest.raises(EnvelopeUnmarshalError) as exc_info:
        decode_tax_response(b"<html>Service Unavailable</html>")

    assert exc_info.value.payload == "<html>Service Unavailable</html>"


def test_decode_tax_response_rejects_non_string_wrapper_field() -> None:
    with pytest.raises(EnvelopeUnmarshalError):
        decode_tax_response(json.dumps({"d": {"ResponseCode": "9999"}}).encode())


def test_decode_tax_response_rejects_invalid_inner_payload() -> None:
    with pytest.raises(PayloadUnmarshalError) as exc_info:
        decode_tax_response(b'{"d":"{...invalid json...}"}')

    assert exc_info.value.payload == "{...invalid json...}"


def test_decode_tax_response_missing_wrapper_field_fails_on_payload() -> None:
    assert unwrap_response(b"{}") == ""

    with pytest.raises(PayloadUnmarshalError):
        decode_tax_response(b"{}")


def test_decode_tax_response_null_wrapper_field_fails_on_payload() -> None:
    assert unwrap_response(b'{"d":null}') == ""

    with pytest.raises(PayloadUnmarshalError):
        decode_tax_response(b'{"d":null}')


def test_unwrap_response_ignores_extra_wrapper_keys() -> None:
    assert unwrap_response(b'{"__type":"Response","d":"{}"}') == "{}"


def test_decode_tax_response_reads_nulls_as_zero_values() -> None:
    payload = {
        **TAX_RESPONSE_PAYLOAD,
        "ItemMessages": None,
        "STAN": None,
        "GroupList": [
            {
                "LineNumber": "01",
                "StateCode": None,
                "TaxList": [{"TaxAmount": "1.00", "TaxRate": None, "CityName": None}],
            },
            {"LineNumber": "02", "TaxList": None},
        ],
    }

    response = decode_tax_response(tax_response_body(payload))

    assert response.trans_id == TRANS_ID
    assert response.item_messages == []
    assert response.stan == ""
    assert response.group_list[0].state_code == ""
    assert response.group_list[0].tax_list[0] == TaxLine(tax_amount="1.00")
    assert response.group_list[1].tax_list == []


def test_decode_tax_response_reads_null_lists_and_records() -> None:
    response = decode_tax_response(tax_response_body({"TransId": 7, "ItemMessages": None, "GroupList": None}))

    assert response.trans_id == 7
    assert response.item_messages == []
    assert response.group_list == []
    assert decode_tax_request(
        b'{"request":"{\\"ItemList\\":[{\\"Address\\":null,\\"TaxExemptionCodeList\\":null}]}"}'
    ).item_list[0] == LineItem()


def test_decode_cancel_response_reads_null_strings() -> None:
    response = decode_cancel_response(
        b'{"Successful":"N","ResponseCode":"9410","HeaderMessage":null,"ClientTracking":null,"TransId":5}'
    )

    assert response.header_message == ""
    assert response.client_tracking == ""
    assert response.trans_id == 5


def test_decode_tax_response_rejects_mistyped_field() -> None:
    with pytest.raises(PayloadUnmarshalError):
        decode_tax_response(tax_response_body({"TransId": "not-a-number"}))


def test_decode_cancel_response_is_not_wrapped() -> None:
    response = decode_cancel_response(json.dumps(CANCEL_RESPONSE_PAYLOAD).encode())

    assert response.trans_id == TRANS_ID
    assert response.succeeded


def test_decode_cancel_response_does_not_unwrap() -> None:
    wrapped = json.dumps({"d": json.dumps(CANCEL_RESPONSE_PAYLOAD)}).encode()

    # Unknown keys are ignored, so the wrapper decodes to an empty record
    assert decode_cancel_response(wrapped).trans_id == 0

    with pytest.raises(PayloadUnmarshalError):
        decode_cancel_response(b"not json")


def test_serialize_payload_rejects_non_records() -> None:
    with pytest.raises(EncodingError):
        serialize_payload({"ClientNumber": "1"})  # type: ignore[arg-type]


def test_serialize_payload_surfaces_serializer_failures() -> None:
    broken = TaxRequest.model_construct(client_number=object())

    with pytest.raises(EncodingError) as exc_info:
        encode_tax_request(broken)

    assert exc_info.value.__cause__ is not None
