"""SureTax request/response records.

Attribute names are snake_case; the service's PascalCase keys are the aliases.
Field declaration order is the order the service expects on the wire. Every
field defaults to the zero value of its type because the service zero-fills
omitted values and expects the same from clients.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_pascal


class ResponseCode(StrEnum):
    SUCCESS = "9999"
    SUCCESS_WITH_ITEM_ERRORS = "9001"


class SureTaxModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # null decodes to the zero value of the field
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Address(SureTaxModel):
    primary_address_line: str = ""
    secondary_address_line: str = ""
    county: str = ""
    city: str = ""
    # Full state name or two-character abbreviation
    state: str = ""
    postal_code: str = ""
    plus4: str = ""
    # ISO country code, format XX
    country: str = ""
    # Takes precedence over the address / zip+4 when present
    geocode: str = ""
    verify_address: str = ""


class P2PAddress(Address):
    """Point-to-point (service) location of a private line transaction."""


class LineItem(SureTaxModel):
    line_number: str = ""
    invoice_number: str = ""
    customer_number: str = ""
    # NPANXXNNNN
    orig_number: str = ""
    term_number: str = ""
    bill_to_number: str = ""
    # MM/DD/YYYY, MM-DD-YYYY or YYYY-MM-DDTHH:MM:SS
    trans_date: str = ""
    billing_period_start_date: str = ""
    billing_period_end_date: str = ""
    # $$$$$$$$$.CCCC, leading minus for negative charges
    revenue: str = ""
    tax_included_code: str = ""
    units: str = ""
    unit_type: str = ""
    tax_situs_rule: str = ""
    trans_type_code: str = ""
    sales_type_code: str = ""
    regulatory_code: str = ""
    tax_exemption_code_list: list[str] = Field(default_factory=list)
    exempt_reason_code: str = ""
    udf: str = Field(default="", alias="UDF")
    udf2: str = Field(default="", alias="UDF2")
    cost_center: str = ""
    gl_account: str = Field(default="", alias="GLAccount")
    material_group: str = ""
    billing_days_in_period: str = ""
    origin_country_code: str = ""
    dest_country_code: str = ""
    parameter1: str = ""
    parameter2: str = ""
    parameter3: str = ""
    parameter4: str = ""
    parameter5: str = ""
    parameter6: str = ""
    parameter7: str = ""
    parameter8: str = ""
    parameter9: str = ""
    parameter10: str = ""
    currency_code: str = ""
    seconds: str = ""
    address: Address = Field(default_factory=Address)
    p2p_address: P2PAddress = Field(default_factory=P2PAddress, alias="P2PAddress")


class TaxRequest(SureTaxModel):
    client_number: str = ""
    business_unit: str = ""
    validation_key: str = ""
    # Calculation period
    data_year: str = ""
    data_month: str = ""
    # Remittance period
    cmpl_data_year: str = ""
    cmpl_data_month: str = ""
    total_revenue: str = ""
    # "0" default, "Q" quote only
    return_file_code: str = ""
    client_tracking: str = ""
    response_type: str = ""
    response_group: str = ""
    stan: str = Field(default="", alias="STAN")
    item_list: list[LineItem] = Field(default_factory=list)


class ItemMessage(SureTaxModel):
    line_number: str = ""
    message: str = ""
    # 9100-9400
    response_code: str = ""


class TaxLine(SureTaxModel):
    city_name: str = ""
    county_name: str = ""
    fee_rate: float = 0.0
    juriscode: str = ""
    percent_taxable: float = 0.0
    revenue: str = ""
    revenue_base: str = ""
    tax_amount: str = ""
    tax_authority_id: str = Field(default="", alias="TaxAuthorityID")
    tax_authority_name: str = ""
    # Already included in tax_amount, reported separately for reference
    tax_on_tax: str = ""
    tax_rate: float = 0.0
    tax_type_code: str = ""
    tax_type_desc: str = ""


class TaxGroup(SureTaxModel):
    customer_number: str = ""
    invoice_number: str = ""
    line_number: str = ""
    location_code: str = ""
    state_code: str = ""
    tax_list: list[TaxLine] = Field(default_factory=list)


class TaxResponse(SureTaxModel):
    client_tracking: str = ""
    header_message: str = ""
    item_messages: list[ItemMessage] = Field(default_factory=list)
    response_code: str = ""
    stan: str = Field(default="", alias="STAN")
    successful: str = ""
    trans_id: int = 0
    master_trans_id: int = 0
    total_tax: str = ""
    group_list: list[TaxGroup] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.successful == "Y"

    @property
    def has_item_errors(self) -> bool:
        return self.response_code == ResponseCode.SUCCESS_WITH_ITEM_ERRORS or bool(self.item_messages)


class CancelRequest(SureTaxModel):
    client_number: str = ""
    client_tracking: str = ""
    trans_id: str = ""
    validation_key: str = ""


class CancelResponse(SureTaxModel):
    successful: str = ""
    # 9999 success, 1101-1600 rejected, 9410 already cancelled
    response_code: str = ""
    header_message: str = ""
    client_tracking: str = ""
    trans_id: int = 0

    @property
    def succeeded(self) -> bool:
        return self.successful == "Y"


class RequestEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    request: str


class CancelRequestEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    request_cancel: str = Field(alias="requestCancel")


class ResponseEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    d: str = ""

    @field_validator("d", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


__all__ = [
    "Address",
    "CancelRequest",
    "CancelRequestEnvelope",
    "CancelResponse",
    "ItemMessage",
    "LineItem",
    "P2PAddress",
    "RequestEnvelope",
    "ResponseCode",
    "ResponseEnvelope",
    "TaxGroup",
    "TaxLine",
    "TaxRequest",
    "TaxResponse",
]
