"""Data transfer objects for invoice export.

Records come from the billing API as camelCase JSON mappings. ``from_json``
maps them into read-only dataclasses; the client type branch is resolved once
per invoice into a :class:`Buyer` variant (``Individual`` or ``Company``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Union


CLIENT_TYPE_INDIVIDUAL = 1
CLIENT_TYPE_COMPANY = 2
MISSING_REGISTRATION_NUMBER = "NULL"
CNP_ATTRIBUTE_KEY = "cnp"

DecimalLike = Decimal | str | int | float


def _ensure_mapping(payload: Any, context: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValueError(f"{context} expected mapping payload, got {type(payload).__name__}")
    return payload


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def to_decimal(value: DecimalLike) -> Decimal:
    """Convert input to ``Decimal``; floats go through ``str`` to avoid binary noise."""

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError(f"Unsupported decimal input: {type(value)!r}")
    if isinstance(value, (int, str, float)):
        return Decimal(str(value))
    raise TypeError(f"Unsupported decimal input: {type(value)!r}")


def quantize_money(amount: DecimalLike) -> Decimal:
    """Round to two decimals (ROUND_HALF_UP)."""

    return to_decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class ClientAttribute:
    key: str
    value: str


@dataclass(frozen=True, slots=True)
class Client:
    id: int
    client_type: int
    company_registration_number: Optional[str] = None
    company_tax_id: Optional[str] = None
    attributes: tuple[ClientAttribute, ...] = field(default_factory=tuple)

    @property
    def is_company(self) -> bool:
        return self.client_type == CLIENT_TYPE_COMPANY

    def attribute(self, key: str) -> Optional[str]:
        for attribute in self.attributes:
            if attribute.key == key:
                return attribute.value
        return None

    @classmethod
    def from_json(cls, payload: Any) -> Client:
        data = _ensure_mapping(payload, "Client")
        attributes = tuple(
            ClientAttribute(key=_text(item.get("key")), value=_text(item.get("value")))
            for item in data.get("attributes") or []
            if isinstance(item, Mapping)
        )
        return cls(
            id=int(data["id"]),
            client_type=int(data["clientType"]),
            company_registration_number=data.get("companyRegistrationNumber"),
            company_tax_id=data.get("companyTaxId"),
            attributes=attributes,
        )


@dataclass(frozen=True, slots=True)
class Invoice:
    client_id: int
    number: str
    total: Decimal
    created_date: str
    due_date: str
    client_first_name: str = ""
    client_last_name: str = ""
    client_company_name: str = ""
    client_street1: str = ""
    client_street2: str = ""
    client_city: str = ""
    client_zip_code: str = ""
    client_country_id: Optional[int] = None
    client_state_id: Optional[int] = None

    @classmethod
    def from_json(cls, payload: Any) -> Invoice:
        data = _ensure_mapping(payload, "Invoice")
        return cls(
            client_id=int(data["clientId"]),
            number=str(data["number"]),
            total=to_decimal(data["total"]),
            created_date=data["createdDate"],
            due_date=data["dueDate"],
            client_first_name=_text(data.get("clientFirstName")),
            client_last_name=_text(data.get("clientLastName")),
            client_company_name=_text(data.get("clientCompanyName")),
            client_street1=_text(data.get("clientStreet1")),
            client_street2=_text(data.get("clientStreet2")),
            client_city=_text(data.get("clientCity")),
            client_zip_code=_text(data.get("clientZipCode")),
            client_country_id=_optional_int(data.get("clientCountryId")),
            client_state_id=_optional_int(data.get("clientStateId")),
        )


@dataclass(frozen=True, slots=True)
class Individual:
    """Natural person identified by CNP."""

    name: str
    cnp: str

    @property
    def tax_id(self) -> str:
        return self.cnp

    @property
    def registration_number(self) -> str:
        return ""


@dataclass(frozen=True, slots=True)
class Company:
    name: str
    tax_id: str
    registration_number: str


Buyer = Union[Individual, Company]


def _registration_number(value: Optional[str]) -> str:
    # "0" counts as missing, same as an empty value
    if not value or value == "0":
        return MISSING_REGISTRATION_NUMBER
    return value


def resolve_buyer(invoice: Invoice, client: Client) -> Buyer:
    """Resolve the invoice's buyer identity from its client record."""

    if client.is_company:
        return Company(
            name=invoice.client_company_name,
            tax_id=_text(client.company_tax_id),
            registration_number=_registration_number(client.company_registration_number),
        )
    return Individual(
        name=f"{invoice.client_first_name} {invoice.client_last_name}",
        cnp=client.attribute(CNP_ATTRIBUTE_KEY) or "",
    )
