from __future__ import annotations

from typing import Any, Callable

import pytest

from agents.facturi import Client, SupplierProfile

COUNTRIES = [
    {"id": 54, "name": "Canada"},
    {"id": 175, "name": "Romania"},
    {"id": 249, "name": "United States"},
]
STATES = [
    {"id": 1, "name": "Alberta"},
    {"id": 60, "name": "New York"},
]

INDIVIDUAL_CLIENT = {
    "id": 10,
    "clientType": 1,
    "companyRegistrationNumber": None,
    "companyTaxId": None,
    "attributes": [
        {"key": "contractNo", "value": "C-1"},
        {"key": "cnp", "value": "1850101123456"},
    ],
}
INDIVIDUAL_WITHOUT_CNP = {
    "id": 11,
    "clientType": 1,
    "attributes": [{"key": "contractNo", "value": "C-2"}],
}
COMPANY_CLIENT = {
    "id": 20,
    "clientType": 2,
    "companyRegistrationNumber": "J13/55/2020",
    "companyTaxId": "RO123456",
    "attributes": [],
}
COMPANY_WITHOUT_REG_NO = {
    "id": 21,
    "clientType": 2,
    "companyRegistrationNumber": None,
    "companyTaxId": "RO654321",
    "attributes": [],
}


class FakeClientSource:
    """In-memory client lookup that records every fetch."""

    def __init__(self, clients: dict[int, dict[str, Any]]):
        self._clients = clients
        self.calls: list[int] = []

    def get_client(self, client_id: int) -> Client:
        self.calls.append(client_id)
        if client_id not in self._clients:
            raise LookupError(f"client {client_id} not found")
        return Client.from_json(self._clients[client_id])


@pytest.fixture
def countries() -> list[dict[str, Any]]:
    return list(COUNTRIES)


@pytest.fixture
def states() -> list[dict[str, Any]]:
    return list(STATES)


@pytest.fixture
def make_invoice() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        payload = {
            "clientId": 10,
            "clientFirstName": "Ion",
            "clientLastName": "Popescu",
            "clientCompanyName": None,
            "clientStreet1": "Str. Mare 1",
            "clientStreet2": None,
            "clientCity": "Constanta",
            "clientZipCode": "900001",
            "clientCountryId": 175,
            "clientStateId": None,
            "createdDate": "2024-03-05T00:00:00+0000",
            "dueDate": "2024-03-19T00:00:00+0000",
            "number": "2024-0001",
            "total": 119.0,
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def supplier() -> SupplierProfile:
    return SupplierProfile(
        name="ZERO SAPTE SERVICES S.R.L",
        tax_id="RO45858226",
        registration_number="J13/1003/2022",
        capital="200.00",
        address="Navodari jud. CONSTANTA",
        bank="Banca Comerciala Romana S.A.",
        iban="RO51 RNCB 0119 1723 6788 0001",
        info="Tel. 0241700000",
    )


@pytest.fixture
def client_source() -> FakeClientSource:
    return FakeClientSource(
        {
            record["id"]: record
            for record in (
                INDIVIDUAL_CLIENT,
                INDIVIDUAL_WITHOUT_CNP,
                COMPANY_CLIENT,
                COMPANY_WITHOUT_REG_NO,
            )
        }
    )
