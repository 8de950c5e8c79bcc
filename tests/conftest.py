import inspect
import json
import socket
from pathlib import Path

import httpx
import pytest

from agents.facturi import Client
from backend.clients.ucrm import UcrmClientResponseError


VIOLATIONS = []
ARTIFACTS_DIR = Path("artifacts")
REPORT = ARTIFACTS_DIR / "egress-violations.json"


def _is_allowed_callstack(allowed_paths: list[str]) -> bool:
    for frame in inspect.stack():
        filename = (frame.filename or "").replace("\\", "/")
        for ap in allowed_paths:
            if ap in filename:
                return True
    return False


@pytest.fixture(autouse=True, scope="session")
def egress_guard():
    """Block real network access; only tests and the billing client may build httpx clients."""
    allowed_client_paths = [
        "/tests/",
        "/backend/clients/ucrm/client.py",
    ]

    real_getaddrinfo = socket.getaddrinfo
    real_create_connection = socket.create_connection
    real_httpx_init = httpx.Client.__init__

    def guard_getaddrinfo(host, *args, **kwargs):
        if host in ("localhost", "127.0.0.1", "testserver"):
            return real_getaddrinfo(host, *args, **kwargs)
        VIOLATIONS.append({"fn": "getaddrinfo", "host": str(host)})
        raise RuntimeError("Egress blocked: getaddrinfo disallowed")

    def guard_create_connection(address, *args, **kwargs):
        VIOLATIONS.append({"fn": "create_connection", "address": str(address)})
        raise RuntimeError("Egress blocked: create_connection disallowed")

    def guard_httpx_init(self, *args, **kwargs):
        if not _is_allowed_callstack(allowed_client_paths):
            VIOLATIONS.append({"fn": "httpx.Client.__init__"})
            raise RuntimeError("Egress blocked: httpx.Client not allowed from this callsite")
        return real_httpx_init(self, *args, **kwargs)

    socket.getaddrinfo = guard_getaddrinfo  # type: ignore[assignment]
    socket.create_connection = guard_create_connection  # type: ignore[assignment]
    httpx.Client.__init__ = guard_httpx_init  # type: ignore[assignment]

    yield

    socket.getaddrinfo = real_getaddrinfo  # type: ignore[assignment]
    socket.create_connection = real_create_connection  # type: ignore[assignment]
    httpx.Client.__init__ = real_httpx_init  # type: ignore[assignment]

    if VIOLATIONS:
        ARTIFACTS_DIR.mkdir(parents=True, exist_ok=True)
        REPORT.write_text(json.dumps(VIOLATIONS, indent=2))


class FakeBillingApi:
    """Offline stand-in for the UCRM client used by export flow tests."""

    def __init__(self, *, invoices=None, clients=None, fail_on=None):
        self.invoices = invoices if invoices is not None else []
        self.clients = clients or {}
        self.fail_on = fail_on
        self.calls: list[tuple] = []
        self.closed = False

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_on == call[0]:
            raise UcrmClientResponseError(503, "billing api unavailable")

    def get_countries(self):
        self._record("countries")
        return [{"id": 54, "name": "Canada"}, {"id": 175, "name": "Romania"}, {"id": 249, "name": "United States"}]

    def get_states(self, country_id):
        self._record("states", country_id)
        if country_id == 54:
            return [{"id": 1, "name": "Alberta"}]
        if country_id == 249:
            return [{"id": 60, "name": "New York"}]
        return []

    def get_client(self, client_id):
        self._record("client", client_id)
        return Client.from_json(self.clients[client_id])

    def get_invoices(self, organization_id, *, created_from=None, created_to=None):
        self._record("invoices", organization_id, created_from, created_to)
        return list(self.invoices)

    def get_organizations(self):
        self._record("organizations")
        return [{"id": 1, "name": "Zero Sapte"}, {"id": 2, "name": "Other Org"}]

    def close(self):
        self.closed = True


@pytest.fixture
def sample_invoice_payloads():
    base = {
        "clientId": 10,
        "clientFirstName": "Ana",
        "clientLastName": "Ionescu",
        "clientCompanyName": None,
        "clientStreet1": "Bd. Tomis 5",
        "clientStreet2": None,
        "clientCity": "Constanta",
        "clientZipCode": "900002",
        "clientCountryId": 175,
        "clientStateId": None,
        "createdDate": "2024-05-01T00:00:00+0000",
        "dueDate": "2024-05-15T00:00:00+0000",
        "total": 119.0,
    }
    return [dict(base, number=f"2024-{idx:04d}") for idx in range(1, 4)]


@pytest.fixture
def fake_billing_api(sample_invoice_payloads):
    return FakeBillingApi(
        invoices=sample_invoice_payloads,
        clients={
            10: {"id": 10, "clientType": 1, "attributes": [{"key": "cnp", "value": "2900101223344"}]},
        },
    )
