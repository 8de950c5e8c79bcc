"""End-to-end export: fetch from the billing API, generate XML, encode links."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from backend.core.observability import metrics

from .dto import Client
from .generator import ExportResult, XmlGenerator
from .links import build_filename, make_links
from .stammdaten import SupplierProfile

logger = logging.getLogger(__name__)

VAT_FLAGS = {"0": False, "1": True}


class BillingApi(Protocol):
    def get_countries(self) -> List[Dict[str, Any]]: ...

    def get_states(self, country_id: int) -> List[Dict[str, Any]]: ...

    def get_client(self, client_id: int) -> Client: ...

    def get_invoices(
        self,
        organization_id: int | str,
        *,
        created_from: Optional[str] = None,
        created_to: Optional[str] = None,
    ) -> List[Dict[str, Any]]: ...


def normalize_date_param(value: Optional[str]) -> Optional[str]:
    """Return ``YYYY-MM-DD`` for a date/datetime string; blank stays ``None``."""

    if value is None or not value.strip():
        return None
    return datetime.fromisoformat(value.strip()).date().isoformat()


def parse_vat_flag(value: Optional[str]) -> Optional[bool]:
    """``"1"`` → True, ``"0"`` → False, anything else → None (no export)."""

    if value is None:
        return None
    return VAT_FLAGS.get(value.strip())


@dataclass(frozen=True, slots=True)
class ExportRequest:
    organization_id: int | str
    since: Optional[str]
    until: Optional[str]
    include_vat: bool


@dataclass(slots=True)
class ExportOutcome:
    result: ExportResult
    links: List[str] = field(default_factory=list)
    filenames: List[str] = field(default_factory=list)
    invoice_count: int = 0

    @property
    def success(self) -> bool:
        return self.result.success


def load_states(api: BillingApi, country_ids: Sequence[int]) -> List[Dict[str, Any]]:
    states: List[Dict[str, Any]] = []
    for country_id in country_ids:
        states.extend(api.get_states(country_id))
    return states


def run_export(
    api: BillingApi,
    request: ExportRequest,
    *,
    chunk_size: int,
    state_country_ids: Sequence[int],
    supplier: SupplierProfile | None = None,
    today: date | None = None,
) -> ExportOutcome:
    """Run a full export; failures are returned, never raised."""

    start = time.time()
    supplier = supplier or SupplierProfile.from_settings()
    invoices: List[Dict[str, Any]] = []
    try:
        since = normalize_date_param(request.since)
        until = normalize_date_param(request.until)
        countries = api.get_countries()
        states = load_states(api, state_country_ids)
        generator = XmlGenerator(countries, states, api, supplier)
        invoices = api.get_invoices(request.organization_id, created_from=since, created_to=until)
    except Exception as exc:
        logger.exception(
            "Export preparation failed",
            extra={"organization_id": str(request.organization_id)},
        )
        metrics.observe_duration(start, "facturi_export_duration_ms")
        metrics.increment_exports("failed")
        return ExportOutcome(result=ExportResult.failed(str(exc) or exc.__class__.__name__))

    result = generator.generate(invoices, chunk_size, request.include_vat)
    metrics.observe_duration(start, "facturi_export_duration_ms")
    if not result.success:
        metrics.increment_exports("failed")
        return ExportOutcome(result=result, invoice_count=len(invoices))

    today = today or date.today()
    links = make_links(result.documents, today=today, file_code=supplier.file_code)
    filenames = [build_filename(doc, today, supplier.file_code) for doc in result.documents]
    metrics.increment_exports("ok")
    metrics.add_exported_invoices(len(invoices))
    metrics.add_exported_documents(len(result.documents))
    logger.info(
        "Export finished",
        extra={
            "organization_id": str(request.organization_id),
            "invoice_count": len(invoices),
            "document_count": len(result.documents),
        },
    )
    return ExportOutcome(result=result, links=links, filenames=filenames, invoice_count=len(invoices))
