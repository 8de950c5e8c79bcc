"""Invoice-to-XML mapper for the ``Facturi`` import format.

Each chunk of invoices becomes one UTF-8 document with a ``Facturi`` root and
one ``Factura`` per invoice. Element names, order and literal values are fixed
by the consuming e-invoicing system and must not change.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Protocol, Union

from lxml import etree

from .dto import Buyer, Client, Invoice, quantize_money, resolve_buyer, to_decimal
from .lookup import LocationLookup
from .stammdaten import SupplierProfile

GENERATOR_VERSION = "facturi-xml-1"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
VAT_RATE_PERCENT = "19"
VAT_DIVISOR = Decimal("1.19")
CLIENT_COUNTRY_CODE = "RO"
CURRENCY = "RON"
UNIT = "buc"
QUANTITY = "1"
FLAG_NO = "NU"

logger = logging.getLogger(__name__)


def version() -> str:
    return GENERATOR_VERSION


class ClientSource(Protocol):
    def get_client(self, client_id: int) -> Client: ...


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Outcome of a generation run: documents on success, a cause on failure."""

    success: bool
    documents: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def ok(cls, documents: list[str]) -> ExportResult:
        return cls(success=True, documents=documents)

    @classmethod
    def failed(cls, error: str) -> ExportResult:
        return cls(success=False, error=error)


def chunked(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    if size <= 0:
        raise ValueError("chunk_size must be a positive integer")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def format_date(value: str) -> str:
    """Render an ISO date/datetime string as ``DD.MM.YYYY``."""

    if not isinstance(value, str):
        raise ValueError(f"Invalid date value: {value!r}")
    return datetime.fromisoformat(value.strip()).strftime("%d.%m.%Y")


def format_amount(value: Decimal) -> str:
    return f"{quantize_money(value):.2f}"


def vat_amount(total: Decimal) -> Decimal:
    """VAT contained in a gross ``total`` at 19%."""

    total = to_decimal(total)
    return total - total / VAT_DIVISOR


def _vat_text(total: Decimal, include_vat: bool) -> str:
    return format_amount(vat_amount(total)) if include_vat else "0"


def _append(parent: etree._Element, tag: str, text: Optional[str] = None) -> etree._Element:
    element = etree.SubElement(parent, tag)
    if text:
        element.text = text
    return element


class XmlGenerator:
    """Maps invoices into chunked ``Facturi`` XML documents."""

    def __init__(
        self,
        countries: Sequence[Mapping[str, Any]],
        states: Sequence[Mapping[str, Any]],
        clients: ClientSource,
        supplier: SupplierProfile | None = None,
    ) -> None:
        self.lookup = LocationLookup(countries, states)
        self.clients = clients
        self.supplier = supplier or SupplierProfile.from_settings()

    def generate(
        self,
        invoices: Optional[Iterable[Union[Invoice, Mapping[str, Any]]]],
        chunk_size: int,
        include_vat: bool,
    ) -> ExportResult:
        """Generate one document per chunk; any failure fails the whole batch.

        ``None`` is treated as an empty batch.
        """

        invoice_count = 0
        try:
            items = list(invoices or ())
            invoice_count = len(items)
            documents = [
                self._render_chunk(chunk, include_vat)
                for chunk in chunked(items, chunk_size)
            ]
        except Exception as exc:
            logger.exception(
                "XML generation failed",
                extra={"invoice_count": invoice_count, "chunk_size": chunk_size},
            )
            return ExportResult.failed(str(exc) or exc.__class__.__name__)

        logger.info(
            "XML generation finished",
            extra={"invoice_count": invoice_count, "document_count": len(documents)},
        )
        return ExportResult.ok(documents)

    def format_address(self, invoice: Invoice) -> str:
        street = invoice.client_street1
        if invoice.client_street2:
            street = f"{street}, {invoice.client_street2}"
        region = self.lookup.format_region(invoice.client_country_id, invoice.client_state_id)
        return f"{street}, {invoice.client_city}, {invoice.client_zip_code}, {region}"

    def _render_chunk(self, chunk: Sequence[Union[Invoice, Mapping[str, Any]]], include_vat: bool) -> str:
        root = etree.Element("Facturi")
        for item in chunk:
            invoice = item if isinstance(item, Invoice) else Invoice.from_json(item)
            client = self.clients.get_client(invoice.client_id)
            buyer = resolve_buyer(invoice, client)

            factura = _append(root, "Factura")
            self._render_header(factura, invoice, buyer)
            self._render_details(factura, invoice, buyer, include_vat)
            self._render_summary(factura, invoice, include_vat)
            self._render_observations(factura)
        body = etree.tostring(root, encoding="unicode", pretty_print=True)
        return XML_DECLARATION + body

    def _render_header(self, factura: etree._Element, invoice: Invoice, buyer: Buyer) -> None:
        supplier = self.supplier
        head = _append(factura, "Antet")
        _append(head, "FurnizorNume", supplier.name)
        _append(head, "FurnizorCIF", supplier.tax_id)
        _append(head, "FurnizorRegCom", supplier.registration_number)
        _append(head, "FurnizorCapital", supplier.capital)
        _append(head, "FurnizorAdresa", supplier.address)
        _append(head, "FurnizorBanca", supplier.bank)
        _append(head, "FurnizorBancaIBAN", supplier.iban)
        _append(head, "FurnizorInformatiiSuplimentare", supplier.info)
        _append(head, "ClientNume", buyer.name)
        _append(head, "ClientInformatiiSuplimentare")
        _append(head, "ClientCIF", buyer.tax_id)
        _append(head, "ClientNrRegCom", buyer.registration_number)
        _append(head, "ClientTara", CLIENT_COUNTRY_CODE)
        _append(head, "ClientAdresa", self.format_address(invoice))
        _append(head, "ClientBanca")
        _append(head, "ClientIBAN")
        _append(head, "FacturaNumar", invoice.number)
        _append(head, "FacturaData", format_date(invoice.created_date))
        _append(head, "FacturaScadenta", format_date(invoice.due_date))
        _append(head, "FacturaTaxareInversa", FLAG_NO)
        _append(head, "FacturaTVAIncasare", FLAG_NO)
        _append(head, "FacturaInformatiiSuplimentare")
        _append(head, "FacturaMoneda", CURRENCY)

    def _render_details(
        self, factura: etree._Element, invoice: Invoice, buyer: Buyer, include_vat: bool
    ) -> None:
        amount = format_amount(invoice.total)
        content = _append(_append(factura, "Detalii"), "Continut")
        line = _append(content, "Linie")
        _append(line, "LiniNrCrt", invoice.number)
        _append(line, "Descriere", buyer.name)
        _append(line, "CodArticolFurnizor")
        _append(line, "CodArticolClient")
        _append(line, "InformatiiSuplimentare")
        _append(line, "UM", UNIT)
        _append(line, "Cantitate", QUANTITY)
        _append(line, "Pret", amount)
        _append(line, "Valoare", amount)
        _append(line, "ProcTVA", VAT_RATE_PERCENT if include_vat else "0")
        _append(line, "TVA", _vat_text(invoice.total, include_vat))

    def _render_summary(self, factura: etree._Element, invoice: Invoice, include_vat: bool) -> None:
        amount = format_amount(invoice.total)
        summary = _append(factura, "Sumar")
        _append(summary, "TotalValoare", amount)
        _append(summary, "TotalTVA", _vat_text(invoice.total, include_vat))
        _append(summary, "TotalFactura", amount)

    def _render_observations(self, factura: etree._Element) -> None:
        observations = _append(factura, "Observatii")
        _append(observations, "txtObservatii")
        _append(observations, "SoldClient")
