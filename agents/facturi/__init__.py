"""Export of billing invoices into the ``Facturi`` XML import format."""

from .dto import (
    Client,
    ClientAttribute,
    Company,
    Individual,
    Invoice,
    quantize_money,
    resolve_buyer,
)
from .export import (
    ExportOutcome,
    ExportRequest,
    normalize_date_param,
    parse_vat_flag,
    run_export,
)
from .generator import ExportResult, XmlGenerator, format_date, vat_amount, version
from .links import build_filename, content_hash, make_links
from .lookup import LocationLookup, build_name_map
from .stammdaten import SupplierProfile

__all__ = [
    "Client",
    "ClientAttribute",
    "Company",
    "Individual",
    "Invoice",
    "quantize_money",
    "resolve_buyer",
    "ExportOutcome",
    "ExportRequest",
    "normalize_date_param",
    "parse_vat_flag",
    "run_export",
    "ExportResult",
    "XmlGenerator",
    "format_date",
    "vat_amount",
    "version",
    "build_filename",
    "content_hash",
    "make_links",
    "LocationLookup",
    "build_name_map",
    "SupplierProfile",
]
