"""CLI: export billing invoices as ``Facturi`` XML documents."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Callable, Iterable

from agents.facturi import ExportOutcome, ExportRequest, SupplierProfile, parse_vat_flag, run_export, version
from backend.clients.ucrm import UcrmClient
from backend.core.config import settings
from backend.core.observability import init_observability, set_trace_id


def write_documents(outcome: ExportOutcome, output_dir: Path) -> list[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for filename, document in zip(outcome.filenames, outcome.result.documents):
        target = output_dir / filename
        target.write_text(document, encoding="utf-8")
        written.append(target)
    return written


def export_invoices(
    *,
    api: Any,
    organization: str,
    since: str | None,
    until: str | None,
    include_vat: bool,
    chunk_size: int,
    output_dir: Path | None = None,
) -> dict:
    outcome = run_export(
        api,
        ExportRequest(organization_id=organization, since=since, until=until, include_vat=include_vat),
        chunk_size=chunk_size,
        state_country_ids=settings.state_country_ids(),
        supplier=SupplierProfile.from_settings(settings),
    )
    written = write_documents(outcome, output_dir) if outcome.success and output_dir else []
    return {
        "success": outcome.success,
        "error": outcome.result.error,
        "invoices": outcome.invoice_count,
        "documents": len(outcome.result.documents),
        "files": outcome.filenames,
        "written": [str(path) for path in written],
        "generator_version": version(),
    }


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export invoices to Facturi XML")
    parser.add_argument("--organization", required=True, help="Organization id in the billing system")
    parser.add_argument("--since", default="", help="Created date from (YYYY-MM-DD)")
    parser.add_argument("--until", default="", help="Created date to (YYYY-MM-DD)")
    parser.add_argument("--tva", choices=["0", "1"], default="1", help="1 = compute 19%% VAT, 0 = no VAT")
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=settings.EXPORT_CHUNK_SIZE,
        help="Invoices per XML document",
    )
    parser.add_argument("--output-dir", type=Path, help="Write each document to this directory")
    parser.add_argument("--verbose", action="store_true", help="Enable JSON logs")
    return parser.parse_args(list(argv) if argv is not None else None)


def main(
    argv: Iterable[str] | None = None,
    api_factory: Callable[[], Any] = UcrmClient,
) -> int:
    args = parse_args(argv)
    if args.chunk_size <= 0:
        raise SystemExit("Chunk size must be positive")
    if args.verbose:
        init_observability()
        set_trace_id()

    api = api_factory()
    try:
        summary = export_invoices(
            api=api,
            organization=args.organization,
            since=args.since,
            until=args.until,
            include_vat=bool(parse_vat_flag(args.tva)),
            chunk_size=args.chunk_size,
            output_dir=args.output_dir,
        )
    finally:
        close = getattr(api, "close", None)
        if close is not None:
            close()

    print(json.dumps(summary, indent=2))
    return 0 if summary["success"] else 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
