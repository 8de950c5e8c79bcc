import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel

from agents.facturi import ExportOutcome, ExportRequest, SupplierProfile, parse_vat_flag, run_export
from backend.clients.ucrm import UcrmClient, UcrmClientError
from backend.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
FORM_TITLE = "Export facturi in XML"

_templates = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


class ExportResponse(BaseModel):
    success: bool
    invoice_count: int
    documents: int
    filenames: list[str]
    links: list[str]
    error: str | None = None


def get_billing_api() -> Iterator[UcrmClient]:
    client = UcrmClient()
    try:
        yield client
    finally:
        client.close()


def _execute(api: Any, organization: str, since: str | None, until: str | None, include_vat: bool) -> ExportOutcome:
    request = ExportRequest(
        organization_id=organization,
        since=since,
        until=until,
        include_vat=include_vat,
    )
    return run_export(
        api,
        request,
        chunk_size=settings.EXPORT_CHUNK_SIZE,
        state_country_ids=settings.state_country_ids(),
        supplier=SupplierProfile.from_settings(settings),
    )


@router.get("/", response_class=HTMLResponse)
def export_form(
    organization: str | None = Query(default=None),
    since: str | None = Query(default=None),
    until: str | None = Query(default=None),
    tva: str | None = Query(default=None),
    api: Any = Depends(get_billing_api),
) -> HTMLResponse:
    download_links: list[str] = []
    error: str | None = None

    if organization is not None and since is not None and until is not None:
        include_vat = parse_vat_flag(tva)
        if include_vat is not None:
            outcome = _execute(api, organization, since, until, include_vat)
            if outcome.success:
                download_links = outcome.links
            else:
                error = outcome.result.error

    try:
        organizations = api.get_organizations()
    except UcrmClientError as exc:
        logger.error("Loading organizations failed", extra={"error": str(exc)})
        organizations = []
        error = error or str(exc)

    html = _templates.get_template("form.html").render(
        title=FORM_TITLE,
        organizations=organizations,
        ucrm_public_url=settings.UCRM_PUBLIC_URL,
        download_links=download_links,
        error=error,
        selected={
            "organization": organization or "",
            "since": since or "",
            "until": until or "",
            "tva": tva or "",
        },
    )
    return HTMLResponse(content=html)


@router.get("/api/v1/export", response_model=ExportResponse)
def export_json(
    organization: str = Query(...),
    since: str | None = Query(default=None),
    until: str | None = Query(default=None),
    tva: str = Query(...),
    api: Any = Depends(get_billing_api),
) -> ExportResponse:
    include_vat = parse_vat_flag(tva)
    if include_vat is None:
        raise HTTPException(
            status_code=422,
            detail={"error": "invalid_tva", "detail": "tva must be 0 or 1"},
        )

    outcome = _execute(api, organization, since, until, include_vat)
    return ExportResponse(
        success=outcome.success,
        invoice_count=outcome.invoice_count,
        documents=len(outcome.result.documents),
        filenames=outcome.filenames,
        links=outcome.links,
        error=outcome.result.error,
    )
