from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from agents.facturi.dto import Client
from backend.core.config import settings

logger = logging.getLogger(__name__)


class UcrmClientError(RuntimeError):
    """Raised when the billing API client cannot complete a request."""


class UcrmClientResponseError(UcrmClientError):
    """Raised when the billing API answers with an unexpected HTTP status."""

    def __init__(self, status_code: int, message: str, response_body: Optional[bytes] = None):
        super().__init__(f"http_{status_code}: {message}")
        self.status_code = status_code
        self.response_body = response_body or b""


class UcrmClient:
    """Synchronous client for the UCRM billing API (read-only calls)."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        app_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_factor: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.UCRM_API_URL).rstrip("/")
        self.max_retries = max(1, int(max_retries if max_retries is not None else settings.UCRM_RETRY_MAX))
        self.backoff_factor = float(backoff_factor)
        self._client = httpx.Client(
            base_url=self.base_url + "/",
            headers={
                "X-Auth-App-Key": app_key if app_key is not None else settings.UCRM_APP_KEY,
                "Accept": "application/json",
            },
            timeout=timeout if timeout is not None else settings.UCRM_TIMEOUT_S,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> UcrmClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get_countries(self) -> List[Dict[str, Any]]:
        return self._as_list(self.get("countries"))

    def get_states(self, country_id: int) -> List[Dict[str, Any]]:
        return self._as_list(self.get("countries/states", {"countryId": country_id}))

    def get_client(self, client_id: int) -> Client:
        data = self.get(f"clients/{client_id}")
        if not isinstance(data, dict):
            raise UcrmClientError("client response must be a JSON object")
        return Client.from_json(data)

    def get_invoices(
        self,
        organization_id: int | str,
        *,
        created_from: Optional[str] = None,
        created_to: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {
            "organizationId": organization_id,
            "createdDateFrom": created_from or None,
            "createdDateTo": created_to or None,
            "proforma": "false",
        }
        return self._as_list(self.get("invoices", params))

    def get_organizations(self) -> List[Dict[str, Any]]:
        return self._as_list(self.get("organizations"))

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        query = {key: value for key, value in (params or {}).items() if value is not None}
        attempt = 0

        while attempt < self.max_retries:
            try:
                response = self._client.get(path.lstrip("/"), params=query)
            except httpx.HTTPError as exc:
                raise UcrmClientError(f"request to {path} failed: {exc}") from exc

            if response.status_code >= 400:
                if self._should_retry(response.status_code) and self._has_attempts_remaining(attempt):
                    logger.warning(
                        "Billing API request retried",
                        extra={"path": path, "status_code": response.status_code, "attempt": attempt + 1},
                    )
                    self._sleep(attempt)
                    attempt += 1
                    continue
                message = self._derive_error_message(response.content, response.reason_phrase)
                raise UcrmClientResponseError(response.status_code, message, response.content)
            return self._parse_json(response)

        raise UcrmClientError("max retries exceeded")

    def _has_attempts_remaining(self, attempt: int) -> bool:
        return attempt + 1 < self.max_retries

    def _should_retry(self, status_code: int) -> bool:
        if status_code == 429:
            return True
        return status_code >= 500

    def _sleep(self, attempt: int) -> None:
        time.sleep(self.backoff_factor * (2 ** attempt))

    def _parse_json(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise UcrmClientError("invalid JSON response") from exc

    def _as_list(self, payload: Any) -> List[Dict[str, Any]]:
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise UcrmClientError("expected list response")
        return payload

    def _derive_error_message(self, body: bytes, reason: Optional[str]) -> str:
        text = body.decode("utf-8", "ignore").strip()
        if text:
            return text
        if reason:
            return reason
        return "http_error"
