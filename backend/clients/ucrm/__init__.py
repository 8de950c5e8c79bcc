"""Read-only client for the UCRM billing API."""

from .client import (
    UcrmClient,
    UcrmClientError,
    UcrmClientResponseError,
)

__all__ = [
    "UcrmClient",
    "UcrmClientError",
    "UcrmClientResponseError",
]
