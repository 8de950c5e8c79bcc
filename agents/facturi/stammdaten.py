"""Supplier master data printed in every ``Antet`` block."""

from __future__ import annotations

import re
from dataclasses import dataclass

from backend.core.config import Settings, settings as default_settings


@dataclass(frozen=True, slots=True)
class SupplierProfile:
    name: str
    tax_id: str
    registration_number: str
    capital: str
    address: str
    bank: str
    iban: str
    info: str

    @property
    def file_code(self) -> str:
        """Numeric part of the tax id, used in download filenames."""

        return re.sub(r"\D", "", self.tax_id)

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> SupplierProfile:
        config = config or default_settings
        return cls(
            name=config.SUPPLIER_NAME,
            tax_id=config.SUPPLIER_TAX_ID,
            registration_number=config.SUPPLIER_REG_NUMBER,
            capital=config.SUPPLIER_CAPITAL,
            address=config.SUPPLIER_ADDRESS,
            bank=config.SUPPLIER_BANK,
            iban=config.SUPPLIER_IBAN,
            info=config.SUPPLIER_INFO,
        )
