"""Core configuration with Pydantic v2 Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    enable_metrics: bool = True

    # Billing API (UCRM) connection
    UCRM_API_URL: str = "http://localhost/crm/api/v1.0"
    UCRM_APP_KEY: str = ""
    UCRM_TIMEOUT_S: float = 30.0
    UCRM_RETRY_MAX: int = 3
    # Shown as "back to CRM" link in the export form
    UCRM_PUBLIC_URL: str = ""

    # Export settings
    EXPORT_CHUNK_SIZE: int = 100
    # CSV of country ids whose states are loaded for address formatting (Canada, USA)
    EXPORT_STATE_COUNTRY_IDS: str = "54,249"

    # Supplier identity printed in every Antet block
    SUPPLIER_NAME: str = "ZERO SAPTE SERVICES S.R.L"
    SUPPLIER_TAX_ID: str = "RO45858226"
    SUPPLIER_REG_NUMBER: str = "J13/1003/2022"
    SUPPLIER_CAPITAL: str = "200.00"
    SUPPLIER_ADDRESS: str = (
        "Navodari str. Bv Mamaia Nord nr. 6 bl. Centrul eAfaceri ap. 01-05 jud. CONSTANTA"
    )
    SUPPLIER_BANK: str = "Banca Comerciala Romana S.A."
    SUPPLIER_IBAN: str = "RO51 RNCB 0119 1723 6788 0001"
    SUPPLIER_INFO: str = "Tel. 0241700000 Email stefan@sel.ro"

    def state_country_ids(self) -> list[int]:
        return [int(part) for part in self.EXPORT_STATE_COUNTRY_IDS.split(",") if part.strip()]


# Global settings instance
settings = Settings()
