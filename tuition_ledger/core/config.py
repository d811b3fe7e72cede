from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./tuition_ledger.db", alias="DATABASE_URL")

    # Student cascade deletion: both the wait for a connection and the body are bounded.
    cascade_tx_timeout_ms: int = Field(30000, alias="CASCADE_TX_TIMEOUT_MS")
    cascade_tx_wait_ms: int = Field(30000, alias="CASCADE_TX_WAIT_MS")

    payment_tx_timeout_ms: int = Field(15000, alias="PAYMENT_TX_TIMEOUT_MS")
    payment_tx_wait_ms: int = Field(15000, alias="PAYMENT_TX_WAIT_MS")
    voucher_retry_attempts: int = Field(5, alias="VOUCHER_RETRY_ATTEMPTS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
