import json
import tempfile
from decimal import Decimal
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Receipts API", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default=[
            "https://stephenscode.dev",
            "https://www.stephenscode.dev",
            "https://customer.stephenscode.dev",
        ],
        alias="ALLOWED_ORIGINS",
    )

    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    smtp_timeout: float = Field(default=30.0, alias="SMTP_TIMEOUT")
    mail_from: str | None = Field(default=None, alias="MAIL_FROM")
    operator_bcc: str | None = Field(default=None, alias="OPERATOR_BCC")

    brand_name: str = Field(default="StephensCode", alias="BRAND_NAME")
    brand_logo_url: str | None = Field(default=None, alias="BRAND_LOGO_URL")
    brand_logo_path: str | None = Field(default=None, alias="BRAND_LOGO_PATH")
    support_email: str = Field(default="support@stephenscode.dev", alias="SUPPORT_EMAIL")
    support_url: str = Field(default="https://stephenscode.dev/support", alias="SUPPORT_URL")

    scratch_dir: str = Field(default=tempfile.gettempdir(), alias="SCRATCH_DIR")
    tax_rate: Decimal = Field(default=Decimal("0.0625"), alias="TAX_RATE")

    stripe_secret_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")
    frontend_url: str = Field(default="https://stephenscode.dev", alias="FRONTEND_URL")
    currency: str = Field(default="usd", alias="CURRENCY")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        """Accept a JSON list or a comma-separated string."""
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                return json.loads(text)
            return [origin.strip() for origin in text.split(",") if origin.strip()]
        return value

    @property
    def sender_address(self) -> str:
        return self.mail_from or self.smtp_username or "noreply@localhost"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
