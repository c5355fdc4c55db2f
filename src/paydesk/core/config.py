"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings


class PayrunConfig(BaseSettings):
    """Statutory rates and company policy used by the payrun calculator."""

    model_config = {"env_prefix": "PAYDESK_PAYRUN_"}

    gst_rate: Decimal = Decimal("0.18")
    pf_rate: Decimal = Decimal("0.12")
    pf_wage_ceiling: Decimal = Decimal("15000")
    esi_rate: Decimal = Decimal("0.0325")
    esi_wage_ceiling: Decimal = Decimal("21000")
    standard_hours_per_day: Decimal = Decimal("8")
    attendance_incentive_amount: Decimal = Decimal("500")
    attendance_incentive_min_days: Decimal = Decimal("26")


class ImportConfig(BaseSettings):
    """Spreadsheet import validation limits."""

    model_config = {"env_prefix": "PAYDESK_IMPORT_"}

    minimum_age: int = 18
    max_string_length: int = 255


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration."""

    model_config = {"env_prefix": "PAYDESK_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "ap-south-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "PAYDESK_REDIS_"}

    enabled: bool = True
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    template_cache_ttl: int = 300


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "PAYDESK_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    payrun: PayrunConfig = PayrunConfig()
    importing: ImportConfig = ImportConfig()
    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
