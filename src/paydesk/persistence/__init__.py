"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from typing import NamedTuple

from paydesk.core.config import AppSettings
from paydesk.core.protocols import (
    IBenefitSource,
    ICacheBackend,
    IEmployeeDirectory,
    IPayrunStore,
    ITemplateStore,
)
from paydesk.persistence.dynamodb_backend import (
    DynamoDBBenefitStore,
    DynamoDBEmployeeDirectory,
    DynamoDBPayrunStore,
    DynamoDBTemplateStore,
)
from paydesk.persistence.redis_backend import RedisCacheBackend


class Persistence(NamedTuple):
    templates: ITemplateStore
    directory: IEmployeeDirectory
    payruns: IPayrunStore
    benefits: IBenefitSource
    cache: ICacheBackend | None


def create_persistence(settings: AppSettings | None = None) -> Persistence:
    """Create wired-up persistence backends from application settings."""
    if settings is None:
        settings = AppSettings()

    cache = None
    if settings.redis.enabled:
        cache = RedisCacheBackend(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
        )

    ddb = {
        "table_suffix": settings.dynamodb.table_suffix,
        "region": settings.dynamodb.region,
        "endpoint_url": settings.dynamodb.endpoint_url,
    }
    return Persistence(
        templates=DynamoDBTemplateStore(**ddb, cache=cache, cache_ttl=settings.redis.template_cache_ttl),
        directory=DynamoDBEmployeeDirectory(**ddb),
        payruns=DynamoDBPayrunStore(**ddb),
        benefits=DynamoDBBenefitStore(**ddb),
        cache=cache,
    )
