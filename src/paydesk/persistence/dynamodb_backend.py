"""DynamoDB backends for templates, the employee directory, payruns and benefits.

Every table uses a ``PK``/``SK`` string key pair:

    paydesk-import-templates  COMPANY#{company}                  TEMPLATE#{domain}
    paydesk-employees         COMPANY#{company}                  EMPLOYEE#{EMPLOYEE_ID}
    paydesk-payruns           COMPANY#{company}#PERIOD#{yyyy-mm} EMPLOYEE#{EMPLOYEE_ID}
    paydesk-benefits          COMPANY#{company}                  BENEFIT#{benefit_id}
"""

from __future__ import annotations

import json
import logging
from datetime import date
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import ClientError

from paydesk.core.exceptions import DirectoryError, PersistenceError
from paydesk.models.employee import Benefit, EmployeeRecord
from paydesk.models.payrun import PayrunResult
from paydesk.models.template import ImportDomain, TemplateColumn
from paydesk.payrun.calculator import month_number

logger = logging.getLogger(__name__)

TEMPLATES_TABLE = "paydesk-import-templates"
EMPLOYEES_TABLE = "paydesk-employees"
PAYRUNS_TABLE = "paydesk-payruns"
BENEFITS_TABLE = "paydesk-benefits"


def _to_item(value: Any) -> Any:
    """Make a model_dump() result storable: dates as ISO text, floats as Decimal."""
    if isinstance(value, dict):
        return {k: _to_item(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_item(v) for v in value]
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _strip_keys(item: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in item.items() if k not in ("PK", "SK")}


def _company_pk(company_id: str) -> str:
    return f"COMPANY#{company_id}"


def _employee_sk(employee_id: str) -> str:
    return f"EMPLOYEE#{employee_id.strip().upper()}"


def _period_pk(company_id: str, month: str, year: int) -> str:
    return f"COMPANY#{company_id}#PERIOD#{year:04d}-{month_number(month):02d}"


class _DynamoDBBackend:
    """Shared table access for the DynamoDB stores."""

    def __init__(self, table_suffix: str = "", region: str = "ap-south-1",
                 endpoint_url: str | None = None) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self, base: str):
        return self._ddb.Table(f"{base}{self._table_suffix}")

    def _query_pk(self, table_base: str, pk: str, sk_prefix: str | None = None) -> list[dict[str, Any]]:
        """Query all items with a given partition key, following pagination."""
        tbl = self._table(table_base)
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": "PK = :pk",
            "ExpressionAttributeValues": {":pk": pk},
        }
        if sk_prefix:
            kwargs["KeyConditionExpression"] = "PK = :pk AND begins_with(SK, :sk)"
            kwargs["ExpressionAttributeValues"][":sk"] = sk_prefix
        items: list[dict[str, Any]] = []
        while True:
            resp = tbl.query(**kwargs)
            items.extend(resp.get("Items", []))
            if "LastEvaluatedKey" not in resp:
                return items
            kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]

    def _get_item(self, table_base: str, pk: str, sk: str) -> dict[str, Any] | None:
        """Get a single item by PK + SK. Returns None if not found."""
        resp = self._table(table_base).get_item(Key={"PK": pk, "SK": sk})
        return resp.get("Item")


class DynamoDBTemplateStore(_DynamoDBBackend):
    """ITemplateStore backed by DynamoDB + optional Redis cache."""

    CACHE_TTL = 300  # 5 minutes

    def __init__(self, table_suffix: str = "", region: str = "ap-south-1",
                 endpoint_url: str | None = None, cache: Any = None,
                 cache_ttl: int | None = None) -> None:
        super().__init__(table_suffix, region, endpoint_url)
        self._cache = cache
        self._cache_ttl = cache_ttl or self.CACHE_TTL

    @staticmethod
    def _cache_key(company_id: str, domain: ImportDomain) -> str:
        return f"template:{company_id}:{domain}"

    def load(self, company_id: str, domain: ImportDomain) -> list[TemplateColumn] | None:
        cache_key = self._cache_key(company_id, domain)

        # Check cache first
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return [TemplateColumn.model_validate(c) for c in json.loads(cached)]

        item = self._get_item(TEMPLATES_TABLE, _company_pk(company_id), f"TEMPLATE#{domain}")
        if item is None:
            return None
        raw = item.get("columns", [])

        if self._cache is not None:
            self._cache.setex(cache_key, self._cache_ttl, json.dumps(raw))

        return [TemplateColumn.model_validate(c) for c in raw]

    def save(self, company_id: str, domain: ImportDomain, columns: list[TemplateColumn]) -> None:
        raw = [c.model_dump(mode="json") for c in columns]
        try:
            self._table(TEMPLATES_TABLE).put_item(Item={
                "PK": _company_pk(company_id),
                "SK": f"TEMPLATE#{domain}",
                "companyId": company_id,
                "domain": str(domain),
                "columns": raw,
            })
        except ClientError as exc:
            raise PersistenceError(f"Saving {domain} template for {company_id!r} failed: {exc}") from exc
        if self._cache is not None:
            self._cache.delete(self._cache_key(company_id, domain))


class DynamoDBEmployeeDirectory(_DynamoDBBackend):
    """IEmployeeDirectory backed by DynamoDB. Keys are upper-cased for case-insensitive lookup."""

    def lookup_by_business_id(self, company_id: str, employee_id: str) -> EmployeeRecord | None:
        try:
            item = self._get_item(EMPLOYEES_TABLE, _company_pk(company_id), _employee_sk(employee_id))
        except ClientError as exc:
            raise DirectoryError(f"Employee lookup failed for {employee_id!r}: {exc}") from exc
        return EmployeeRecord.model_validate(_strip_keys(item)) if item else None

    def list(self, company_id: str) -> list[EmployeeRecord]:
        try:
            items = self._query_pk(EMPLOYEES_TABLE, _company_pk(company_id), "EMPLOYEE#")
        except ClientError as exc:
            raise DirectoryError(f"Listing employees for {company_id!r} failed: {exc}") from exc
        return [EmployeeRecord.model_validate(_strip_keys(i)) for i in items]

    def add(self, company_id: str, employee: EmployeeRecord) -> EmployeeRecord:
        record = employee.model_copy(update={"company_id": company_id})
        item = _to_item(record.model_dump())
        item["PK"] = _company_pk(company_id)
        item["SK"] = _employee_sk(record.employee_id)
        try:
            self._table(EMPLOYEES_TABLE).put_item(
                Item=item, ConditionExpression="attribute_not_exists(SK)",
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise PersistenceError(f"Employee {record.employee_id} already exists") from exc
            raise PersistenceError(f"Saving employee {record.employee_id} failed: {exc}") from exc
        return record


class DynamoDBPayrunStore(_DynamoDBBackend):
    """IPayrunStore backed by DynamoDB, one partition per company and period."""

    def save(self, company_id: str, result: PayrunResult) -> None:
        item = _to_item(result.model_dump())
        item["PK"] = _period_pk(company_id, result.month, result.year)
        item["SK"] = _employee_sk(result.employee_id)
        try:
            self._table(PAYRUNS_TABLE).put_item(Item=item)
        except ClientError as exc:
            raise PersistenceError(f"Saving payrun for {result.employee_id} failed: {exc}") from exc

    def list_period(self, company_id: str, month: str, year: int) -> list[PayrunResult]:
        try:
            items = self._query_pk(PAYRUNS_TABLE, _period_pk(company_id, month, year))
        except ClientError as exc:
            raise PersistenceError(f"Listing payruns for {company_id!r} {month} {year} failed: {exc}") from exc
        return [PayrunResult.model_validate(_strip_keys(i)) for i in items]

    def has_period(self, company_id: str, month: str, year: int) -> bool:
        try:
            resp = self._table(PAYRUNS_TABLE).query(
                KeyConditionExpression="PK = :pk",
                ExpressionAttributeValues={":pk": _period_pk(company_id, month, year)},
                Limit=1,
            )
        except ClientError as exc:
            raise PersistenceError(f"Checking payruns for {company_id!r} {month} {year} failed: {exc}") from exc
        return bool(resp.get("Items"))

    def clear_period(self, company_id: str, month: str, year: int) -> int:
        """Delete every payrun stored for the period. Returns the number removed."""
        pk = _period_pk(company_id, month, year)
        try:
            items = self._query_pk(PAYRUNS_TABLE, pk)
            with self._table(PAYRUNS_TABLE).batch_writer() as batch:
                for item in items:
                    batch.delete_item(Key={"PK": pk, "SK": item["SK"]})
        except ClientError as exc:
            raise PersistenceError(f"Clearing payruns for {company_id!r} {month} {year} failed: {exc}") from exc
        return len(items)


class DynamoDBBenefitStore(_DynamoDBBackend):
    """IBenefitSource backed by DynamoDB."""

    def list(self, company_id: str) -> list[Benefit]:
        try:
            items = self._query_pk(BENEFITS_TABLE, _company_pk(company_id), "BENEFIT#")
        except ClientError as exc:
            raise DirectoryError(f"Listing benefits for {company_id!r} failed: {exc}") from exc
        return [Benefit.model_validate(_strip_keys(i)) for i in items]

    def put(self, company_id: str, benefit: Benefit) -> None:
        item = _to_item(benefit.model_dump())
        item["PK"] = _company_pk(company_id)
        item["SK"] = f"BENEFIT#{benefit.id}"
        self._table(BENEFITS_TABLE).put_item(Item=item)
