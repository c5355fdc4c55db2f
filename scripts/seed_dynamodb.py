"""Create the Paydesk DynamoDB tables and seed a demo company.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
from datetime import date
from decimal import Decimal
from typing import Any

import boto3

from paydesk.models.employee import Benefit, EmployeeRecord
from paydesk.persistence.dynamodb_backend import (
    BENEFITS_TABLE,
    EMPLOYEES_TABLE,
    PAYRUNS_TABLE,
    TEMPLATES_TABLE,
    DynamoDBBenefitStore,
    DynamoDBEmployeeDirectory,
)

TABLE_NAMES: list[str] = [TEMPLATES_TABLE, EMPLOYEES_TABLE, PAYRUNS_TABLE, BENEFITS_TABLE]

DEMO_COMPANY = "DEMO"

SAMPLE_EMPLOYEES: list[EmployeeRecord] = [
    EmployeeRecord(
        employee_id="LIV-1", name="Asha Verma", department="Assembly", designation="Trainee",
        date_of_joining=date(2023, 4, 3), category="Intern", employee_category="NAPS",
        salary_type="Stipend", fixed_stipend=Decimal("12000"), pf_enrolled=True, esi_enrolled=True,
    ),
    EmployeeRecord(
        employee_id="LIV-2", name="Ravi Kumar", department="Paint Shop", designation="Operator",
        date_of_joining=date(2022, 11, 14), category="Contract", employee_category="NON-NAPS",
        salary_type="Wages", fixed_stipend=Decimal("18500"), special_allowance=Decimal("1500"),
        pf_enrolled=True,
    ),
    EmployeeRecord(
        employee_id="LIV-3", name="Meena Iyer", department="Quality", designation="Inspector",
        date_of_joining=date(2021, 6, 1), category="Regular", employee_category="NATS",
        salary_type="Salary", fixed_stipend=Decimal("26000"), ot_rate_per_hour=Decimal("150"),
    ),
]

SAMPLE_BENEFITS: list[Benefit] = [
    Benefit(id="BEN-1", title="Uniform", type="Deduction", description="Monthly uniform recovery",
            amount=Decimal("200")),
    Benefit(id="BEN-2", title="Hostel", type="Deduction", description="Hostel rent",
            amount=Decimal("1500"), employee_id="LIV-1"),
]


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create the PK/SK tables. Skips tables that already exist."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    for name in TABLE_NAMES:
        table_name = f"{name}{suffix}"
        if table_name in existing:
            print(f"  Table {table_name} already exists, skipping")
            continue
        client.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        print(f"  Created table {table_name}")


def seed_demo_company(suffix: str = "", region: str = "ap-south-1",
                      endpoint_url: str | None = None, company_id: str = DEMO_COMPANY) -> None:
    """Seed sample employees and benefits, skipping employees already present."""
    directory = DynamoDBEmployeeDirectory(suffix, region, endpoint_url)
    added = 0
    for employee in SAMPLE_EMPLOYEES:
        if directory.lookup_by_business_id(company_id, employee.employee_id) is None:
            directory.add(company_id, employee.model_copy(update={"id": employee.employee_id.lower()}))
            added += 1
    print(f"  Seeded {added} employees for {company_id}")

    benefits = DynamoDBBenefitStore(suffix, region, endpoint_url)
    for benefit in SAMPLE_BENEFITS:
        benefits.put(company_id, benefit)
    print(f"  Seeded {len(SAMPLE_BENEFITS)} benefits for {company_id}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed DynamoDB tables for Paydesk")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="ap-south-1", help="AWS region")
    parser.add_argument("--company-id", default=DEMO_COMPANY, help="Company to seed")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    print("Seeding data...")
    seed_demo_company(args.table_suffix, args.region, args.endpoint_url, args.company_id)

    print("Done!")


if __name__ == "__main__":
    main()
