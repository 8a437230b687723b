"""Create the campaigns table and optionally seed a sample campaign.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

import boto3

from campaignvault.core.config import AppSettings, DynamoDBConfig
from campaignvault.crypto.fernet_cipher import create_cipher
from campaignvault.ingest.pipeline import CampaignPipeline
from campaignvault.models.campaign import CampaignSummary
from campaignvault.persistence.dynamodb_backend import CAMPAIGNS_TABLE, DynamoDBCampaignStore

TABLE_DEFINITIONS: list[dict[str, Any]] = [
    {"name": CAMPAIGNS_TABLE},
]

SAMPLE_CSV = Path(__file__).resolve().parent.parent / "config" / "sample_campaign.csv"


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create the campaign tables. Skips any that already exist."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    for defn in TABLE_DEFINITIONS:
        table_name = f"{defn['name']}{suffix}"
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


def seed_sample_campaign(
    settings: AppSettings,
    csv_path: Path = SAMPLE_CSV,
) -> CampaignSummary:
    """Ingest the sample CSV through the pipeline into DynamoDB."""
    store = DynamoDBCampaignStore(
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )
    pipeline = CampaignPipeline(
        cipher=create_cipher(settings.encryption),
        store=store,
        settings=settings,
    )
    summary = pipeline.auto_ingest(csv_path.read_text(encoding="utf-8"), csv_path.name)
    print(f"  Seeded campaign {summary.name!r} with {summary.record_count} records")
    return summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed DynamoDB tables for CampaignVault")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--no-sample", action="store_true", help="Only create tables")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    if not args.no_sample:
        print("Seeding sample campaign...")
        settings = AppSettings(
            storage_backend="dynamodb",
            dynamodb=DynamoDBConfig(
                table_suffix=args.table_suffix,
                region=args.region,
                endpoint_url=args.endpoint_url,
            ),
        )
        seed_sample_campaign(settings)

    print("Done!")


if __name__ == "__main__":
    main()
