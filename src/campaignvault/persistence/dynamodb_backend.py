"""DynamoDB backend implementing ICampaignStore."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import ClientError

from campaignvault.core.exceptions import StorageError
from campaignvault.models.campaign import Campaign, CampaignCreate

CAMPAIGNS_TABLE = "campaignvault-campaigns"
COUNTER_PK = "COUNTER#CAMPAIGN"
META_SK = "META"


def _campaign_pk(campaign_id: int) -> str:
    return f"CAMPAIGN#{campaign_id:010d}"


def _to_item(campaign: Campaign) -> dict[str, Any]:
    return {
        "PK": _campaign_pk(campaign.id),
        "SK": META_SK,
        "campaignId": campaign.id,
        "name": campaign.name,
        "encryptedData": campaign.encrypted_data,
        "fieldMappings": json.dumps(campaign.field_mappings),
        "recordCount": campaign.record_count,
        "createdAt": campaign.created_at.isoformat(),
    }


def _from_item(item: dict[str, Any]) -> Campaign:
    def _int(v: Any) -> int:
        return int(v) if isinstance(v, Decimal) else v

    return Campaign(
        id=_int(item["campaignId"]),
        name=item["name"],
        encrypted_data=item["encryptedData"],
        field_mappings=json.loads(item.get("fieldMappings") or "{}"),
        record_count=_int(item.get("recordCount", 0)),
        created_at=datetime.fromisoformat(item["createdAt"]),
    )


class DynamoDBCampaignStore:
    """Production ICampaignStore backed by a single DynamoDB table (PK/SK)."""

    def __init__(self, table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    @property
    def table_name(self) -> str:
        return f"{CAMPAIGNS_TABLE}{self._table_suffix}"

    def _table(self):
        return self._ddb.Table(self.table_name)

    def _next_id(self) -> int:
        """Atomically increment the campaign id counter item."""
        resp = self._table().update_item(
            Key={"PK": COUNTER_PK, "SK": META_SK},
            UpdateExpression="ADD lastId :one",
            ExpressionAttributeValues={":one": 1},
            ReturnValues="UPDATED_NEW",
        )
        return int(resp["Attributes"]["lastId"])

    # ---- ICampaignStore methods ----

    def create_campaign(self, campaign: CampaignCreate) -> Campaign:
        try:
            stored = Campaign(
                id=self._next_id(),
                created_at=datetime.now(timezone.utc),
                **campaign.model_dump(),
            )
            self._table().put_item(
                Item=_to_item(stored),
                ConditionExpression="attribute_not_exists(PK)",
            )
            return stored
        except ClientError as exc:
            raise StorageError(f"DynamoDB create_campaign failed: {exc}") from exc

    def get_campaign(self, campaign_id: int) -> Campaign | None:
        try:
            resp = self._table().get_item(Key={"PK": _campaign_pk(campaign_id), "SK": META_SK})
        except ClientError as exc:
            raise StorageError(f"DynamoDB get_campaign failed for id={campaign_id}: {exc}") from exc
        item = resp.get("Item")
        return _from_item(item) if item else None

    def get_campaigns(self) -> list[Campaign]:
        try:
            items: list[dict[str, Any]] = []
            kwargs: dict[str, Any] = {
                "FilterExpression": "begins_with(PK, :prefix)",
                "ExpressionAttributeValues": {":prefix": "CAMPAIGN#"},
            }
            while True:
                resp = self._table().scan(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise StorageError(f"DynamoDB get_campaigns failed: {exc}") from exc
        return sorted((_from_item(i) for i in items), key=lambda c: c.id)
