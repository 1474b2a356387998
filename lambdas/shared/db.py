"""DynamoDB client wrapper for single-table design."""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import boto3
from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

logger = Logger(child=True)


def convert_floats_to_decimal(obj: Any) -> Any:
    """Recursively convert floats to Decimal for DynamoDB compatibility.

    DynamoDB does not support Python float types. This function converts
    all floats in nested dicts/lists to Decimal.

    Args:
        obj: Any Python object (dict, list, or primitive)

    Returns:
        The object with all floats converted to Decimal
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    elif isinstance(obj, dict):
        return {k: convert_floats_to_decimal(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [convert_floats_to_decimal(item) for item in obj]
    return obj


def convert_decimals(obj: Any) -> Any:
    """Recursively convert DynamoDB Decimals back to int or float.

    Args:
        obj: Any Python object read from DynamoDB

    Returns:
        The object with integral Decimals as int and the rest as float
    """
    if isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    elif isinstance(obj, dict):
        return {k: convert_decimals(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [convert_decimals(item) for item in obj]
    return obj


class DynamoDBClient:
    """DynamoDB client wrapper with consistent error handling and logging.

    Implements single-table design patterns with PK/SK composite keys.
    """

    def __init__(self, table_name: str) -> None:
        """Initialize with table name.

        Args:
            table_name: Name of the DynamoDB table
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource("dynamodb")
        self.table = self.dynamodb.Table(table_name)

    def get_item(self, pk: str, sk: str) -> dict[str, Any] | None:
        """Get a single item by PK and SK.

        Args:
            pk: Partition key value
            sk: Sort key value

        Returns:
            Item dict or None if not found
        """
        try:
            response = self.table.get_item(Key={"PK": pk, "SK": sk})
            item = response.get("Item")
            if item:
                logger.debug("Item found", extra={"pk": pk, "sk": sk})
            return item
        except ClientError as e:
            logger.error("Failed to get item", extra={"error": str(e), "pk": pk, "sk": sk})
            raise

    def put_item_if_absent(self, pk: str, sk: str, data: dict[str, Any]) -> bool:
        """Create an item only if no item exists under the same key.

        Args:
            pk: Partition key value
            sk: Sort key value
            data: Attributes to store

        Returns:
            True if the item was created, False if it already existed
        """
        now = datetime.now(UTC).isoformat()
        item = {
            "PK": pk,
            "SK": sk,
            **convert_floats_to_decimal(data),
            "created_at": now,
            "updated_at": now,
        }

        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(PK)",
            )
            logger.info("Item created", extra={"pk": pk, "sk": sk})
            return True
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                logger.debug("Item already exists", extra={"pk": pk, "sk": sk})
                return False
            logger.error("Failed to put item", extra={"error": str(e), "pk": pk, "sk": sk})
            raise

    def query_by_pk(
        self,
        pk: str,
        sk_prefix: str | None = None,
    ) -> list[dict[str, Any]]:
        """Query all items by partition key with optional SK prefix.

        Follows LastEvaluatedKey until the partition is exhausted.

        Args:
            pk: Partition key value
            sk_prefix: Optional sort key prefix filter

        Returns:
            List of matching items
        """
        params: dict[str, Any] = {
            "KeyConditionExpression": "PK = :pk",
            "ExpressionAttributeValues": {":pk": pk},
        }

        if sk_prefix:
            params["KeyConditionExpression"] += " AND begins_with(SK, :sk)"
            params["ExpressionAttributeValues"][":sk"] = sk_prefix

        items: list[dict[str, Any]] = []
        try:
            while True:
                response = self.table.query(**params)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                params["ExclusiveStartKey"] = last_key
        except ClientError as e:
            logger.error("Failed to query", extra={"error": str(e), "pk": pk})
            raise

        logger.debug("Query complete", extra={"pk": pk, "count": len(items)})
        return items

    def update_item(
        self,
        pk: str,
        sk: str,
        updates: dict[str, Any],
        increments: dict[str, int] | None = None,
    ) -> dict[str, Any]:
        """Merge attributes into an item, creating it if absent.

        Attributes not named in ``updates`` or ``increments`` are preserved.
        Increments use DynamoDB's atomic ADD, so concurrent writers never
        lose each other's updates.

        Args:
            pk: Partition key value
            sk: Sort key value
            updates: Dict of attribute names to new values (SET)
            increments: Dict of numeric attribute names to deltas (ADD)

        Returns:
            The item after the update
        """
        set_parts = []
        add_parts = []
        names: dict[str, str] = {}
        values: dict[str, Any] = {":updated_at": datetime.now(UTC).isoformat()}

        for i, (key, value) in enumerate(updates.items()):
            placeholder = f"#attr{i}"
            value_placeholder = f":val{i}"
            set_parts.append(f"{placeholder} = {value_placeholder}")
            names[placeholder] = key
            values[value_placeholder] = convert_floats_to_decimal(value)

        for i, (key, delta) in enumerate((increments or {}).items()):
            placeholder = f"#inc{i}"
            value_placeholder = f":inc{i}"
            add_parts.append(f"{placeholder} {value_placeholder}")
            names[placeholder] = key
            values[value_placeholder] = Decimal(str(delta))

        set_parts.append("updated_at = :updated_at")
        update_expr = "SET " + ", ".join(set_parts)
        if add_parts:
            update_expr += " ADD " + ", ".join(add_parts)

        params: dict[str, Any] = {
            "Key": {"PK": pk, "SK": sk},
            "UpdateExpression": update_expr,
            "ExpressionAttributeValues": values,
            "ReturnValues": "ALL_NEW",
        }
        # DynamoDB rejects an empty names map
        if names:
            params["ExpressionAttributeNames"] = names

        try:
            response = self.table.update_item(**params)
            logger.info("Item updated", extra={"pk": pk, "sk": sk})
            return response.get("Attributes", {})
        except ClientError as e:
            logger.error("Failed to update", extra={"error": str(e), "pk": pk, "sk": sk})
            raise
