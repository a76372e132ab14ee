"""
DynamoDB utility functions for data access.
"""
import os
from typing import Dict, List, Optional, Any
import boto3
from boto3.dynamodb.conditions import Key

ENTRY_SK_PREFIX = "ENTRY#"
CYCLE_CONFIG_SK = "CYCLE_CONFIG"
DEFAULT_OWNER_ID = "default"

# Singleton instance
_dynamo_instance = None

def get_dynamo() -> 'DynamoDBClient':
    """
    Get or create singleton DynamoDB client instance.

    The table name is read from MNEMOSYNE_TABLE_NAME on first use.

    Example:
        dynamo = get_dynamo()
        item = dynamo.get_item({"PK": "OWNER#default", "SK": "CYCLE_CONFIG"})

    Returns:
        DynamoDBClient: Singleton instance of DynamoDB client

    Raises:
        EnvironmentError: If MNEMOSYNE_TABLE_NAME environment variable is not set
    """
    global _dynamo_instance
    if _dynamo_instance is None:
        try:
            table_name = os.environ['MNEMOSYNE_TABLE_NAME']
        except KeyError:
            raise EnvironmentError(
                "MNEMOSYNE_TABLE_NAME environment variable not set. "
                "This variable must be set to the DynamoDB table name."
            )
        _dynamo_instance = DynamoDBClient(table_name)
    return _dynamo_instance

class DynamoDBClient:
    """Client for interacting with DynamoDB table."""

    def __init__(self, table_name: str):
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)

    def put_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Put a single item into the table.

        Args:
            item: Dictionary containing item attributes

        Returns:
            Response from DynamoDB
        """
        return self.table.put_item(Item=item)

    def get_item(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """
        Get a single item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Item if found, None otherwise
        """
        response = self.table.get_item(Key=key)
        return response.get('Item')

    def query_items(
        self,
        partition_key: str,
        partition_value: str,
        sort_key_condition: Optional[Key] = None
    ) -> List[Dict[str, Any]]:
        """
        Query items using partition key and optional sort key condition.

        Follows LastEvaluatedKey until every page has been read.

        Args:
            partition_key: Name of partition key
            partition_value: Value of partition key
            sort_key_condition: Optional sort key condition

        Returns:
            List of matching items
        """
        key_condition = Key(partition_key).eq(partition_value)
        if sort_key_condition:
            key_condition = key_condition & sort_key_condition

        kwargs = {"KeyConditionExpression": key_condition}
        items = []
        while True:
            response = self.table.query(**kwargs)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def delete_item(self, key: Dict[str, str]) -> Dict[str, Any]:
        """
        Delete an item from the table.

        Args:
            key: Dictionary containing partition key and sort key

        Returns:
            Response from DynamoDB
        """
        return self.table.delete_item(Key=key)

def get_owner_id() -> str:
    """Owner partition for the single tracked user."""
    return os.environ.get('MNEMOSYNE_OWNER_ID', DEFAULT_OWNER_ID)

def create_pk(owner_id: str) -> str:
    """Create partition key from owner ID."""
    return f"OWNER#{owner_id}"

def create_entry_sk(timestamp_str: str, entry_id: str) -> str:
    """
    Create sort key for mood entries.

    ISO timestamps sort lexicographically, so a key prefix query returns
    entries in chronological order.

    Args:
        timestamp_str: ISO format timestamp of the entry
        entry_id: Entry identifier, keeps same-instant entries distinct

    Returns:
        Sort key in format "ENTRY#{timestamp}#{entry_id}"
    """
    return f"{ENTRY_SK_PREFIX}{timestamp_str}#{entry_id}"
