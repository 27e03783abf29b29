"""
DynamoDB Cache Adapter - AWS-native cache store.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from gcp_credkit.adapters import cache_codec
from gcp_credkit.domain import clock
from gcp_credkit.logging import get_logger
from gcp_credkit.ports.cache_port import CacheLookup, CachePort, MISS

logger = get_logger(__name__)


class DynamoDBCacheAdapter(CachePort):
    """
    DynamoDB-backed cache store.

    Requires: pip install boto3

    Table schema:
        - Partition key: cache_key (S)
        - TTL attribute: expires_at_timestamp

    DynamoDB deletes expired items lazily, so reads re-check expiry.
    """

    def __init__(
        self,
        table_name: str = "gcp-credkit-cache",
        region_name: str = "us-east-1",
        table=None,
    ):
        """
        Initialize DynamoDB cache adapter.

        Args:
            table_name: DynamoDB table name
            region_name: AWS region
            table: Pre-built boto3 Table resource (skips client creation)
        """
        self._table_name = table_name

        if table is not None:
            self._table = table
            return

        try:
            import boto3
        except ImportError:
            raise ImportError("boto3 package required: pip install boto3")

        dynamodb = boto3.resource("dynamodb", region_name=region_name)
        self._table = dynamodb.Table(table_name)

    def get(self, key: str) -> CacheLookup:
        response = self._table.get_item(Key={"cache_key": key})
        item = response.get("Item")
        if not item:
            return MISS

        expires_at_timestamp = item.get("expires_at_timestamp")
        if expires_at_timestamp is not None and clock.now().timestamp() >= int(expires_at_timestamp):
            return MISS

        try:
            return CacheLookup(hit=True, value=cache_codec.decode(item["value"]))
        except (KeyError, ValueError) as e:
            logger.warning("cache_entry_undecodable", key=key, error=str(e))
            return MISS

    def set(self, key: str, value: Any, expires_at: Optional[datetime] = None) -> None:
        item: Dict[str, Any] = {
            "cache_key": key,
            "value": cache_codec.encode(value),
        }
        if expires_at is not None:
            item["expires_at_timestamp"] = int(expires_at.timestamp())  # For TTL

        self._table.put_item(Item=item)

    def delete(self, key: str) -> bool:
        response = self._table.delete_item(Key={"cache_key": key}, ReturnValues="ALL_OLD")
        return "Attributes" in response
