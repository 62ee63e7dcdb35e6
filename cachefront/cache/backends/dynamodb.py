"""
Cachefront - DynamoDB Cache Driver

Stores each entry as one item keyed by a single string partition key:

    {key_attribute: {"S": "<prefix><key>"},
     value_attribute: {"B": <payload>},
     expiration_attribute: {"N": "<epoch seconds>"} | {"NULL": true}}

The expiration attribute is compatible with DynamoDB's native TTL feature,
but DynamoDB deletes expired items lazily (often hours later) and keeps
returning them until then, so the driver re-checks the expiration after
every read. DynamoDB has no "delete everything" call; ``flush`` raises
UnsupportedOperationError instead of scanning the table.

Uses boto3 (sync) via asyncio.to_thread for the async API.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ...errors import CacheConnectionError, CacheDataFormatError, UnsupportedOperationError
from ..interface import CacheDriver
from ..serialization import JsonCodec

logger = logging.getLogger(__name__)


class DynamoDBDriver(CacheDriver):
    """
    DynamoDB cache driver.

    Reads use ``ConsistentRead`` so a ``get`` issued after ``put`` or
    ``forget`` observes that write. Expired items are reported absent and
    left for DynamoDB's TTL sweeper to delete.
    """

    backend = "dynamodb"

    def __init__(
        self,
        table: str = "cache",
        prefix: str = "",
        key_attribute: str = "key",
        value_attribute: str = "value",
        expiration_attribute: str = "expires_at",
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client: Any = None,
        codec: JsonCodec | None = None,
    ) -> None:
        """
        Initialize DynamoDB cache driver.

        Args:
            table: Table name
            prefix: Prefix for all keys
            key_attribute: Name of the string partition key attribute
            value_attribute: Name of the binary payload attribute
            expiration_attribute: Name of the epoch-seconds expiration attribute
            region: AWS region
            endpoint_url: Custom endpoint (DynamoDB Local, LocalStack)
            access_key: Optional; uses env/IAM if not set
            secret_key: Optional
            client: Pre-built low-level ``dynamodb`` client
            codec: Value codec (JSON by default)
        """
        super().__init__(prefix=prefix, codec=codec)

        self.table = table
        self.key_attribute = key_attribute
        self.value_attribute = value_attribute
        self.expiration_attribute = expiration_attribute

        if client is None:
            client = boto3.client(
                "dynamodb",
                region_name=region,
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
            )
        self._client = client

    # ------------ Helpers ------------

    async def _call(self, operation: str, key: str | None, method: Callable[..., Any], **kwargs: Any) -> Any:
        """Run a blocking client method in a worker thread."""
        try:
            return await asyncio.to_thread(method, **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"DynamoDB {operation} failed for key '{key}': {e}",
                extra={"backend": self.backend, "operation": operation, "key": key, "table": self.table},
                exc_info=True,
            )
            raise CacheConnectionError(self.backend, operation, {"key": key, "table": self.table, "error": str(e)}) from e

    def _key(self, key: str) -> dict[str, dict[str, str]]:
        return {self.key_attribute: {"S": self._make_key(key)}}

    def _parse_expiration(self, key: str, attribute: Any) -> datetime | None:
        """Read the expiration attribute; absent or NULL means no expiry."""
        if attribute is None or (isinstance(attribute, dict) and attribute.get("NULL")):
            return None

        if not isinstance(attribute, dict) or "N" not in attribute:
            raise CacheDataFormatError(
                f"Expiration attribute of '{key}' is not a number",
                details={"key": key, "attribute": self.expiration_attribute},
            )

        try:
            return datetime.fromtimestamp(int(attribute["N"]), UTC)
        except (TypeError, ValueError, OverflowError) as e:
            raise CacheDataFormatError(
                f"Expiration attribute of '{key}' is not an epoch timestamp",
                details={"key": key, "attribute": self.expiration_attribute, "error": str(e)},
            ) from e

    async def _get_payload(self, key: str) -> bytes | None:
        response = await self._call(
            "get",
            key,
            self._client.get_item,
            TableName=self.table,
            Key=self._key(key),
            ConsistentRead=True,
        )

        item = response.get("Item")
        if not item:
            return None

        expiration = self._parse_expiration(key, item.get(self.expiration_attribute))
        if self._is_expired(expiration):
            return None

        value = item.get(self.value_attribute)
        if not isinstance(value, dict) or "B" not in value:
            raise CacheDataFormatError(
                f"Value attribute of '{key}' is missing or not binary",
                details={"key": key, "attribute": self.value_attribute},
            )

        return bytes(value["B"])

    # ------------ Core Interface ------------

    async def get(self, key: str, type_: Any = None) -> Any | None:
        """Retrieve a value, treating expired items as absent."""
        payload = await self._get_payload(key)
        if payload is None:
            return None

        return self.codec.decode(payload, type_)

    async def has(self, key: str) -> bool:
        """Check if an unexpired item exists."""
        return await self._get_payload(key) is not None

    async def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Write the item, replacing any previous one."""
        payload = self._encode(key, value)
        expiration = self._expires_at(ttl)

        # DynamoDB TTL works on whole epoch seconds; round up so the item never expires early
        expires_attr = {"NULL": True} if expiration is None else {"N": str(math.ceil(expiration.timestamp()))}

        await self._call(
            "put",
            key,
            self._client.put_item,
            TableName=self.table,
            Item={
                **self._key(key),
                self.value_attribute: {"B": payload},
                self.expiration_attribute: expires_attr,
            },
        )

    async def forget(self, key: str) -> None:
        """Delete the item; deleting a missing item succeeds."""
        await self._call("forget", key, self._client.delete_item, TableName=self.table, Key=self._key(key))

    async def flush(self) -> None:
        """DynamoDB has no bulk clear."""
        raise UnsupportedOperationError(self.backend, "flush")

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        try:
            await asyncio.to_thread(self._client.close)
            logger.debug("DynamoDB cache driver closed", extra={"backend": self.backend, "table": self.table})
        except Exception as e:
            logger.warning(f"Error closing DynamoDB client: {e}", extra={"error": str(e)})
