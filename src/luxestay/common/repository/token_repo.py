from botocore.exceptions import ClientError
import logging
from datetime import datetime

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types_boto3_dynamodb.service_resource import Table
else:
    Table = object

logger = logging.getLogger(__name__)


class TokenRepository:
    """Short-lived denylist of revoked token ids.

    Entries carry a DynamoDB TTL equal to the token expiry, after which the
    token would be rejected anyway.
    """

    def __init__(self, table: Table):
        self.table = table

    def revoke(self, token_id: str, expires_at: datetime):
        try:
            self.table.put_item(
                Item={
                    "pk": f"REVOKED#{token_id}",
                    "sk": "TOKEN",
                    "ttl_attribute": int(expires_at.timestamp()),
                }
            )
        except ClientError as err:
            logger.error(f"Error revoking token {token_id}: {err}")
            raise

    def is_revoked(self, token_id: str) -> bool:
        if not token_id:
            return False
        try:
            response = self.table.get_item(
                Key={"pk": f"REVOKED#{token_id}", "sk": "TOKEN"}
            )
        except ClientError as err:
            logger.error(f"Error checking revocation of token {token_id}: {err}")
            raise
        return "Item" in response
