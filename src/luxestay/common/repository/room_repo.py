from botocore.exceptions import ClientError
import logging
from decimal import Decimal
from typing import Optional, List
from boto3.dynamodb.conditions import Attr, Key
from luxestay.common.models.rooms import Room
from luxestay.common.repository.pagination import paginate
from luxestay.common.utils.custom_exceptions import RoomNotFound, RoomVersionConflict

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types_boto3_dynamodb.service_resource import Table
    from types_boto3_dynamodb import DynamoDBClient
else:
    Table = object
    DynamoDBClient = object


logger = logging.getLogger(__name__)


def normalise_room_type(room_type: str) -> str:
    return room_type.strip().lower()


def type_key(room_type: str) -> str:
    return f"ROOMTYPE#{normalise_room_type(room_type)}"


class RoomRepository:
    def __init__(self, table: Table, client: DynamoDBClient = None):
        self.table = table
        self.client = client if client else table.meta.client

    def add_room(self, room: Room):
        room_item = {
            "pk": f"ROOM#{room.room_id}",
            "sk": "DETAILS",
            "entity": "ROOM",
            "room_type": room.room_type,
            "price": Decimal(str(room.price)),
            "description": room.description,
            "photo_url": room.photo_url,
            "booking_version": room.booking_version,
        }
        type_item = {
            "pk": type_key(room.room_type),
            "sk": f"ROOM#{room.room_id}",
            "room_type": room.room_type,
        }
        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": room_item,
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": type_item,
                        }
                    },
                ]
            )
        except ClientError as err:
            logger.error(f"Error creating room {room.room_id}: {err}")
            raise

    def get_room_by_id(self, room_id: str) -> Optional[Room]:
        try:
            response = self.table.get_item(
                Key={"pk": f"ROOM#{room_id}", "sk": "DETAILS"},
                ConsistentRead=True,
            )
        except ClientError as err:
            logger.error(f"Error retrieving room by id {room_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item)

    def list_rooms(self) -> List[Room]:
        try:
            items = list(
                paginate(self.table.scan, FilterExpression=Attr("entity").eq("ROOM"))
            )
        except ClientError as err:
            logger.error(f"Error listing rooms: {err}")
            raise
        return [self._to_domain(item) for item in items]

    def get_room_ids_by_type(self, room_type: str) -> List[str]:
        try:
            items = list(
                paginate(
                    self.table.query,
                    KeyConditionExpression=(
                        Key("pk").eq(type_key(room_type))
                        & Key("sk").begins_with("ROOM#")
                    ),
                )
            )
        except ClientError as err:
            logger.error(f"Error retrieving {room_type} rooms: {err}")
            raise
        return [item["sk"].split("ROOM#", 1)[1] for item in items]

    def update_room(self, room: Room, previous_type: str):
        transact_items = [
            {
                "Update": {
                    "TableName": self.table.name,
                    "Key": {"pk": f"ROOM#{room.room_id}", "sk": "DETAILS"},
                    "UpdateExpression": (
                        "SET room_type = :room_type, price = :price, "
                        "description = :description, photo_url = :photo_url"
                    ),
                    "ExpressionAttributeValues": {
                        ":room_type": room.room_type,
                        ":price": Decimal(str(room.price)),
                        ":description": room.description,
                        ":photo_url": room.photo_url,
                    },
                    "ConditionExpression": "attribute_exists(pk)",
                }
            }
        ]
        if type_key(previous_type) != type_key(room.room_type):
            transact_items.append(
                {
                    "Delete": {
                        "TableName": self.table.name,
                        "Key": {"pk": type_key(previous_type), "sk": f"ROOM#{room.room_id}"},
                    }
                }
            )
            transact_items.append(
                {
                    "Put": {
                        "TableName": self.table.name,
                        "Item": {
                            "pk": type_key(room.room_type),
                            "sk": f"ROOM#{room.room_id}",
                            "room_type": room.room_type,
                        },
                    }
                }
            )
        try:
            self.client.transact_write_items(TransactItems=transact_items)
        except ClientError as err:
            if err.response.get("Error", {}).get("Code") == "TransactionCanceledException":
                raise RoomNotFound(room.room_id) from err
            logger.error(f"Error updating room {room.room_id}: {err}")
            raise

    def delete_room(self, room: Room):
        """Delete a room only if no reservation touched it since it was read."""
        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": {"pk": f"ROOM#{room.room_id}", "sk": "DETAILS"},
                            "ConditionExpression": "booking_version = :expected",
                            "ExpressionAttributeValues": {
                                ":expected": room.booking_version,
                            },
                            "ReturnValuesOnConditionCheckFailure": "ALL_OLD",
                        }
                    },
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": {"pk": type_key(room.room_type), "sk": f"ROOM#{room.room_id}"},
                        }
                    },
                ]
            )
        except ClientError as err:
            if err.response.get("Error", {}).get("Code") == "TransactionCanceledException":
                reasons = err.response.get("CancellationReasons", [])
                if reasons and "Item" not in reasons[0]:
                    raise RoomNotFound(room.room_id) from err
                raise RoomVersionConflict(room.room_id) from err
            logger.error(f"Error deleting room {room.room_id}: {err}")
            raise

    @staticmethod
    def _to_domain(item: dict) -> Room:
        return Room(
            room_id=item["pk"].split("ROOM#", 1)[1],
            room_type=item["room_type"],
            price=Decimal(str(item["price"])),
            description=item.get("description") or "",
            photo_url=item.get("photo_url"),
            booking_version=int(item.get("booking_version", 0)),
        )
