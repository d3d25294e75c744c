from botocore.exceptions import ClientError
import logging
from typing import Optional, List
from boto3.dynamodb.conditions import Attr, Key
from luxestay.common.models.bookings import Booking, BookingStatus
from luxestay.common.repository.pagination import paginate
from luxestay.common.utils.custom_exceptions import (
    AlreadyCancelled,
    ConfirmationCodeTaken,
    RoomNotFound,
    RoomVersionConflict,
    StorageBusy,
)
from luxestay.common.utils.datetime_normaliser import from_iso_string
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types_boto3_dynamodb.service_resource import Table
    from types_boto3_dynamodb import DynamoDBClient
else:
    Table = object
    DynamoDBClient = object


logger = logging.getLogger(__name__)

RETRYABLE_ERROR_CODES = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TransactionInProgressException",
    "InternalServerError",
}


def _cancellation_codes(err: ClientError) -> List[str]:
    return [r.get("Code", "None") for r in err.response.get("CancellationReasons", [])]


class BookingRepository:
    """Booking records plus the per-room and per-user indexes.

    Every write that changes which bookings hold a room goes through one
    transaction that also bumps the room's ``booking_version``, conditioned on
    the version the caller read before checking availability. Two writers that
    read the same version cannot both commit.
    """

    def __init__(self, table: Table, client: DynamoDBClient = None):
        self.table = table
        self.client = client if client else table.meta.client

    @staticmethod
    def _iso(dt: datetime | str) -> str:
        if isinstance(dt, str):
            parsed = datetime.fromisoformat(dt)
        else:
            parsed = dt

        if parsed.tzinfo is None:
            raise ValueError("Datetime must be timezone-aware")

        return parsed.astimezone(timezone.utc).isoformat()

    def _attributes(self, booking: Booking) -> dict:
        return {
            "booking_id": booking.booking_id,
            "room_id": booking.room_id,
            "user_id": booking.user_id,
            "check_in": booking.check_in.isoformat(),
            "check_out": booking.check_out.isoformat(),
            "adults": booking.adults,
            "children": booking.children,
            "confirmation_code": booking.confirmation_code,
            "booking_status": booking.status.value,
            "booked_at": self._iso(booking.booked_at),
        }

    @staticmethod
    def _room_index_sk(booking: Booking) -> str:
        return f"BOOKING#{booking.check_in.isoformat()}#{booking.booking_id}"

    def _room_version_update(self, room_id: str, expected_version: int) -> dict:
        return {
            "Update": {
                "TableName": self.table.name,
                "Key": {"pk": f"ROOM#{room_id}", "sk": "DETAILS"},
                "UpdateExpression": "SET booking_version = booking_version + :one",
                "ConditionExpression": "booking_version = :expected",
                "ExpressionAttributeValues": {
                    ":one": 1,
                    ":expected": expected_version,
                },
                "ReturnValuesOnConditionCheckFailure": "ALL_OLD",
            }
        }

    def add_booking(self, booking: Booking, expected_version: int):
        attributes = self._attributes(booking)

        booking_item = {
            "pk": f"BOOKING#{booking.booking_id}",
            "sk": "DETAILS",
            "entity": "BOOKING",
            **attributes,
        }
        code_item = {
            "pk": f"CODE#{booking.confirmation_code}",
            "sk": "DETAILS",
            "booking_id": booking.booking_id,
        }
        room_booking = {
            "pk": f"ROOM#{booking.room_id}",
            "sk": self._room_index_sk(booking),
            **attributes,
        }
        user_booking = {
            "pk": f"USER#{booking.user_id}",
            "sk": f"BOOKING#{booking.booking_id}",
            **attributes,
        }

        try:
            self.client.transact_write_items(
                TransactItems=[
                    self._room_version_update(booking.room_id, expected_version),
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": booking_item,
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": code_item,
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": room_booking,
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": user_booking,
                        }
                    },
                ]
            )
        except ClientError as err:
            code = err.response.get("Error", {}).get("Code", "")
            if code == "TransactionCanceledException":
                reasons = err.response.get("CancellationReasons", [])
                codes = _cancellation_codes(err)
                if codes and codes[0] == "ConditionalCheckFailed":
                    if "Item" not in reasons[0]:
                        raise RoomNotFound(booking.room_id) from err
                    raise RoomVersionConflict(booking.room_id) from err
                if len(codes) > 2 and codes[2] == "ConditionalCheckFailed":
                    raise ConfirmationCodeTaken(booking.confirmation_code) from err
                if "TransactionConflict" in codes:
                    raise RoomVersionConflict(booking.room_id) from err
            if code in RETRYABLE_ERROR_CODES:
                raise StorageBusy("booking storage is busy, please retry") from err
            logger.error(f"Error creating booking {booking.booking_id}: {err}")
            raise

    def cancel_booking(
        self,
        booking: Booking,
        cancelled_at: datetime,
        expected_version: Optional[int],
    ):
        cancelled_iso = self._iso(cancelled_at)
        status_update = {
            "UpdateExpression": "SET booking_status = :cancelled, cancelled_at = :at",
            "ExpressionAttributeValues": {
                ":cancelled": BookingStatus.CANCELLED.value,
                ":at": cancelled_iso,
            },
        }

        transact_items = []
        if expected_version is not None:
            transact_items.append(
                self._room_version_update(booking.room_id, expected_version)
            )
        transact_items += [
            {
                "Update": {
                    "TableName": self.table.name,
                    "Key": {"pk": f"BOOKING#{booking.booking_id}", "sk": "DETAILS"},
                    "UpdateExpression": status_update["UpdateExpression"],
                    "ConditionExpression": "booking_status = :confirmed",
                    "ExpressionAttributeValues": {
                        **status_update["ExpressionAttributeValues"],
                        ":confirmed": BookingStatus.CONFIRMED.value,
                    },
                }
            },
            {
                "Update": {
                    "TableName": self.table.name,
                    "Key": {"pk": f"ROOM#{booking.room_id}", "sk": self._room_index_sk(booking)},
                    **status_update,
                }
            },
            {
                "Update": {
                    "TableName": self.table.name,
                    "Key": {"pk": f"USER#{booking.user_id}", "sk": f"BOOKING#{booking.booking_id}"},
                    **status_update,
                }
            },
        ]

        try:
            self.client.transact_write_items(TransactItems=transact_items)
        except ClientError as err:
            code = err.response.get("Error", {}).get("Code", "")
            if code == "TransactionCanceledException":
                codes = _cancellation_codes(err)
                offset = 1 if expected_version is not None else 0
                if offset and codes and codes[0] == "ConditionalCheckFailed":
                    raise RoomVersionConflict(booking.room_id) from err
                if len(codes) > offset and codes[offset] == "ConditionalCheckFailed":
                    raise AlreadyCancelled(
                        f"booking {booking.booking_id} is already cancelled"
                    ) from err
                if "TransactionConflict" in codes:
                    raise RoomVersionConflict(booking.room_id) from err
            if code in RETRYABLE_ERROR_CODES:
                raise StorageBusy("booking storage is busy, please retry") from err
            logger.error(f"Error cancelling booking {booking.booking_id}: {err}")
            raise

    def get_booking_by_id(self, booking_id: str) -> Optional[Booking]:
        try:
            response = self.table.get_item(
                Key={"pk": f"BOOKING#{booking_id}", "sk": "DETAILS"},
                ConsistentRead=True,
            )
        except ClientError as err:
            logger.error(f"Error retrieving booking {booking_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item)

    def get_by_confirmation_code(self, code: str) -> Optional[Booking]:
        try:
            response = self.table.get_item(
                Key={"pk": f"CODE#{code}", "sk": "DETAILS"},
                ConsistentRead=True,
            )
        except ClientError as err:
            logger.error(f"Error retrieving booking by code {code}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self.get_booking_by_id(item["booking_id"])

    def confirmation_code_exists(self, code: str) -> bool:
        try:
            response = self.table.get_item(
                Key={"pk": f"CODE#{code}", "sk": "DETAILS"}
            )
        except ClientError as err:
            logger.error(f"Error checking confirmation code {code}: {err}")
            raise
        return "Item" in response

    def get_room_bookings(self, room_id: str) -> List[Booking]:
        try:
            items = list(
                paginate(
                    self.table.query,
                    KeyConditionExpression=(
                        Key("pk").eq(f"ROOM#{room_id}")
                        & Key("sk").begins_with("BOOKING#")
                    ),
                    ConsistentRead=True,
                )
            )
        except ClientError as err:
            logger.error(f"Error retrieving bookings for room {room_id}: {err}")
            raise
        return [self._to_domain(item) for item in items]

    def get_user_bookings(self, user_id: str) -> List[Booking]:
        try:
            items = list(
                paginate(
                    self.table.query,
                    KeyConditionExpression=(
                        Key("pk").eq(f"USER#{user_id}")
                        & Key("sk").begins_with("BOOKING#")
                    ),
                )
            )
        except ClientError as err:
            logger.error(f"Error retrieving user {user_id} bookings: {err}")
            raise
        return [self._to_domain(item) for item in items]

    def list_bookings(self) -> List[Booking]:
        try:
            items = list(
                paginate(self.table.scan, FilterExpression=Attr("entity").eq("BOOKING"))
            )
        except ClientError as err:
            logger.error(f"Error listing bookings: {err}")
            raise
        return [self._to_domain(item) for item in items]

    @staticmethod
    def _to_domain(item: dict) -> Booking:
        cancelled_at = item.get("cancelled_at")
        return Booking(
            booking_id=item["booking_id"],
            room_id=item["room_id"],
            user_id=item["user_id"],
            check_in=date.fromisoformat(item["check_in"]),
            check_out=date.fromisoformat(item["check_out"]),
            adults=int(item.get("adults", 1)),
            children=int(item.get("children", 0)),
            confirmation_code=item["confirmation_code"],
            status=BookingStatus(item["booking_status"]),
            booked_at=from_iso_string(item["booked_at"]),
            cancelled_at=from_iso_string(cancelled_at) if cancelled_at else None,
        )
