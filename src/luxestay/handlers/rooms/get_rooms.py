import logging
import os
from boto3 import resource

from luxestay.common.repository.booking_repo import BookingRepository
from luxestay.common.repository.room_repo import RoomRepository
from luxestay.common.services.room_service import RoomService
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import HotelError
from luxestay.common.utils.custom_response import send_custom_response, send_error_response
from luxestay.common.utils.datetime_normaliser import from_iso_date
from luxestay.common.utils.request_context import get_path_param, get_query_params

logger = logging.getLogger(__name__)

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
booking_repo = BookingRepository(table)
room_service = RoomService(room_repo=room_repo, booking_repo=booking_repo)


def get_rooms(event, context):
    try:
        rooms = room_service.list_rooms()
        return send_custom_response(
            200,
            "successfully retrieved",
            {"count": len(rooms), "rooms": [room.to_dict() for room in rooms]},
        )
    except Exception:
        logger.exception("Unhandled error listing rooms")
        return send_custom_response(500, "Internal server error")


def get_room_types(event, context):
    try:
        room_types = room_service.list_room_types()
        return send_custom_response(200, "successfully retrieved", {"room_types": room_types})
    except Exception:
        logger.exception("Unhandled error listing room types")
        return send_custom_response(500, "Internal server error")


def get_room(event, context):
    room_id = get_path_param(event, "room_id")
    if not room_id:
        return send_custom_response(400, "room_id is required in the path")
    try:
        room = room_service.get_room(room_id)
        return send_custom_response(200, "successfully retrieved", room.to_dict())
    except HotelError as err:
        return send_error_response(err)
    except Exception:
        logger.exception("Unhandled error retrieving room %s", room_id)
        return send_custom_response(500, "Internal server error")


def get_rooms_available_today(event, context):
    room_type = get_query_params(event).get("room_type") or None
    try:
        rooms = room_service.get_rooms_available_today(room_type)
        return send_custom_response(
            200,
            "successfully retrieved",
            {
                "room_type": room_type,
                "count": len(rooms),
                "rooms": [room.to_dict() for room in rooms],
            },
        )
    except HotelError as err:
        return send_error_response(err)
    except Exception:
        logger.exception("Unhandled error listing rooms available today")
        return send_custom_response(500, "Internal server error")


def get_available_rooms(event, context):
    params = get_query_params(event)
    check_in = params.get("check_in")
    check_out = params.get("check_out")
    room_type = params.get("room_type") or None

    if not check_in or not check_out:
        return send_custom_response(400, "check_in and check_out are required")

    try:
        check_in_date = from_iso_date(check_in)
        check_out_date = from_iso_date(check_out)
    except ValueError as e:
        return send_custom_response(400, str(e))

    try:
        rooms = room_service.get_available_rooms(check_in_date, check_out_date, room_type)
        return send_custom_response(
            200,
            "successfully retrieved",
            {
                "check_in": check_in_date.isoformat(),
                "check_out": check_out_date.isoformat(),
                "room_type": room_type,
                "count": len(rooms),
                "rooms": [room.to_dict() for room in rooms],
            },
        )
    except HotelError as err:
        return send_error_response(err)
    except Exception:
        logger.exception("Unhandled error searching available rooms")
        return send_custom_response(500, "Internal server error")
