import base64
import binascii
import json
from typing import Optional, Tuple

from pydantic import ValidationError

from luxestay.common.models.users import UserRole
from luxestay.common.utils.custom_exceptions import InvalidRequest


def get_authorizer(event: dict) -> dict:
    return (event.get("requestContext") or {}).get("authorizer") or {}


def get_caller(event: dict) -> Tuple[Optional[str], Optional[UserRole]]:
    """Return the (user_id, role) the authorizer attached to the request."""
    authorizer = get_authorizer(event)
    user_id = authorizer.get("user_id")
    role_raw = authorizer.get("role")
    role = None
    if role_raw:
        try:
            role = UserRole(role_raw.upper())
        except ValueError:
            role = None
    return user_id, role


def get_path_param(event: dict, name: str) -> Optional[str]:
    value = (event.get("pathParameters") or {}).get(name)
    return value.strip() if isinstance(value, str) and value.strip() else None


def get_query_params(event: dict) -> dict:
    return event.get("queryStringParameters") or {}


def get_bearer_token(event: dict) -> Optional[str]:
    headers = event.get("headers") or {}
    return headers.get("Authorization") or headers.get("authorization")


def format_validation_error(err: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(map(str, e['loc']))}: {e['msg']}" if e["loc"] else e["msg"]
        for e in err.errors()
    )


def decode_photo(photo_base64: Optional[str]) -> Optional[bytes]:
    if not photo_base64:
        return None
    if "," in photo_base64 and photo_base64.startswith("data:"):
        photo_base64 = photo_base64.split(",", 1)[1]
    try:
        return base64.b64decode(photo_base64, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidRequest("photo_base64 is not valid base64")


def parse_json_body(event: dict) -> dict:
    if not event.get("body"):
        raise InvalidRequest("Request body is required")
    try:
        body = json.loads(event["body"])
    except json.JSONDecodeError:
        raise InvalidRequest("Invalid JSON body")
    if not isinstance(body, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return body
