from pydantic import BaseModel
from typing import Generic, TypeVar, Optional

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    status_code: int
    message: str
    data: Optional[T] = None


def send_custom_response(status_code: int, message: str, data: Optional[T] = None):
    response = APIResponse(status_code=status_code, message=message, data=data)
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
        },
        "body": response.model_dump_json(exclude_none=True),
    }


def send_error_response(err: Exception):
    return send_custom_response(getattr(err, "status_code", 500), str(err))
