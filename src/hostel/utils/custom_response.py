from pydantic import BaseModel, ValidationError
from typing import Any, Generic, TypeVar, Optional

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    status_code: int
    message: Any
    data: Optional[T] = None


def send_custom_response(status_code: int, message, data: Optional[T] = None):
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
        },
        "body": APIResponse(
            status_code=status_code, message=message, data=data
        ).model_dump_json(),
    }


def format_validation_error(err: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(map(str, e['loc']))}: {e['msg']}" if e["loc"] else e["msg"]
        for e in err.errors()
    )
