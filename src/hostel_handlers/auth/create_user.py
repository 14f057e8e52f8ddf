import os
import logging
from dataclasses import asdict
from boto3 import resource
from botocore.exceptions import ClientError
from pydantic import ValidationError

from hostel.models.users import UserRole
from hostel.repository.booking_repo import BookingRepository
from hostel.repository.room_repo import RoomRepository
from hostel.repository.student_repo import StudentRepository
from hostel.repository.user_repo import UserRepository
from hostel.schemas.users import CreateUserRequest
from hostel.services.room_ledger import RoomLedger
from hostel.services.student_service import StudentService
from hostel.services.user_service import UserService
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import format_validation_error, send_custom_response
from hostel.utils.request_context import get_caller

TABLE_NAME = os.environ.get("TABLE_NAME")
dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

student_service = StudentService(
    student_repo=StudentRepository(table),
    booking_repo=BookingRepository(table),
    room_ledger=RoomLedger(RoomRepository(table)),
)
service = UserService(user_repo=UserRepository(table), student_service=student_service)

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def create_user(event, context):
    caller = get_caller(event)
    if caller is None:
        return send_custom_response(401, "Unauthorized")
    if caller.role != UserRole.ADMIN:
        return send_custom_response(403, "Only admins can create users")

    try:
        request_body = CreateUserRequest.model_validate_json(event.get("body") or "{}")
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    try:
        user = service.register_user(
            request_body.email,
            request_body.name,
            request_body.password,
            request_body.role,
        )
    except HostelError as e:
        return send_custom_response(e.status_code, str(e))
    except ClientError as e:
        logger.error(f"Error creating user {request_body.email}: {e}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while creating user")
        return send_custom_response(500, "Internal server error")

    data = asdict(user)
    data.pop("password", None)
    data["role"] = user.role.value
    return send_custom_response(201, "User created successfully", data)
