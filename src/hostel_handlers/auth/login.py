import os
import logging
from boto3 import resource
from botocore.exceptions import ClientError
from pydantic import ValidationError

from hostel.repository.booking_repo import BookingRepository
from hostel.repository.room_repo import RoomRepository
from hostel.repository.student_repo import StudentRepository
from hostel.repository.user_repo import UserRepository
from hostel.schemas.users import LoginRequest
from hostel.services.room_ledger import RoomLedger
from hostel.services.student_service import StudentService
from hostel.services.user_service import UserService
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import IncorrectCredentials, NotFoundException
from hostel.utils.custom_response import format_validation_error, send_custom_response

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


def login_handler(event, context):
    try:
        request_body = LoginRequest.model_validate_json(event.get("body") or "{}")
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))
    try:
        token = service.login(request_body.email, request_body.password)
        return send_custom_response(
            status_code=200, message="login successful", data=token
        )
    except (IncorrectCredentials, NotFoundException):
        # unknown email and wrong password look the same to the caller
        return send_custom_response(
            status_code=401, message="Invalid email or password"
        )
    except ClientError as e:
        logger.error(f"Login lookup failed: {e}")
        return send_custom_response(status_code=500, message="Internal server error")
    except Exception:
        logger.exception("Unhandled error during login")
        return send_custom_response(status_code=500, message="Internal server error")
