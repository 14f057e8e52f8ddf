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
from hostel.schemas.bookings import BookingRequest
from hostel.services.booking_service import BookingService
from hostel.services.room_ledger import RoomLedger
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import format_validation_error, send_custom_response
from hostel.utils.request_context import get_caller

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

booking_repo = BookingRepository(table)
student_repo = StudentRepository(table)
room_repo = RoomRepository(table)

booking_service = BookingService(
    booking_repo=booking_repo,
    student_repo=student_repo,
    room_ledger=RoomLedger(room_repo),
)

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def create_booking(event, context):
    if not event.get("body"):
        return send_custom_response(
            400, "Student, room, check_in_date, and check_out_date are required"
        )

    try:
        request_body = BookingRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    caller = get_caller(event)
    if caller is None:
        return send_custom_response(401, "Unauthorized")

    try:
        if caller.role == UserRole.STUDENT:
            own = student_repo.get_by_user_id(caller.user_id)
            if own is None or own.student_id != request_body.student_id:
                return send_custom_response(403, "Students can only book for themselves")
        elif caller.role is None:
            return send_custom_response(403, "Forbidden")

        booking = booking_service.create_booking(request_body)
        return send_custom_response(201, "Booking created successfully", asdict(booking))

    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"Error creating booking: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while creating booking")
        return send_custom_response(500, "Internal server error")
