import os
import logging
from dataclasses import asdict
from boto3 import resource
from botocore.exceptions import ClientError
from pydantic import ValidationError

from hostel.models.bookings import BookingStatus
from hostel.models.users import STAFF_ROLES
from hostel.repository.booking_repo import BookingRepository
from hostel.repository.room_repo import RoomRepository
from hostel.repository.student_repo import StudentRepository
from hostel.schemas.bookings import BookingStatusRequest
from hostel.services.booking_service import BookingService
from hostel.services.room_ledger import RoomLedger
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import send_custom_response
from hostel.utils.request_context import get_caller, path_param

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


def update_booking_status(event, context):
    try:
        caller = get_caller(event)
        if caller is None:
            return send_custom_response(401, "Unauthorized")
        if caller.role not in STAFF_ROLES:
            return send_custom_response(
                403, "Only wardens or admins can change booking status"
            )

        booking_id = path_param(event, "booking_id")
        if not booking_id:
            return send_custom_response(400, "booking_id is required in the path")

        if not event.get("body"):
            return send_custom_response(400, "Request body is required")

        try:
            request_body = BookingStatusRequest.model_validate_json(event["body"])
        except ValidationError:
            return send_custom_response(
                400, f"Invalid status. Allowed: {[s.value for s in BookingStatus]}"
            )

        booking = booking_service.transition(booking_id, request_body.status)
        return send_custom_response(
            200, f"Booking {booking.status.value} successfully", asdict(booking)
        )

    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"AWS client error: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while updating booking status")
        return send_custom_response(500, "Internal server error")
