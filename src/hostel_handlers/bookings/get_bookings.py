import os
import logging
from dataclasses import asdict
from boto3 import resource
from botocore.exceptions import ClientError

from hostel.models.users import UserRole
from hostel.repository.booking_repo import BookingRepository
from hostel.repository.room_repo import RoomRepository
from hostel.repository.student_repo import StudentRepository
from hostel.services.booking_service import BookingService
from hostel.services.room_ledger import RoomLedger
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import send_custom_response
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


def get_student_bookings(event, context):
    try:
        caller = get_caller(event)
        if caller is None:
            return send_custom_response(401, "Unauthorized")

        params = event.get("queryStringParameters") or {}
        requested = params.get("student_id")

        if caller.role == UserRole.STUDENT:
            own = student_repo.get_by_user_id(caller.user_id)
            if own is None:
                return send_custom_response(404, "Student profile not found")
            if requested and requested != own.student_id:
                return send_custom_response(403, "Not authorized to view these bookings")
            requested = own.student_id
        elif caller.role is None:
            return send_custom_response(403, "Forbidden")

        if not requested:
            return send_custom_response(400, "student_id is required")

        bookings = booking_service.get_student_bookings(requested)
        result = [asdict(b) for b in bookings]

        return send_custom_response(
            200,
            "Bookings retrieved successfully",
            {"count": len(result), "bookings": result},
        )

    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"Error listing bookings: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while listing bookings")
        return send_custom_response(500, "Internal server error")
