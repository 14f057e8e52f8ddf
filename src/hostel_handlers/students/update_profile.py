import os
import logging
from dataclasses import asdict
from boto3 import resource
from botocore.exceptions import ClientError
from pydantic import ValidationError

from hostel.models.students import EmergencyContact
from hostel.models.users import UserRole
from hostel.repository.booking_repo import BookingRepository
from hostel.repository.room_repo import RoomRepository
from hostel.repository.student_repo import StudentRepository
from hostel.repository.user_repo import UserRepository
from hostel.schemas.students import ProfileRequest
from hostel.services.room_ledger import RoomLedger
from hostel.services.student_service import StudentService
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import format_validation_error, send_custom_response
from hostel.utils.request_context import get_caller

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

user_repo = UserRepository(table)
student_service = StudentService(
    student_repo=StudentRepository(table),
    booking_repo=BookingRepository(table),
    room_ledger=RoomLedger(RoomRepository(table)),
)

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def update_profile(event, context):
    caller = get_caller(event)
    if caller is None:
        return send_custom_response(401, "Unauthorized")
    if caller.role != UserRole.STUDENT:
        return send_custom_response(403, "Only students can update their profile")

    try:
        request_body = ProfileRequest.model_validate_json(event.get("body") or "{}")
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    contact = None
    if request_body.emergency_contact is not None:
        contact = EmergencyContact(**request_body.emergency_contact.model_dump())

    try:
        user = user_repo.get_by_id(caller.user_id)
        if user is None:
            return send_custom_response(404, f"user '{caller.user_id}' not found")

        student, created = student_service.update_profile(
            user, phone=request_body.phone, emergency_contact=contact
        )
    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"Error updating profile of {caller.user_id}: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while updating profile")
        return send_custom_response(500, "Internal server error")

    if created:
        return send_custom_response(
            201, "Student profile created successfully", asdict(student)
        )
    return send_custom_response(
        200, "Student profile updated successfully", asdict(student)
    )
