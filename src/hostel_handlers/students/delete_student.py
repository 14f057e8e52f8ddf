import os
import logging
from boto3 import resource
from botocore.exceptions import ClientError

from hostel.models.users import STAFF_ROLES
from hostel.repository.booking_repo import BookingRepository
from hostel.repository.room_repo import RoomRepository
from hostel.repository.student_repo import StudentRepository
from hostel.services.room_ledger import RoomLedger
from hostel.services.student_service import StudentService
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import send_custom_response
from hostel.utils.request_context import get_caller, path_param

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

student_service = StudentService(
    student_repo=StudentRepository(table),
    booking_repo=BookingRepository(table),
    room_ledger=RoomLedger(RoomRepository(table)),
)

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def delete_student(event, context):
    caller = get_caller(event)
    if caller is None:
        return send_custom_response(401, "Unauthorized")
    if caller.role not in STAFF_ROLES:
        return send_custom_response(403, "Only wardens or admins can delete students")

    student_id = path_param(event, "student_id")
    if not student_id:
        return send_custom_response(400, "student_id is required in the path")

    try:
        student_service.delete_student(student_id)
    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"Error deleting student {student_id}: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while deleting student")
        return send_custom_response(500, "Internal server error")

    return send_custom_response(200, "Student removed")
