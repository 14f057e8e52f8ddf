import os
import logging
from dataclasses import asdict
from boto3 import resource
from botocore.exceptions import ClientError
from pydantic import ValidationError

from hostel.models.users import STAFF_ROLES
from hostel.repository.room_repo import RoomRepository
from hostel.schemas.rooms import RoomRequest
from hostel.services.room_ledger import RoomLedger
from hostel.services.room_service import RoomService
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import format_validation_error, send_custom_response
from hostel.utils.request_context import get_caller

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
room_service = RoomService(room_repo=room_repo, room_ledger=RoomLedger(room_repo))

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def add_room(event, context):
    caller = get_caller(event)
    if caller is None:
        return send_custom_response(401, "Unauthorized")
    if caller.role not in STAFF_ROLES:
        return send_custom_response(403, "Only wardens or admins can add rooms")

    if not event.get("body"):
        return send_custom_response(400, "Request body is required")

    try:
        request_body = RoomRequest.model_validate_json(event["body"])
    except ValidationError as e:
        return send_custom_response(400, format_validation_error(e))

    try:
        room = room_service.add_room(request_body)
    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"Error adding room {request_body.room_number}: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while adding room")
        return send_custom_response(500, "Internal server error")

    return send_custom_response(
        201, f"Room {room.room_number} added successfully", asdict(room)
    )
