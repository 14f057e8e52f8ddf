import os
import logging
from dataclasses import asdict
from boto3 import resource
from botocore.exceptions import ClientError
from pydantic import ValidationError

from hostel.models.users import STAFF_ROLES
from hostel.repository.room_repo import RoomRepository
from hostel.schemas.rooms import RoomUpdateRequest
from hostel.services.room_ledger import RoomLedger
from hostel.services.room_service import RoomService
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import format_validation_error, send_custom_response
from hostel.utils.request_context import get_caller, path_param

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
room_service = RoomService(room_repo=room_repo, room_ledger=RoomLedger(room_repo))

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def update_room(event, context):
    try:
        caller = get_caller(event)
        if caller is None:
            return send_custom_response(401, "Unauthorized")
        if caller.role not in STAFF_ROLES:
            return send_custom_response(403, "Only wardens or admins can update rooms")

        room_id = path_param(event, "room_id")
        if not room_id:
            return send_custom_response(400, "room_id is required in the path")

        if not event.get("body"):
            return send_custom_response(400, "Request body is required")

        try:
            request_body = RoomUpdateRequest.model_validate_json(event["body"])
        except ValidationError as e:
            return send_custom_response(400, format_validation_error(e))

        room = room_service.update_room(room_id, request_body)
        return send_custom_response(200, "Room updated successfully", asdict(room))

    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"AWS client error: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while updating room")
        return send_custom_response(500, "Internal server error")
