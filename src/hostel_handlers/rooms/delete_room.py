import os
import logging
from boto3 import resource
from botocore.exceptions import ClientError

from hostel.models.users import UserRole
from hostel.repository.room_repo import RoomRepository
from hostel.services.room_ledger import RoomLedger
from hostel.services.room_service import RoomService
from hostel.utils.constants import AWS_REGION
from hostel.utils.custom_exceptions import HostelError
from hostel.utils.custom_response import send_custom_response
from hostel.utils.request_context import get_caller, path_param

TABLE_NAME = os.environ.get("TABLE_NAME")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

room_repo = RoomRepository(table)
room_service = RoomService(room_repo=room_repo, room_ledger=RoomLedger(room_repo))

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def delete_room(event, context):
    caller = get_caller(event)
    if caller is None:
        return send_custom_response(401, "Unauthorized")
    if caller.role != UserRole.ADMIN:
        return send_custom_response(403, "Only admins can delete rooms")

    room_id = path_param(event, "room_id")
    if not room_id:
        return send_custom_response(400, "room_id is required in the path")

    try:
        room_service.delete_room(room_id)
    except HostelError as err:
        return send_custom_response(err.status_code, str(err))
    except ClientError as err:
        logger.error(f"Error deleting room {room_id}: {err}")
        return send_custom_response(500, "Internal server error")
    except Exception:
        logger.exception("Unhandled error while deleting room")
        return send_custom_response(500, "Internal server error")

    return send_custom_response(200, "Room deleted successfully")
