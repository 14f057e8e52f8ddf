from botocore.exceptions import ClientError
import logging
from typing import List

logger = logging.getLogger(__name__)

CONDITION_FAILED = "ConditionalCheckFailed"
TRANSACTION_CONFLICT = "TransactionConflict"


class TransactionCancelled(Exception):
    """A TransactWriteItems call that DynamoDB rejected as a whole.

    ``reasons`` holds one cancellation code per submitted item, in the order
    the items were sent ("None" for items that did not cause the failure).
    """

    def __init__(self, reasons: List[str]):
        self.reasons = reasons
        super().__init__(f"transaction cancelled: {reasons}")

    def failed_at(self, index: int) -> bool:
        return index < len(self.reasons) and self.reasons[index] == CONDITION_FAILED

    @property
    def contended(self) -> bool:
        return TRANSACTION_CONFLICT in self.reasons


def execute_transaction(client, items: list):
    try:
        client.transact_write_items(TransactItems=items)
    except ClientError as err:
        error = err.response.get("Error", {})
        if error.get("Code") == "TransactionCanceledException":
            reasons = [
                reason.get("Code", "None")
                for reason in err.response.get("CancellationReasons", [])
            ]
            raise TransactionCancelled(reasons) from err
        logger.error(f"Transaction of {len(items)} items failed: {err}")
        raise
