from decimal import Decimal
from typing import TYPE_CHECKING

from hostel.repository.transactions import execute_transaction

if TYPE_CHECKING:
    from types_boto3_dynamodb.service_resource import Table
    from types_boto3_dynamodb import DynamoDBClient
else:
    Table = object
    DynamoDBClient = object


class DynamoRepository:
    def __init__(self, table: Table, client: DynamoDBClient = None):
        self.table = table
        self.client = client if client else table.meta.client

    def transact(self, items: list):
        execute_transaction(self.client, items)

    @staticmethod
    def _decimal(value) -> Decimal:
        return Decimal(str(value))
