import os

TABLE_NAME = os.environ.get("TABLE_NAME")
AWS_REGION = os.environ.get("AWS_REGION", "ap-south-1")

MAX_BOOKING_MONTHS = 12
DAYS_PER_MONTH = 30

# bounded optimistic retries for room / review contention
MAX_TRANSACTION_ATTEMPTS = int(os.environ.get("MAX_TRANSACTION_ATTEMPTS", "3"))

REVIEW_AUTO_APPROVE = os.environ.get("REVIEW_AUTO_APPROVE", "true").lower() == "true"
