import os

AWS_REGION = os.environ.get("AWS_REGION", "ap-south-1")

TOKEN_LIFETIME_DAYS = 7
TOKEN_EXPIRY_LABEL = "7 Days"

CONFIRMATION_CODE_LENGTH = 8
MAX_CODE_ATTEMPTS = 5
MAX_RESERVE_ATTEMPTS = 10
RETRY_BASE_DELAY_SECONDS = 0.02
RETRY_MAX_DELAY_SECONDS = 0.5

MAX_ADULTS = 10
MAX_CHILDREN = 10
