from botocore.exceptions import ClientError
import logging
from typing import Optional, List
from boto3.dynamodb.conditions import Attr, Key
from luxestay.common.models.users import User, UserRole
from luxestay.common.repository.pagination import paginate
from luxestay.common.utils.custom_exceptions import UserAlreadyExists, UserNotFound

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types_boto3_dynamodb.service_resource import Table
    from types_boto3_dynamodb import DynamoDBClient
else:
    Table = object
    DynamoDBClient = object

logger = logging.getLogger(__name__)


def _error_code(err: ClientError) -> str:
    return err.response.get("Error", {}).get("Code", "")


class UserRepository:
    def __init__(self, table: Table, client: DynamoDBClient = None):
        self.table = table
        self.client = client if client else table.meta.client

    @staticmethod
    def normalise_email(email: str) -> str:
        return email.strip().lower()

    def add_user(self, user: User):
        email = self.normalise_email(user.email)
        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": {
                                "pk": f"EMAIL#{email}",
                                "sk": f"USER#{user.user_id}",
                            },
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                    {
                        "Put": {
                            "TableName": self.table.name,
                            "Item": {
                                "pk": f"USER#{user.user_id}",
                                "sk": "DETAILS",
                                "entity": "USER",
                                "name": user.name,
                                "email": email,
                                "phone_number": user.phone_number,
                                "password": user.password,
                                "role": user.role.value,
                            },
                            "ConditionExpression": "attribute_not_exists(pk)",
                        }
                    },
                ]
            )
        except ClientError as err:
            if _error_code(err) == "TransactionCanceledException":
                raise UserAlreadyExists(f"{email} is already registered") from err
            logger.error(
                "couldn't add user %s. Error: %s",
                email,
                err.response["Error"]["Message"],
            )
            raise

    def get_by_mail(self, mail: str) -> Optional[User]:
        email = self.normalise_email(mail)
        try:
            response = self.table.query(
                KeyConditionExpression=(
                    Key("pk").eq(f"EMAIL#{email}") & Key("sk").begins_with("USER#")
                )
            )
        except ClientError as err:
            logger.error(f"Error retrieving user by mail {email}: {err}")
            raise

        items = response.get("Items", [])
        if not items:
            return None

        user_id = items[0]["sk"].split("#", 1)[1]
        return self.get_by_id(user_id=user_id)

    def get_by_id(self, user_id: str) -> Optional[User]:
        try:
            response = self.table.get_item(
                Key={"pk": f"USER#{user_id}", "sk": "DETAILS"}
            )
        except ClientError as err:
            logger.error(f"Error retrieving user by id {user_id}: {err}")
            raise

        item = response.get("Item")
        if not item:
            return None
        return self._to_domain(item=item)

    def list_users(self) -> List[User]:
        try:
            items = list(
                paginate(
                    self.table.scan,
                    FilterExpression=Attr("entity").eq("USER"),
                )
            )
        except ClientError as err:
            logger.error(f"Error listing users: {err}")
            raise
        return [self._to_domain(item) for item in items]

    def delete_user(self, user: User):
        email = self.normalise_email(user.email)
        try:
            self.client.transact_write_items(
                TransactItems=[
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": {"pk": f"USER#{user.user_id}", "sk": "DETAILS"},
                            "ConditionExpression": "attribute_exists(pk)",
                        }
                    },
                    {
                        "Delete": {
                            "TableName": self.table.name,
                            "Key": {"pk": f"EMAIL#{email}", "sk": f"USER#{user.user_id}"},
                        }
                    },
                ]
            )
        except ClientError as err:
            if _error_code(err) == "TransactionCanceledException":
                raise UserNotFound(user.user_id) from err
            logger.error(f"Error deleting user {user.user_id}: {err}")
            raise

    @staticmethod
    def _to_domain(item: dict) -> User:
        return User(
            user_id=item["pk"].split("#", 1)[1],
            name=item.get("name", ""),
            email=item["email"],
            phone_number=item.get("phone_number"),
            role=UserRole(item.get("role", UserRole.USER.value)),
            password=item["password"],
        )
