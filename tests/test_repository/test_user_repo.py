import unittest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError

from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.models.users import User, UserRole
from luxestay.common.utils.custom_exceptions import UserAlreadyExists, UserNotFound


class TestUserRepository(unittest.TestCase):

    def setUp(self):
        self.table = MagicMock()
        self.table.name = "test-table"
        self.client = MagicMock()

        self.table.meta.client = self.client
        self.repo = UserRepository(self.table, self.client)
        self.user = User(
            user_id="u1",
            name="Asha",
            email="Asha@Example.com ",
            password="hashed",
            phone_number="9876543210",
        )

    def test_add_user_writes_email_index_and_details(self):
        self.repo.add_user(self.user)

        _, kwargs = self.client.transact_write_items.call_args
        email_put, details_put = kwargs["TransactItems"]
        self.assertEqual("EMAIL#asha@example.com", email_put["Put"]["Item"]["pk"])
        self.assertEqual("USER#u1", email_put["Put"]["Item"]["sk"])
        self.assertEqual("attribute_not_exists(pk)", email_put["Put"]["ConditionExpression"])
        item = details_put["Put"]["Item"]
        self.assertEqual("USER#u1", item["pk"])
        self.assertEqual("USER", item["entity"])
        self.assertEqual("asha@example.com", item["email"])
        self.assertEqual("USER", item["role"])

    def test_add_user_duplicate_email(self):
        self.client.transact_write_items.side_effect = ClientError(
            error_response={
                "Error": {"Code": "TransactionCanceledException", "Message": "dup"},
                "CancellationReasons": [{"Code": "ConditionalCheckFailed"}, {"Code": "None"}],
            },
            operation_name="TransactWriteItems",
        )

        with self.assertRaises(UserAlreadyExists):
            self.repo.add_user(self.user)

    def test_add_user_other_error(self):
        self.client.transact_write_items.side_effect = ClientError(
            error_response={"Error": {"Code": "ValidationException", "Message": "bad"}},
            operation_name="TransactWriteItems",
        )

        with self.assertRaises(ClientError):
            self.repo.add_user(self.user)

    def test_get_by_mail_success(self):
        self.table.query.return_value = {
            "Items": [{"pk": "EMAIL#asha@example.com", "sk": "USER#u1"}]
        }
        self.table.get_item.return_value = {
            "Item": {
                "pk": "USER#u1",
                "sk": "DETAILS",
                "name": "Asha",
                "email": "asha@example.com",
                "password": "hashed",
                "role": "ADMIN",
            }
        }

        user = self.repo.get_by_mail("ASHA@example.com")

        self.assertEqual("u1", user.user_id)
        self.assertEqual(UserRole.ADMIN, user.role)
        self.table.get_item.assert_called_once_with(Key={"pk": "USER#u1", "sk": "DETAILS"})

    def test_get_by_mail_not_found(self):
        self.table.query.return_value = {"Items": []}

        self.assertIsNone(self.repo.get_by_mail("nobody@example.com"))
        self.table.get_item.assert_not_called()

    def test_get_by_id_not_found(self):
        self.table.get_item.return_value = {}

        self.assertIsNone(self.repo.get_by_id("u404"))

    def test_list_users(self):
        self.table.scan.return_value = {
            "Items": [
                {"pk": "USER#u1", "sk": "DETAILS", "email": "a@example.com", "password": "x"},
                {"pk": "USER#u2", "sk": "DETAILS", "email": "b@example.com", "password": "y"},
            ]
        }

        users = self.repo.list_users()

        self.assertEqual(["u1", "u2"], [u.user_id for u in users])
        self.assertEqual(UserRole.USER, users[0].role)

    def test_delete_user(self):
        self.repo.delete_user(self.user)

        _, kwargs = self.client.transact_write_items.call_args
        details, email = kwargs["TransactItems"]
        self.assertEqual({"pk": "USER#u1", "sk": "DETAILS"}, details["Delete"]["Key"])
        self.assertEqual(
            {"pk": "EMAIL#asha@example.com", "sk": "USER#u1"}, email["Delete"]["Key"]
        )

    def test_delete_missing_user(self):
        self.client.transact_write_items.side_effect = ClientError(
            error_response={"Error": {"Code": "TransactionCanceledException"}},
            operation_name="TransactWriteItems",
        )

        with self.assertRaises(UserNotFound):
            self.repo.delete_user(self.user)


if __name__ == "__main__":
    unittest.main()
