from datetime import datetime, timedelta, timezone

import pytest

from chat_api.app.core.errors import (
    InvalidCredentialsError,
    NotFoundError,
    PersistenceError,
    UsernameExistsError,
)
from chat_api.app.core.security import Pbkdf2Verifier
from chat_api.app.core.store import SQLiteCollection
from chat_api.app.schemas.user import UserCredentials
from chat_api.app.services.user_service import UserService

pytestmark = pytest.mark.asyncio


def _credentials(username="user1", password="password"):
    return UserCredentials(username=username, password=password)


@pytest.fixture()
def service(users):
    return UserService(users)


@pytest.fixture()
def failing_service(failing_collection):
    return UserService(failing_collection)


class TestCreateUser:
    async def test_returns_safe_user(self, service):
        user = await service.create_user(_credentials())

        assert user.id
        assert user.username == "user1"
        assert abs(datetime.now(timezone.utc) - user.date_joined) < timedelta(minutes=1)
        assert "password" not in user.model_dump(by_alias=True)

    async def test_stores_password_through_verifier(self, service, users):
        await service.create_user(_credentials())

        stored = await users.find_one({"username": "user1"})
        assert stored["password"] == "password"

    async def test_duplicate_username_is_rejected(self, service):
        await service.create_user(_credentials())

        with pytest.raises(UsernameExistsError) as excinfo:
            await service.create_user(_credentials(password="something else"))
        assert excinfo.value.message == "Username already exists"

    async def test_store_unique_index_reports_username_exists(self, database_path):
        class NoProbeCollection(SQLiteCollection):
            async def find_one(self, filter):
                return None

        users = NoProbeCollection(
            "users",
            {"username": "username", "password": "password", "dateJoined": "date_joined"},
            datetime_fields=("dateJoined",),
            database_path=database_path,
        )
        service = UserService(users)
        await service.create_user(_credentials())

        with pytest.raises(UsernameExistsError):
            await service.create_user(_credentials())

    async def test_empty_password_is_saved(self, service):
        user = await service.create_user(_credentials(password=""))

        assert user.username == "user1"

    async def test_store_error(self, failing_service):
        with pytest.raises(PersistenceError) as excinfo:
            await failing_service.create_user(_credentials())
        assert excinfo.value.message == "Failed to save user"


class TestGetUserByUsername:
    async def test_returns_matching_user(self, service):
        created = await service.create_user(_credentials())

        found = await service.get_user_by_username("user1")

        assert found == created

    async def test_not_found(self, service):
        with pytest.raises(NotFoundError) as excinfo:
            await service.get_user_by_username("nonexistent")
        assert excinfo.value.message == "User not found"

    async def test_empty_username_is_not_found(self, service):
        with pytest.raises(NotFoundError):
            await service.get_user_by_username("")

    async def test_store_error(self, failing_service):
        with pytest.raises(PersistenceError) as excinfo:
            await failing_service.get_user_by_username("user1")
        assert excinfo.value.message == "Failed to get user"


class TestLoginUser:
    async def test_correct_credentials(self, service):
        created = await service.create_user(_credentials())

        user = await service.login_user(_credentials())

        assert user == created

    async def test_wrong_password_and_unknown_user_are_indistinguishable(self, service):
        await service.create_user(_credentials())

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await service.login_user(_credentials(password="wrongpassword"))
        with pytest.raises(InvalidCredentialsError) as unknown_user:
            await service.login_user(_credentials(username="nonexistent", password="anypassword"))

        assert wrong_password.value.message == unknown_user.value.message == "Invalid username or password"

    async def test_store_error(self, failing_service):
        with pytest.raises(PersistenceError) as excinfo:
            await failing_service.login_user(_credentials())
        assert excinfo.value.message == "Failed to login"


class TestDeleteUserByUsername:
    async def test_returns_deleted_user(self, service):
        created = await service.create_user(_credentials())

        deleted = await service.delete_user_by_username("user1")

        assert deleted == created
        with pytest.raises(NotFoundError):
            await service.get_user_by_username("user1")

    async def test_not_found(self, service):
        with pytest.raises(NotFoundError):
            await service.delete_user_by_username("nonexistent")

    async def test_store_error(self, failing_service):
        with pytest.raises(PersistenceError) as excinfo:
            await failing_service.delete_user_by_username("user1")
        assert excinfo.value.message == "Failed to delete user"


class TestUpdateUser:
    async def test_updates_password(self, service):
        created = await service.create_user(_credentials())

        updated = await service.update_user("user1", {"password": "newpassword"})

        assert updated == created
        await service.login_user(_credentials(password="newpassword"))
        with pytest.raises(InvalidCredentialsError):
            await service.login_user(_credentials())

    async def test_updates_username(self, service):
        created = await service.create_user(_credentials())

        updated = await service.update_user("user1", {"username": "renamed"})

        assert updated.id == created.id
        assert updated.username == "renamed"
        assert (await service.get_user_by_username("renamed")).id == created.id

    async def test_date_joined_cannot_be_changed(self, service):
        created = await service.create_user(_credentials())

        updated = await service.update_user("user1", {"dateJoined": datetime(2000, 1, 1, tzinfo=timezone.utc)})

        assert updated.date_joined == created.date_joined

    async def test_empty_password_is_stored(self, service, users):
        await service.create_user(_credentials())

        await service.update_user("user1", {"password": ""})

        assert (await users.find_one({"username": "user1"}))["password"] == ""

    @pytest.mark.parametrize("updates", [{"password": "x"}, {"username": "other"}, {}])
    async def test_not_found(self, service, updates):
        with pytest.raises(NotFoundError):
            await service.update_user("nonexistent", updates)

    async def test_rename_to_taken_username_is_rejected(self, service):
        first = await service.create_user(_credentials())
        await service.create_user(_credentials(username="user2"))

        with pytest.raises(PersistenceError) as excinfo:
            await service.update_user("user2", {"username": "user1"})

        assert excinfo.value.message == "Failed to update user"
        assert (await service.get_user_by_username("user1")).id == first.id
        assert (await service.get_user_by_username("user2")).username == "user2"

    async def test_store_error(self, failing_service):
        with pytest.raises(PersistenceError) as excinfo:
            await failing_service.update_user("user1", {"password": "x"})
        assert excinfo.value.message == "Failed to update user"


class TestHashedPasswords:
    async def test_pbkdf2_passwords_are_not_stored_in_plain_text(self, users):
        service = UserService(users, Pbkdf2Verifier(iterations=1_000))
        await service.create_user(_credentials())

        stored = await users.find_one({"username": "user1"})

        assert stored["password"] != "password"
        assert (await service.login_user(_credentials())).username == "user1"
        with pytest.raises(InvalidCredentialsError):
            await service.login_user(_credentials(password="wrong"))
