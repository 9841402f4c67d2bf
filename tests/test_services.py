"""Direct tests for the access and key services."""

import uuid

import pytest

from smrt.errors import NotFound, Unauthorized
from smrt.models.project import Project
from smrt.models.user import PasswordHash, User
from smrt.services import access_service, key_service, session_service
from smrt.services.hashing import make_password_hash

pytestmark = pytest.mark.anyio


@pytest.fixture
async def member(db):
    """A user with one project and a logged-in session."""
    user = User(email="m@test.com", password_hash=PasswordHash(hash=make_password_hash("pw")))
    project = Project(name="P", members=[user])
    db.add_all([user, project])
    await db.commit()

    session_id = str(uuid.uuid4())
    await session_service.touch(db, session_id)
    await session_service.link_user(db, session_id, user.id)
    await db.commit()
    return user, project, session_id


class TestEnsureProjectAccess:
    async def test_member_gets_user_id(self, db, member):
        user, project, session_id = member
        assert await access_service.ensure_project_access(db, session_id, project.id) == user.id

    async def test_anonymous_session(self, db, member):
        _, project, _ = member
        session_id = str(uuid.uuid4())
        await session_service.touch(db, session_id)
        assert await access_service.ensure_project_access(db, session_id, project.id) is None

    async def test_missing_project(self, db, member):
        _, _, session_id = member
        assert await access_service.ensure_project_access(db, session_id, str(uuid.uuid4())) is None

    async def test_non_member(self, db, member):
        _, project, _ = member
        outsider = User(email="o@test.com", password_hash=PasswordHash(hash=make_password_hash("pw")))
        db.add(outsider)
        await db.commit()
        session_id = str(uuid.uuid4())
        await session_service.touch(db, session_id)
        await session_service.link_user(db, session_id, outsider.id)
        await db.commit()

        assert await access_service.ensure_project_access(db, session_id, project.id) is None


class TestValidateKey:
    async def test_valid_secret_returns_key(self, db, member):
        _, project, _ = member
        key, secret = await key_service.create_key(db, project.id, "bot")
        validated = await key_service.validate_key(db, project.id, key.id, secret)
        assert validated.id == key.id

    async def test_missing_secret_is_checked_before_lookup(self, db):
        # no such key exists, but the missing header wins
        with pytest.raises(Unauthorized) as exc:
            await key_service.validate_key(db, str(uuid.uuid4()), str(uuid.uuid4()), None)
        assert exc.value.detail == "Missing x-cli-secret header"

    async def test_unknown_pair_before_secret(self, db, member):
        _, project, _ = member
        key, _ = await key_service.create_key(db, project.id, "bot")
        with pytest.raises(NotFound):
            await key_service.validate_key(db, str(uuid.uuid4()), key.id, "sk_wrong")

    async def test_wrong_secret(self, db, member):
        _, project, _ = member
        key, _ = await key_service.create_key(db, project.id, "bot")
        with pytest.raises(Unauthorized) as exc:
            await key_service.validate_key(db, project.id, key.id, "sk_wrong")
        assert exc.value.detail == "Invalid secret"

    async def test_deleted_key(self, db, member):
        _, project, _ = member
        key, secret = await key_service.create_key(db, project.id, "bot")
        await key_service.delete_key(db, project.id, key.id)
        with pytest.raises(NotFound):
            await key_service.validate_key(db, project.id, key.id, secret)

    async def test_delete_missing_key(self, db, member):
        _, project, _ = member
        with pytest.raises(NotFound):
            await key_service.delete_key(db, project.id, str(uuid.uuid4()))
