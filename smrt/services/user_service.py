# smrt/services/user_service.py
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from smrt.errors import BadRequest, Conflict, Unauthorized
from smrt.models.user import PasswordHash, User
from smrt.services import session_service
from smrt.services.hashing import make_password_hash_async, verify_password_async

logger = logging.getLogger("smrt.auth")

# one message for "no such user" and "wrong password"
INVALID_CREDENTIALS = "Invalid email or password"
# verified against when the email is unknown so both failures cost one scrypt run
_UNKNOWN_USER_HASH = "0" * 32 + ":" + "0" * 128


async def find_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    q = await db.execute(select(User).filter_by(email=email))
    return q.scalars().first()


async def register(db: AsyncSession, session_id: str, email: str, password: str, name: Optional[str] = None) -> User:
    """
    Create a user with a scrypt password hash and log the session in.
    Raises BadRequest on missing fields, Conflict on a taken email.
    """
    if not email or not password:
        raise BadRequest("Email and password are required")

    if await find_user_by_email(db, email):
        raise Conflict("User already exists")

    stored_hash = await make_password_hash_async(password)
    user = User(email=email, name=name, password_hash=PasswordHash(hash=stored_hash))
    db.add(user)
    try:
        await db.flush()
        # auto-login after register
        await session_service.link_user(db, session_id, user.id)
        await db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration of the same email
        await db.rollback()
        raise Conflict("User already exists")

    logger.info(f"User registered: {email}")
    return user


async def login(db: AsyncSession, session_id: str, email: str, password: str) -> User:
    if not email or not password:
        raise BadRequest("Email and password are required")

    q = await db.execute(
        select(User, PasswordHash.hash).join(PasswordHash, PasswordHash.user_id == User.id).filter(User.email == email)
    )
    row = q.first()
    if row is None:
        await verify_password_async(password, _UNKNOWN_USER_HASH)
        raise Unauthorized(INVALID_CREDENTIALS)
    user, stored_hash = row
    if not await verify_password_async(password, stored_hash):
        raise Unauthorized(INVALID_CREDENTIALS)

    await session_service.link_user(db, session_id, user.id)
    await db.commit()
    logger.info(f"User logged in: {email}")
    return user


async def logout(db: AsyncSession, session_id: str) -> None:
    """Unlink the user; the session row and its visit count stay."""
    await session_service.link_user(db, session_id, None)
    await db.commit()


async def get_user_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    q = await db.execute(select(User).filter_by(id=user_id))
    return q.scalars().first()
