# smrt/services/key_service.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from smrt.errors import NotFound, Unauthorized
from smrt.models.project import Key, KeyHash
from smrt.services.hashing import generate_api_secret, hash_api_secret, verify_api_secret

logger = logging.getLogger("smrt.keys")


async def create_key(db: AsyncSession, project_id: str, name: str) -> Tuple[Key, str]:
    """
    Create a key for the project. Returns the key and its raw secret; the
    secret is not stored anywhere and this is the only place it exists.
    """
    secret = generate_api_secret()
    key = Key(name=name, project_id=project_id, hash=KeyHash(hash=hash_api_secret(secret)))
    db.add(key)
    await db.commit()
    logger.info(f"API key {key.id} created for project {project_id}")
    return key, secret


async def list_keys(db: AsyncSession, project_id: str) -> List[Key]:
    q = await db.execute(select(Key).filter_by(project_id=project_id).order_by(Key.created_at.desc()))
    return list(q.scalars().all())


async def delete_key(db: AsyncSession, project_id: str, key_id: str) -> None:
    result = await db.execute(delete(Key).where(Key.id == key_id, Key.project_id == project_id))
    if result.rowcount == 0:
        raise NotFound("Key not found")
    await db.commit()
    logger.info(f"API key {key_id} deleted from project {project_id}")


async def validate_key(db: AsyncSession, project_id: str, key_id: str, secret: Optional[str]) -> Key:
    """
    Authenticate a CLI call.

    Order matters: a missing secret is 401, an unknown (project, key) pair is
    404, a wrong secret is 401. The key is looked up by both ids so a key
    never opens another project.
    """
    if not secret:
        raise Unauthorized("Missing x-cli-secret header")

    q = await db.execute(
        select(Key, KeyHash.hash)
        .join(KeyHash, KeyHash.key_id == Key.id)
        .where(Key.id == key_id, Key.project_id == project_id)
    )
    row = q.first()
    if row is None:
        raise NotFound("Key not found")

    key, stored_hash = row
    if not verify_api_secret(secret, stored_hash):
        logger.warning(f"Invalid secret presented for key {key_id}")
        raise Unauthorized("Invalid secret")
    return key
