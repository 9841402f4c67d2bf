# smrt/models/user.py
import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import relationship

from smrt.utils.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    email = sa.Column(sa.String(255), unique=True, nullable=False, index=True)
    name = sa.Column(sa.String(255), nullable=True)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, default=utcnow)

    password_hash = relationship("PasswordHash", uselist=False, cascade="all, delete-orphan", lazy="raise")


class PasswordHash(Base):
    __tablename__ = "password_hashes"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    user_id = sa.Column(sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    # "<saltHex>:<scryptKeyHex>", see smrt.services.hashing
    hash = sa.Column(sa.String(512), nullable=False)
