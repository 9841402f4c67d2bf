# smrt/models/project.py
import sqlalchemy as sa
from sqlalchemy.orm import relationship

from smrt.models.user import new_id, utcnow
from smrt.utils.database import Base

STATUS_VALUES = ("OPEN", "CLOSED", "LOCKED")

# membership is the authorization scope of a project
project_members = sa.Table(
    "project_members",
    Base.metadata,
    sa.Column("project_id", sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Project(Base):
    __tablename__ = "projects"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    name = sa.Column(sa.String(255), nullable=False)
    description = sa.Column(sa.Text, nullable=True)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, default=utcnow)

    members = relationship("User", secondary=project_members, lazy="raise", passive_deletes=True)


class Key(Base):
    __tablename__ = "keys"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    name = sa.Column(sa.String(255), nullable=False)
    project_id = sa.Column(sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, default=utcnow)

    hash = relationship("KeyHash", uselist=False, cascade="all, delete-orphan", lazy="raise", passive_deletes=True)


class KeyHash(Base):
    __tablename__ = "key_hashes"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    key_id = sa.Column(sa.String(36), sa.ForeignKey("keys.id", ondelete="CASCADE"), unique=True, nullable=False)
    # sha256 hex of the raw secret; the secret itself is never stored
    hash = sa.Column(sa.String(64), nullable=False)


class Condition(Base):
    __tablename__ = "conditions"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    name = sa.Column(sa.String(255), nullable=False)
    message = sa.Column(sa.Text, nullable=True)
    project_id = sa.Column(sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, default=utcnow)


class Feature(Base):
    __tablename__ = "features"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    name = sa.Column(sa.String(255), nullable=False)
    message = sa.Column(sa.Text, nullable=True)
    status = sa.Column(sa.String(16), nullable=False, default="OPEN")
    project_id = sa.Column(sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, default=utcnow)


class Requirement(Base):
    __tablename__ = "requirements"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    name = sa.Column(sa.String(255), nullable=False)
    status = sa.Column(sa.String(16), nullable=False, default="OPEN")
    feature_id = sa.Column(sa.String(36), sa.ForeignKey("features.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, default=utcnow)


class ProjectRequirement(Base):
    """Definition-of-done template kept at project level, unrelated to feature requirements."""
    __tablename__ = "project_requirements"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    name = sa.Column(sa.String(255), nullable=False)
    project_id = sa.Column(sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, default=utcnow)


class Discussion(Base):
    __tablename__ = "discussions"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    name = sa.Column(sa.String(255), nullable=False)
    project_id = sa.Column(sa.String(36), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, default=utcnow)


class DiscussionMessage(Base):
    __tablename__ = "discussion_messages"
    id = sa.Column(sa.String(36), primary_key=True, default=new_id)
    body = sa.Column(sa.Text, nullable=False)
    author_name = sa.Column(sa.String(255), nullable=False)
    discussion_id = sa.Column(sa.String(36), sa.ForeignKey("discussions.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = sa.Column(sa.DateTime(timezone=True), nullable=False, default=utcnow)
