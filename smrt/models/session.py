# smrt/models/session.py
import sqlalchemy as sa

from smrt.utils.database import Base


class SessionRecord(Base):
    """One row per `sid` cookie ever issued. Rows are never deleted on logout."""
    __tablename__ = "sessions"
    session_id = sa.Column(sa.String(64), primary_key=True)
    visits = sa.Column(sa.Integer, nullable=False, default=1)
    user_id = sa.Column(sa.String(36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
