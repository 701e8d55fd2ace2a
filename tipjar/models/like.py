from sqlalchemy import Column, DateTime, String, UniqueConstraint

from tipjar.db.base import Base
from tipjar.models._common import new_id, utc_now


class Like(Base):
    """One row per (content, address); the unique constraint keeps it that way."""

    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("content_id", "address", name="uq_likes_content_address"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    content_id = Column(String(36), nullable=False, index=True)
    address = Column(String(42), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
