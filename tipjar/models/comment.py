from sqlalchemy import Boolean, Column, DateTime, Index, String

from tipjar.db.base import Base
from tipjar.models._common import new_id, utc_now


class Comment(Base):
    """Model for comments table

    Deleted comments stay in the table with ``deleted = true`` and are
    filtered out of every read.
    """

    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_content_created", "content_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    content_id = Column(String(36), nullable=False, index=True)
    address = Column(String(42), nullable=False)
    text = Column(String(1000), nullable=False)
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)
