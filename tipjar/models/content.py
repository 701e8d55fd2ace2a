from sqlalchemy import Column, DateTime, Enum, Index, String, Text

from tipjar.core.categories import ContentCategory
from tipjar.db.base import Base
from tipjar.models._common import new_id, utc_now


class Content(Base):
    """Model for content table
    Example:
    {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "creator_address": "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
        "category": "music",
        "title": "First single",
        "description": "Recorded live",
        "media_url": "/uploads/1718000000000-ab12....mp3",
        "thumbnail_url": null,
        "created_at": "2024-01-01T12:00:00",
        "updated_at": "2024-01-01T12:00:00"
    }
    """

    __tablename__ = "content"
    __table_args__ = (
        Index("ix_content_creator_created", "creator_address", "created_at"),
        Index("ix_content_category_created", "category", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    creator_address = Column(String(42), nullable=False, index=True)
    category = Column(
        Enum(
            ContentCategory,
            name="content_category",
            native_enum=False,
            values_callable=lambda enum: [member.value for member in enum],
            validate_strings=True,
        ),
        nullable=False,
    )
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    media_url = Column(Text, nullable=False)
    thumbnail_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)
