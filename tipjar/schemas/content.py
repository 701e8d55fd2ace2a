from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from tipjar.core.categories import ContentCategory
from tipjar.schemas.my_base_model import CustomBaseModel, Pagination, RequestModel

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000


class ContentCreate(RequestModel):
    """Request body for POST /content/upload"""

    category: ContentCategory = Field(..., description="One of the content categories, any case")
    title: str = Field(..., description=f"Title, at most {TITLE_MAX_LENGTH} characters")
    description: Optional[str] = Field(None, description=f"At most {DESCRIPTION_MAX_LENGTH} characters")
    media_url: str = Field(..., description="URL returned by /media/upload")
    thumbnail_url: Optional[str] = Field(None, description="Optional thumbnail URL")

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Category is required")
        try:
            return ContentCategory.parse(v)
        except ValueError:
            raise ValueError("Invalid category")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError("Title too long")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if len(v) > DESCRIPTION_MAX_LENGTH:
            raise ValueError("Description too long")
        return v or None

    @field_validator("media_url")
    @classmethod
    def validate_media_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Media URL is required")
        return v

    @field_validator("thumbnail_url")
    @classmethod
    def validate_thumbnail_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class ContentResponse(CustomBaseModel):
    """Single content item"""

    id: str = ""
    creator_address: str = ""
    category: Optional[ContentCategory] = None
    title: str = ""
    description: Optional[str] = None
    media_url: str = ""
    thumbnail_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ContentListResponse(CustomBaseModel):
    content: List[ContentResponse] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
