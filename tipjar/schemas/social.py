from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from tipjar.schemas.my_base_model import CustomBaseModel, Pagination, RequestModel

COMMENT_MAX_LENGTH = 1000


def _check_content_id(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Content ID is required")
    return v


def _check_comment_text(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Comment text is required")
    if len(v) > COMMENT_MAX_LENGTH:
        raise ValueError("Comment too long")
    return v


# ============================================
# Likes
# ============================================


class LikeToggleRequest(RequestModel):
    content_id: str = Field(..., description="Content to like or unlike")

    @field_validator("content_id")
    @classmethod
    def validate_content_id(cls, v: str) -> str:
        return _check_content_id(v)


class LikeToggleResponse(CustomBaseModel):
    liked: bool = False
    message: str = ""


class LikeCountResponse(CustomBaseModel):
    content_id: str = ""
    count: int = 0


class LikeStatusResponse(CustomBaseModel):
    content_id: str = ""
    liked: bool = False


# ============================================
# Comments
# ============================================


class CommentCreate(RequestModel):
    content_id: str = Field(..., description="Content being commented on")
    text: str = Field(..., description=f"Comment text, at most {COMMENT_MAX_LENGTH} characters")

    @field_validator("content_id")
    @classmethod
    def validate_content_id(cls, v: str) -> str:
        return _check_content_id(v)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _check_comment_text(v)


class CommentUpdate(RequestModel):
    text: str = Field(..., description=f"New text, at most {COMMENT_MAX_LENGTH} characters")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _check_comment_text(v)


class CommentResponse(CustomBaseModel):
    id: str = ""
    content_id: str = ""
    address: str = ""
    text: str = ""
    deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentListResponse(CustomBaseModel):
    comments: List[CommentResponse] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
