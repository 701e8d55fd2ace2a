from typing import List

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tipjar.core.dependencies import get_current_user
from tipjar.core.router_decorated import APIRouter
from tipjar.core.validators import sanitize_string
from tipjar.db.pagination import paginate
from tipjar.db.session import get_db
from tipjar.models.comment import Comment
from tipjar.models.content import Content
from tipjar.schemas.my_base_model import Message
from tipjar.schemas.social import (
    COMMENT_MAX_LENGTH,
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    CommentUpdate,
)

router = APIRouter()
group_tags: List[str] = ["comments"]

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def _get_owned_comment(db: Session, comment_id: str, address: str, action: str) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    if comment.address != address:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this comment",
        )
    return comment


@router.post(
    "",
    tags=group_tags,
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    body: CommentCreate,
    address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CommentResponse:
    if db.get(Content, body.content_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")

    comment = Comment(
        content_id=body.content_id,
        address=address,
        text=sanitize_string(body.text, COMMENT_MAX_LENGTH),
        deleted=False,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return CommentResponse.from_record(comment)


@router.get(
    "/{content_id}",
    tags=group_tags,
    response_model=CommentListResponse,
    status_code=status.HTTP_200_OK,
)
def list_comments(
    content_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> CommentListResponse:
    """Comments of a content item, newest first; deleted comments are left out."""
    query = db.query(Comment).filter(Comment.content_id == content_id, Comment.deleted.is_(False))
    rows, pagination = paginate(query, (Comment.created_at.desc(), Comment.id), page, limit)
    return CommentListResponse(
        comments=[CommentResponse.from_record(row) for row in rows],
        pagination=pagination,
    )


@router.put(
    "/{comment_id}",
    tags=group_tags,
    response_model=CommentResponse,
    status_code=status.HTTP_200_OK,
)
def update_comment(
    comment_id: str,
    body: CommentUpdate,
    address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CommentResponse:
    comment = _get_owned_comment(db, comment_id, address, "edit")
    if comment.deleted:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot edit deleted comment")

    comment.text = sanitize_string(body.text, COMMENT_MAX_LENGTH)
    db.commit()
    db.refresh(comment)
    return CommentResponse.from_record(comment)


@router.delete(
    "/{comment_id}",
    tags=group_tags,
    response_model=Message,
    status_code=status.HTTP_200_OK,
)
def delete_comment(
    comment_id: str,
    address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Message:
    """Soft delete; a comment can only be deleted once."""
    comment = _get_owned_comment(db, comment_id, address, "delete")
    if comment.deleted:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment already deleted")

    comment.deleted = True
    db.commit()
    return Message(message="Comment deleted")
