from typing import List

from fastapi import Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tipjar.core.dependencies import get_current_user
from tipjar.core.router_decorated import APIRouter
from tipjar.db.session import get_db
from tipjar.models.content import Content
from tipjar.models.like import Like
from tipjar.schemas.social import (
    LikeCountResponse,
    LikeStatusResponse,
    LikeToggleRequest,
    LikeToggleResponse,
)

router = APIRouter()
group_tags: List[str] = ["likes"]


def toggle_like(db: Session, content_id: str, address: str) -> bool:
    """
    Flip the like of ``address`` on ``content_id`` and return the new state.

    A single conditional delete decides the unlike case. Otherwise the row is
    inserted; when a concurrent toggle already inserted it, the unique
    constraint rejects ours and the content is reported as liked.
    """
    removed = (
        db.query(Like)
        .filter(Like.content_id == content_id, Like.address == address)
        .delete(synchronize_session=False)
    )
    if removed:
        db.commit()
        return False

    db.add(Like(content_id=content_id, address=address))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
    return True


@router.post(
    "/toggle",
    tags=group_tags,
    response_model=LikeToggleResponse,
    status_code=status.HTTP_200_OK,
)
def toggle(
    body: LikeToggleRequest,
    address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> LikeToggleResponse:
    if db.get(Content, body.content_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")

    liked = toggle_like(db, body.content_id, address)
    return LikeToggleResponse(
        liked=liked,
        message="Content liked" if liked else "Content unliked",
    )


@router.get(
    "/count/{content_id}",
    tags=group_tags,
    response_model=LikeCountResponse,
    status_code=status.HTTP_200_OK,
)
def like_count(content_id: str, db: Session = Depends(get_db)) -> LikeCountResponse:
    count = db.query(Like).filter(Like.content_id == content_id).count()
    return LikeCountResponse(content_id=content_id, count=count)


@router.get(
    "/me/{content_id}",
    tags=group_tags,
    response_model=LikeStatusResponse,
    status_code=status.HTTP_200_OK,
)
def my_like(
    content_id: str,
    address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> LikeStatusResponse:
    like = (
        db.query(Like)
        .filter(Like.content_id == content_id, Like.address == address)
        .first()
    )
    return LikeStatusResponse(content_id=content_id, liked=like is not None)
