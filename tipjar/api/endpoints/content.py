from typing import List, Optional

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tipjar.core.categories import ContentCategory
from tipjar.core.dependencies import get_current_user
from tipjar.core.router_decorated import APIRouter
from tipjar.core.validators import is_valid_address, normalize_address
from tipjar.db.pagination import paginate
from tipjar.db.session import get_db
from tipjar.models.content import Content
from tipjar.schemas.content import ContentCreate, ContentListResponse, ContentResponse

router = APIRouter()
group_tags: List[str] = ["content"]

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@router.post(
    "/upload",
    tags=group_tags,
    response_model=ContentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_content(
    body: ContentCreate,
    address: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContentResponse:
    """Publish a content item owned by the authenticated wallet."""
    content = Content(
        creator_address=address,
        category=body.category,
        title=body.title,
        description=body.description,
        media_url=body.media_url,
        thumbnail_url=body.thumbnail_url,
    )
    db.add(content)
    db.commit()
    db.refresh(content)
    return ContentResponse.from_record(content)


@router.get(
    "",
    tags=group_tags,
    response_model=ContentListResponse,
    status_code=status.HTTP_200_OK,
)
def list_content(
    page: int = Query(default=1, ge=1, description="Page number, default: 1"),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size, default: 20, max: 100"),
    category: Optional[str] = Query(default=None, description="Filter by category, any case"),
    creator: Optional[str] = Query(default=None, description="Filter by creator address"),
    db: Session = Depends(get_db),
) -> ContentListResponse:
    """
    List content, newest first.

    Query Parameters:
    - page / limit: offset pagination
    - category: one of the content categories
    - creator: wallet address of the creator
    """
    query = db.query(Content)
    if category is not None:
        try:
            query = query.filter(Content.category == ContentCategory.parse(category))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid category")
    if creator is not None:
        if not is_valid_address(creator):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid creator address")
        query = query.filter(Content.creator_address == normalize_address(creator))

    rows, pagination = paginate(query, (Content.created_at.desc(), Content.id), page, limit)
    return ContentListResponse(
        content=[ContentResponse.from_record(row) for row in rows],
        pagination=pagination,
    )


@router.get(
    "/creator/{address}",
    tags=group_tags,
    response_model=ContentListResponse,
    status_code=status.HTTP_200_OK,
)
def list_creator_content(
    address: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> ContentListResponse:
    if not is_valid_address(address):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid address")

    query = db.query(Content).filter(Content.creator_address == normalize_address(address))
    rows, pagination = paginate(query, (Content.created_at.desc(), Content.id), page, limit)
    return ContentListResponse(
        content=[ContentResponse.from_record(row) for row in rows],
        pagination=pagination,
    )


@router.get(
    "/{content_id}",
    tags=group_tags,
    response_model=ContentResponse,
    status_code=status.HTTP_200_OK,
)
def get_content(content_id: str, db: Session = Depends(get_db)) -> ContentResponse:
    content = db.get(Content, content_id)
    if content is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    return ContentResponse.from_record(content)
