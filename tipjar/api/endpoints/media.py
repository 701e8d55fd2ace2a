import logging
from typing import List, Optional

from fastapi import Depends, File, Form, HTTPException, UploadFile, status

from tipjar.core.config import settings
from tipjar.core.dependencies import get_current_user
from tipjar.core.router_decorated import APIRouter
from tipjar.core.validators import is_valid_category
from tipjar.schemas.media import MediaUploadResponse
from tipjar.services import media_service
from tipjar.services.media_service import MediaError

router = APIRouter()
group_tags: List[str] = ["media"]

logger = logging.getLogger(__name__)


def _store(
    file: Optional[UploadFile],
    max_size: int,
    allowed: List[str],
    exact: bool,
    category: Optional[str] = None,
) -> MediaUploadResponse:
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    mimetype = (file.content_type or "application/octet-stream").split(";")[0].strip().lower()
    if category is not None:
        if not is_valid_category(category):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid category")
        if not media_service.is_valid_file_type(mimetype, media_service.get_allowed_mime_types(category)):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File type {mimetype} not allowed for {category.lower()}",
            )

    try:
        filename, size = media_service.save_upload(
            file.file, file.filename, mimetype, max_size, allowed, exact=exact
        )
    except MediaError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    finally:
        file.file.close()

    return MediaUploadResponse(
        filename=filename,
        url=media_service.get_file_url(filename),
        mimetype=mimetype,
        size=size,
    )


@router.post(
    "/upload",
    tags=group_tags,
    response_model=MediaUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_media(
    file: Optional[UploadFile] = File(None, description="Media file"),
    category: Optional[str] = Form(None, description="Optional category narrowing the allowed types"),
    address: str = Depends(get_current_user),
) -> MediaUploadResponse:
    """
    Upload a media file for a content item.

    Allowed: jpeg, png, gif, webp images, mp4/webm video, mpeg/wav/ogg audio,
    pdf and plain text, up to MAX_FILE_SIZE bytes.
    """
    result = _store(file, settings.MAX_FILE_SIZE, media_service.ALLOWED_MEDIA_MIMES, True, category)
    logger.info("Media %s uploaded by %s", result.filename, address)
    return result


@router.post(
    "/thumbnail",
    tags=group_tags,
    response_model=MediaUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_thumbnail(
    file: Optional[UploadFile] = File(None, description="Thumbnail image"),
    address: str = Depends(get_current_user),
) -> MediaUploadResponse:
    """Upload a thumbnail image, up to MAX_THUMBNAIL_SIZE bytes."""
    if file is not None and not (file.content_type or "").lower().startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files allowed for thumbnails",
        )
    return _store(file, settings.MAX_THUMBNAIL_SIZE, ["image/"], False)
