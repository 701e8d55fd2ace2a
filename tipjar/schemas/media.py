from tipjar.schemas.my_base_model import CustomBaseModel


class MediaUploadResponse(CustomBaseModel):
    """Stored upload - output"""

    filename: str = ""
    url: str = ""
    mimetype: str = ""
    size: int = 0
