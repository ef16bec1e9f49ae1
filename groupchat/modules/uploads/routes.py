import logging

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, Query

from groupchat.core.dependencies import get_s3_storage
from groupchat.core.exceptions import InternalError, InvalidError
from groupchat.modules.uploads.s3_storage import S3Storage
from groupchat.modules.uploads.schemas import SignedUploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["uploads"])


@router.get("/signed-url", response_model=SignedUploadResponse)
def get_signed_upload_url(
    file_name: str = Query("", alias="fileName"),
    file_type: str = Query("", alias="fileType"),
    storage: S3Storage = Depends(get_s3_storage)
):
    """Issue a time-boxed pre-signed PUT url; the client uploads directly to S3 and sends fileUrl with its message"""
    if not file_name.strip() or not file_type.strip():
        raise InvalidError("Both fileName and fileType query parameters are required")
    try:
        signed_url, file_url = storage.generate_upload_url(file_name.strip(), file_type.strip())
    except (ClientError, BotoCoreError):
        raise InternalError()
    return SignedUploadResponse(signed_url=signed_url, file_url=file_url)
