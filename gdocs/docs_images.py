"""
Local image upload for Google Docs.

The Docs API only inserts images by URI, so a local file is first uploaded to
Drive, shared by link, and then referenced by its content URL.
"""
import asyncio
import io
import logging
import mimetypes
import os
from typing import Optional

from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from core.utils import translate_http_error

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}


def guess_image_mime_type(path: str) -> str:
    extension = os.path.splitext(path)[1].lower()
    return IMAGE_MIME_TYPES.get(extension) or mimetypes.guess_type(path)[0] or "application/octet-stream"


async def get_parent_folder_id(drive_service, document_id: str) -> Optional[str]:
    """
    First parent folder of a Drive file, or None when it cannot be determined.

    Failing to read the parents is not fatal: the upload then goes to the Drive root.
    """
    try:
        file_info = await asyncio.to_thread(
            drive_service.files()
            .get(fileId=document_id, fields="parents", supportsAllDrives=True)
            .execute
        )
    except HttpError as e:
        logger.warning(f"Could not determine parent folder of {document_id}, using Drive root: {e}")
        return None
    parents = file_info.get("parents") or []
    return parents[0] if parents else None


async def upload_image_to_drive(
    drive_service,
    local_path: str,
    parent_folder_id: Optional[str] = None
) -> str:
    """
    Upload a local image to Drive and make it readable by link.

    Returns:
        A URL the Docs API can fetch the image from

    Raises:
        DocumentNotFound, PermissionDenied, RemoteOperationFailed: On Drive API failure
    """
    mime_type = guess_image_mime_type(local_path)
    with open(local_path, "rb") as f:
        fh = io.BytesIO(f.read())
    media = MediaIoBaseUpload(fh, mimetype=mime_type, resumable=True)

    file_metadata = {"name": os.path.basename(local_path), "mimeType": mime_type}
    if parent_folder_id:
        file_metadata["parents"] = [parent_folder_id]

    try:
        uploaded = await asyncio.to_thread(
            drive_service.files()
            .create(
                body=file_metadata,
                media_body=media,
                fields="id, name, webContentLink",
                supportsAllDrives=True,
            )
            .execute
        )
        file_id = uploaded.get("id")

        await asyncio.to_thread(
            drive_service.permissions()
            .create(
                fileId=file_id,
                body={"type": "anyone", "role": "reader"},
                supportsAllDrives=True,
            )
            .execute
        )
    except HttpError as error:
        raise translate_http_error(error, parent_folder_id, operation="upload image") from error

    logger.info(f"Uploaded {local_path} to Drive as {file_id}")
    return uploaded.get("webContentLink") or f"https://drive.google.com/uc?export=view&id={file_id}"
