import ntpath
import os
import posixpath
from typing import Optional

import aiofiles
import aiofiles.os
from starlette.datastructures import UploadFile

import config
from config import Settings
from logger_config import setup_logger
from monitor import Monitor
from app.exceptions import StorageUnavailable, StorageWriteFailure, ValidationError
from app.services.storage_manager import StorageManager

logger = setup_logger()

NO_FILE_MESSAGE = "No file uploaded or invalid file type."
WRONG_TYPE_MESSAGE = "Only PDF and Word (.docx) files are allowed"


def sanitize_filename(filename: str, name_max: int = config.DEFAULT_NAME_MAX) -> str:
    """Keep only the last path component of a client-supplied filename.

    The result must fit the filesystem name limit with room left for a
    "-N" collision suffix.
    """
    name = posixpath.basename(ntpath.basename(filename or "")).strip()
    if name in ("", ".", "..") or "\x00" in name:
        raise ValidationError(f"Invalid filename: {filename!r}")

    limit = name_max - config.SUFFIX_RESERVE
    try:
        encoded_length = len(os.fsencode(name))
    except UnicodeEncodeError:
        raise ValidationError(f"Invalid filename: {filename!r}") from None
    if encoded_length > limit:
        raise ValidationError(f"Filename too long (maximum {limit} bytes)")
    return name


def get_upload_size(file: UploadFile) -> int:
    file.file.seek(0, 2)  # Seek to end
    size = file.file.tell()
    file.file.seek(0)
    return size


class UploadService:
    def __init__(self, settings: Settings, storage_manager: StorageManager, monitor: Monitor):
        self.settings = settings
        self.storage_manager = storage_manager
        self.monitor = monitor

    def validate(self, file: Optional[UploadFile]) -> str:
        """Check presence, media type and size of an upload.

        Returns:
            str: the sanitized filename to store the upload under

        Raises:
            ValidationError: nothing must be written for this upload
        """
        if not isinstance(file, UploadFile) or not file.filename:
            logger.info("Upload failed: No file or invalid type")
            raise ValidationError(NO_FILE_MESSAGE)

        if file.content_type not in self.settings.allowed_mime_types:
            logger.info(f"Upload rejected: {file.filename} has media type {file.content_type}")
            raise ValidationError(WRONG_TYPE_MESSAGE)

        size = get_upload_size(file)
        if size > self.settings.max_upload_size:
            logger.info(f"Upload rejected: {file.filename} is {size} bytes")
            raise ValidationError(
                f"File exceeds maximum allowed size ({self.settings.max_upload_size} bytes)"
            )

        return sanitize_filename(file.filename, self.storage_manager.max_filename_length())

    async def save(self, file: Optional[UploadFile]) -> str:
        """Validate and store one upload.

        The bytes go to a staging file first and only appear in the uploads
        directory once completely written. The staging file is removed
        whatever the outcome.

        Returns:
            str: the filename the upload was stored under
        """
        filename = self.validate(file)

        try:
            await self.storage_manager.check_access()
        except StorageUnavailable as e:
            logger.error(f"Upload blocked: {e.message} ({e.detail})")
            self.monitor.fail()
            raise

        staged_path = self.storage_manager.new_staging_path()
        try:
            await aiofiles.os.makedirs(staged_path.parent, exist_ok=True)

            written = 0
            async with aiofiles.open(staged_path, 'wb') as f:
                while chunk := await file.read(self.settings.chunk_size):
                    written += len(chunk)
                    await f.write(chunk)

            stored_name = await self.storage_manager.publish(staged_path, filename)
        except OSError as e:
            logger.error(f"Error saving upload {filename}: {e}", exc_info=True)
            self.monitor.fail()
            raise StorageWriteFailure("Error saving uploaded file", detail=str(e)) from e
        finally:
            await self.storage_manager.discard(staged_path)

        self.monitor.pass_()
        logger.info(f"Uploaded file: {stored_name} ({written} bytes)")
        return stored_name
