import mimetypes
from typing import List

import aiofiles
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from logger_config import setup_logger
from app.exceptions import StorageUnavailable
from app.models.file_models import FileEntry, UploadResponse

logger = setup_logger()

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
async def health_check():
    logger.info("Health check requested")
    return "Server is healthy"


@router.get("/debug", response_class=PlainTextResponse)
async def debug_storage(request: Request):
    """Report whether the uploads directory is readable and writable, without touching it."""
    storage_manager = request.app.state.storage_manager
    try:
        await storage_manager.check_access()
    except StorageUnavailable as e:
        logger.error(f"Debug: Cannot access uploads: {e.detail}")
        return PlainTextResponse(f"Cannot access uploads: {e.detail}", status_code=500)

    logger.info("Debug: Uploads directory is writable")
    return "Uploads directory is writable"


@router.post("/upload", response_model=UploadResponse)
async def upload_file(request: Request):
    """Store an uploaded PDF or Word document under a collision-free name.

    The form is read directly so that a "file" field sent as plain text
    reaches validation and is rejected like a missing file.
    """
    upload_service = request.app.state.upload_service
    async with request.form() as form:
        stored_name = await upload_service.save(form.get("file"))
    return UploadResponse(success=True, message="File uploaded successfully.", filename=stored_name)


@router.get("/files", response_model=List[FileEntry])
async def list_files(request: Request):
    storage_manager = request.app.state.storage_manager
    files = await storage_manager.list_files()
    return [FileEntry(name=name) for name in files]


@router.get("/uploads/{filename}")
async def get_file(filename: str, request: Request):
    """Serve a stored file."""
    storage_manager = request.app.state.storage_manager

    file_path = await storage_manager.find_file(filename)
    if file_path is None:
        raise HTTPException(status_code=404, detail=f"File {filename} not found")

    content_type, _ = mimetypes.guess_type(filename)

    async def file_iterator():
        async with aiofiles.open(file_path, 'rb') as file:
            while chunk := await file.read(8192):  # 8KB chunks
                yield chunk

    return StreamingResponse(
        file_iterator(),
        media_type=content_type or "application/octet-stream",
    )
