from pydantic import BaseModel


class FileEntry(BaseModel):
    name: str


class UploadResponse(BaseModel):
    success: bool
    message: str
    filename: str
