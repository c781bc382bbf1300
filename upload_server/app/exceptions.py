class UploadServerError(Exception):
    """Base error carrying the HTTP status and the client-facing message."""

    status_code = 500

    def __init__(self, message: str, detail: str = ""):
        super().__init__(message)
        self.message = message
        # OS-level cause, for logs and operator endpoints only
        self.detail = detail


class ValidationError(UploadServerError):
    """Bad or missing file, disallowed media type or oversized payload."""

    status_code = 400


class StorageUnavailable(UploadServerError):
    """Storage directory missing, unmounted or permission denied."""


class StorageWriteFailure(UploadServerError):
    """Disk full or I/O error while writing an upload."""


class StartupFailure(UploadServerError):
    """The server could not bind its configured port."""
