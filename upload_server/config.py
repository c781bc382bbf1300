"""Configuration settings for the Upload Server."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

# Storage limits
MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB
CHUNK_SIZE = 8192  # 8KB chunks

# Accepted upload media types
PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ALLOWED_MIME_TYPES = (PDF_MIME_TYPE, DOCX_MIME_TYPE)

# Directory paths
RENDER_UPLOAD_DIR = "/app/uploads"  # Persistent disk mount on Render
LOCAL_UPLOAD_DIR = Path(__file__).resolve().parent / "Uploads"
STAGING_DIR_NAME = ".incoming"

# Filename limits
DEFAULT_NAME_MAX = 255  # Bytes, when the filesystem cannot report its own
SUFFIX_RESERVE = 8  # Room for a "-N" collision suffix

# Logging
LOG_DIR = "logs"

# Server
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000

# Failure monitor
FAILURE_THRESHOLD = 3
FAILURE_WINDOW_SECONDS = 60


@dataclass(frozen=True)
class Settings:
    upload_dir: Path
    on_render: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    max_upload_size: int = MAX_UPLOAD_SIZE
    allowed_mime_types: Tuple[str, ...] = ALLOWED_MIME_TYPES
    failure_threshold: int = FAILURE_THRESHOLD
    failure_window_seconds: int = FAILURE_WINDOW_SECONDS
    log_dir: str = LOG_DIR
    chunk_size: int = field(default=CHUNK_SIZE, repr=False)

    @property
    def staging_dir(self) -> Path:
        """Directory holding in-flight uploads, on the same filesystem as upload_dir."""
        return self.upload_dir / STAGING_DIR_NAME

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        """Create Settings from environment variables.

        Reads a .env file first when called without an explicit mapping.
        The RENDER flag selects the fixed deployment path, otherwise a local
        Uploads/ directory next to this module is used. UPLOAD_DIR overrides both.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        on_render = bool(environ.get("RENDER"))
        if environ.get("UPLOAD_DIR"):
            upload_dir = Path(environ["UPLOAD_DIR"])
        elif on_render:
            upload_dir = Path(RENDER_UPLOAD_DIR)
        else:
            upload_dir = LOCAL_UPLOAD_DIR

        allowed = ALLOWED_MIME_TYPES
        if environ.get("ALLOWED_MIME_TYPES"):
            allowed = tuple(t.strip() for t in environ["ALLOWED_MIME_TYPES"].split(",") if t.strip())

        return cls(
            upload_dir=upload_dir.resolve(),
            on_render=on_render,
            host=environ.get("HOST", DEFAULT_HOST),
            port=int(environ.get("PORT", DEFAULT_PORT)),
            max_upload_size=int(environ.get("MAX_UPLOAD_SIZE", MAX_UPLOAD_SIZE)),
            allowed_mime_types=allowed,
            failure_threshold=int(environ.get("FAILURE_THRESHOLD", FAILURE_THRESHOLD)),
            failure_window_seconds=int(environ.get("FAILURE_WINDOW_SECONDS", FAILURE_WINDOW_SECONDS)),
            log_dir=environ.get("LOG_DIR", LOG_DIR),
        )
