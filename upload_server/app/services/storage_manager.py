import os
import stat
import uuid
from pathlib import Path
from typing import List, Optional

import aiofiles.os

import config
from config import Settings
from logger_config import setup_logger
from app.exceptions import StorageUnavailable
from app.services.filename_resolver import resolve_filename

logger = setup_logger()

NOT_ACCESSIBLE = "Uploads directory not accessible"


class StorageManager:
    def __init__(self, settings: Settings):
        self.upload_dir = settings.upload_dir
        self.staging_dir = settings.staging_dir
        self.on_render = settings.on_render
        self.disk_accessible = False

    async def initialize(self):
        """Check the uploads directory at startup, creating it locally if missing.

        Never raises: an inaccessible directory is logged and every later
        file operation reports it.
        """
        logger.info("Initializing storage manager...")

        try:
            await self.check_access()
            logger.info(f"Uploads directory accessible: {self.upload_dir}")
            self.disk_accessible = True
        except StorageUnavailable as e:
            logger.error(f"Cannot access uploads directory: {e.detail}")
            # The deployment disk is mounted, never created here
            if not self.on_render and not await aiofiles.os.path.exists(self.upload_dir):
                try:
                    await aiofiles.os.makedirs(self.upload_dir, exist_ok=True)
                    logger.info(f"Created local uploads directory: {self.upload_dir}")
                    self.disk_accessible = True
                except OSError as mkdir_err:
                    logger.error(f"Failed to create local uploads directory: {mkdir_err}")

        if self.disk_accessible:
            await self._clean_staging_dir()
        else:
            logger.error("WARNING: uploads directory is not accessible. File operations will fail.")

    async def _clean_staging_dir(self):
        """Create the staging directory and drop uploads left over from a previous run."""
        try:
            await aiofiles.os.makedirs(self.staging_dir, exist_ok=True)
            files_removed = 0
            for file in self.staging_dir.glob("*"):
                if file.is_file():
                    await aiofiles.os.unlink(file)
                    files_removed += 1
        except OSError as e:
            logger.error(f"Cannot prepare staging directory {self.staging_dir}: {e}")
            self.disk_accessible = False
            return
        logger.info(f"Cleaned staging directory, removed {files_removed} files")

    async def check_access(self) -> None:
        """Raise StorageUnavailable unless the uploads directory is a readable, writable directory."""
        try:
            st = await aiofiles.os.stat(self.upload_dir)
        except OSError as e:
            raise StorageUnavailable(NOT_ACCESSIBLE, detail=str(e)) from e

        if not stat.S_ISDIR(st.st_mode):
            raise StorageUnavailable(NOT_ACCESSIBLE, detail=f"Not a directory: '{self.upload_dir}'")
        if not await aiofiles.os.access(self.upload_dir, os.R_OK | os.W_OK | os.X_OK):
            raise StorageUnavailable(NOT_ACCESSIBLE, detail=f"Permission denied: '{self.upload_dir}'")

    async def list_files(self) -> List[str]:
        """List stored filenames, sorted. Fails instead of returning an empty list."""
        logger.info(f"Listing files in: {self.upload_dir}")
        try:
            entries = await aiofiles.os.listdir(self.upload_dir)
        except OSError as e:
            logger.error(f"Error reading uploads directory: {e}")
            raise StorageUnavailable(
                f"Error reading uploads directory: {e.strerror or e}", detail=str(e)
            ) from e

        files = sorted(entry for entry in entries if entry != config.STAGING_DIR_NAME)
        logger.debug(f"Files found: {files}")
        return files

    def max_filename_length(self) -> int:
        """Longest entry name, in bytes, the uploads filesystem accepts."""
        try:
            return os.pathconf(self.upload_dir, "PC_NAME_MAX")
        except (AttributeError, OSError, ValueError):
            return config.DEFAULT_NAME_MAX

    def new_staging_path(self) -> Path:
        return self.staging_dir / f"{uuid.uuid4().hex}.part"

    async def publish(self, staged_path: Path, requested_name: str) -> str:
        """Expose a fully written staged file under a collision-free name.

        The hard link fails if the name was taken after it was resolved, in
        which case the next free candidate is resolved and tried.
        """
        while True:
            filename = resolve_filename(self.upload_dir, requested_name)
            try:
                await aiofiles.os.link(staged_path, self.upload_dir / filename)
            except FileExistsError:
                logger.warning(f"Filename {filename} was taken concurrently, resolving again")
                continue
            logger.debug(f"Generated filename: {filename}")
            return filename

    async def discard(self, path: Path) -> None:
        """Remove a staged file if it is still there."""
        try:
            if await aiofiles.os.path.exists(path):
                await aiofiles.os.unlink(path)
        except OSError as e:
            logger.warning(f"Could not remove staged file {path}: {e}")

    async def find_file(self, filename: str) -> Optional[Path]:
        """Return the path of a stored file, or None if no such regular file is served."""
        if (
            not filename
            or filename in (".", "..", config.STAGING_DIR_NAME)
            or "/" in filename
            or "\\" in filename
            or "\x00" in filename
        ):
            return None

        path = self.upload_dir / filename
        if not await aiofiles.os.path.isfile(path):
            return None
        return path
