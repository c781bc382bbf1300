import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import Settings
from logger_config import configure_file_logging, setup_logger
from monitor import Monitor
from app.exceptions import StartupFailure, UploadServerError
from app.routes.file_routes import router
from app.services.storage_manager import StorageManager
from app.services.upload_service import UploadService

# Logger setup
logger = setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    log_path = configure_file_logging(settings.log_dir)
    logger.info(f"Logging to {log_path}")
    logger.info(
        f"Environment: RENDER={settings.on_render}, PORT={settings.port}, upload_dir={settings.upload_dir}"
    )

    # Create and initialize storage manager
    app.state.storage_manager = StorageManager(settings)
    await app.state.storage_manager.initialize()

    app.state.monitor = Monitor(settings.failure_threshold, settings.failure_window_seconds)
    app.state.upload_service = UploadService(settings, app.state.storage_manager, app.state.monitor)
    yield
    logger.info(f"Upload stats: {app.state.monitor.stats}")


async def upload_server_error_handler(request: Request, exc: UploadServerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around an explicit Settings object."""
    app = FastAPI(title="Upload Server", lifespan=lifespan)
    app.state.settings = settings or Settings.from_env()
    app.add_exception_handler(UploadServerError, upload_server_error_handler)
    app.include_router(router)
    return app


app = create_app()


def run_server(app: FastAPI, settings: Settings) -> None:
    try:
        uvicorn.run(app, host=settings.host, port=settings.port)
    except OSError as e:
        raise StartupFailure(f"Server failed to start on port {settings.port}", detail=str(e)) from e
    except SystemExit as e:
        # uvicorn exits with status 1 when it cannot bind
        if e.code:
            raise StartupFailure(
                f"Server failed to start on port {settings.port}", detail=f"exit status {e.code}"
            ) from e
        raise


def main() -> None:
    settings = app.state.settings
    logger.info("Starting Upload Server...")
    logger.info(f"Uploads directory: {settings.upload_dir}")
    logger.info(f"Maximum upload size: {settings.max_upload_size / (1024*1024):.2f} MB")
    try:
        run_server(app, settings)
    except StartupFailure as e:
        logger.critical(f"{e.message}: {e.detail}")
        sys.exit(1)


if __name__ == "__main__":
    main()
