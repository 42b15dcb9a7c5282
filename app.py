"""FastAPI host for Package Unifier."""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv('.env')

# Configure logging BEFORE importing any modules that use logger
log_level = os.getenv('LOG_LEVEL', 'INFO')
logging.basicConfig(
    level=getattr(logging, log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Import after logging is configured
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from package_unifier import __version__
from package_unifier.config import UnifierSettings
from package_unifier.constants import PLUGIN_NAME
from package_unifier.errors import SharedStoreMissingError, StoreLockedError
from package_unifier.routers import vendor_router
from package_unifier.vendor.lifecycle import UnifierLifecycle


def create_app(settings: Optional[UnifierSettings] = None) -> FastAPI:
    """Build the service around one set of settings."""
    settings = settings or UnifierSettings.from_env()

    app = FastAPI(
        title=PLUGIN_NAME,
        description="Consolidates per-plugin vendor trees into one shared store",
        version=__version__,
    )
    app.state.settings = settings
    app.state.lifecycle = UnifierLifecycle(settings)
    app.include_router(vendor_router)

    @app.get("/")
    async def root():
        return {"message": f"{PLUGIN_NAME} API", "docs": "/docs"}

    @app.on_event("startup")
    async def startup_event():
        """Activate, boot units, then run the init pass off the event loop."""
        lifecycle: UnifierLifecycle = app.state.lifecycle

        logger.info(f"Starting {PLUGIN_NAME}")
        logger.info(f"  - Shared store: {settings.shared_store_root}")
        logger.info(f"  - Plugin dirs: {', '.join(str(p) for p in settings.scan_dirs)}")

        # DirectoryCreationError aborts startup
        lifecycle.on_activate()
        lifecycle.boot_all()

        if not settings.consolidate_on_startup:
            return
        try:
            report = await run_in_threadpool(lifecycle.on_init)
        except (StoreLockedError, SharedStoreMissingError) as e:
            logger.warning(f"Skipping startup consolidation: {e}")
            return
        if not report.ok:
            logger.warning(f"Startup consolidation finished with {len(report.failures)} failure(s)")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Application shutdown event."""
        app.state.lifecycle.on_deactivate()
        logger.info(f"Shutting down {PLUGIN_NAME}")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "9090"))
    uvicorn.run("app:app", host="0.0.0.0", port=port, reload=True)
