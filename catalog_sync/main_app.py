#=================================================================
# catalog_sync/main_app.py
# FastAPI application entry-point for the catalog bridge.
#=================================================================

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_sync.config import get_settings
from catalog_sync.errors import CatalogSyncError, TransportError
from catalog_sync.logging_filters import install_log_filters
from catalog_sync.routes import router as api_router

settings = get_settings()

# --- FastAPI instance ---
app = FastAPI(
    title="Magento Shopify Catalog Bridge",
    description="Review newly created Magento products and create them in Shopify.",
)

# --- Logging setup (console, INFO level) ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s | %(message)s"
)
logger = logging.getLogger("uvicorn.error")
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
install_log_filters()

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------- Include routers ----------------
app.include_router(api_router)           # /api/*


# --- Root endpoint ---
@app.get("/")
async def home():
    return {"status": "running", "service": "Magento Shopify Catalog Bridge"}


# --- Upstream failures (Magento / Shopify) ---
@app.exception_handler(CatalogSyncError)
async def catalog_sync_exception_handler(request: Request, exc: CatalogSyncError):
    logger.error("Upstream error on %s: %s", request.url.path, exc)
    content = {"detail": str(exc)}
    if isinstance(exc, TransportError) and exc.status_code is not None:
        content["upstream_status"] = exc.status_code
    return JSONResponse(status_code=502, content=content)


# --- Global error handler (keeps full stack trace in logs) ---
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Sync failed: {str(exc)}"},
    )
