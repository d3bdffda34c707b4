import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .catalog.catalog import default_catalog
from .database import init_db
from .errors import PromptRegistryError
from .routers.admin_prompts import router as admin_prompts_router
from .settings.config import settings

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    catalog = default_catalog()
    logger.info(
        "Prompt registry ready: %d blocks, %d compositions, libraries=%s",
        len(catalog.blocks), len(catalog.compositions), ",".join(catalog.library_ids),
    )
    yield


app = FastAPI(title="Prompt Registry", lifespan=lifespan)

# Enable CORS if needed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Update for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ----------------------
# Route Includes
# ----------------------
app.include_router(admin_prompts_router)


@app.get("/health")
async def health():
    return {"status": "ok"}


# -----------------------------------------------------
# Registry errors -> 4xx JSON with the offending slug
# -----------------------------------------------------
@app.exception_handler(PromptRegistryError)
async def _registry_error_handler(request: Request, exc: PromptRegistryError):
    if exc.status_code >= 500:
        logger.exception("Unhandled registry error on %s", request.url.path, exc_info=exc)
    else:
        logger.info("%s on %s: %s", exc.kind, request.url.path, exc.detail)
    body = {"detail": exc.detail, "error": exc.kind}
    if exc.slug:
        body["slug"] = exc.slug
    version = getattr(exc, "version", None)
    if version is not None:
        body["version"] = version
    return JSONResponse(status_code=exc.status_code, content=body)
