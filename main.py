from contextlib import asynccontextmanager
import logging
import secrets

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from fastapi.staticfiles import StaticFiles
from fastapi.security import HTTPBasic, HTTPBasicCredentials
import uvicorn

from tipjar.api.endpoints import (
    auth,
    comments,
    content,
    health,
    likes,
    media,
    tipjar,
)
from tipjar.core.cache import cache_manager
from tipjar.core.config import settings
from tipjar.core.errors import register_exception_handlers
from tipjar.db.session import init_db
from tipjar.services import media_service

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("tipjar")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.warn_insecure_defaults()
    media_service.ensure_upload_dir()
    init_db()
    cache_manager.start_reaper(settings.NONCE_SWEEP_INTERVAL_SECONDS)
    logger.info("TipJar backend started (%s), API base %s", settings.ENVIRONMENT, settings.API_PREFIX)
    if settings.TIPJAR_FACTORY_ADDRESS:
        logger.info("TipJar factory: %s", settings.TIPJAR_FACTORY_ADDRESS)
    yield
    cache_manager.stop_reaper()
    logger.info("TipJar backend stopped")


# Define the FastAPI application instance
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=lifespan,
)

register_exception_handlers(app)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# serve uploaded files
app.mount(
    "/uploads",
    StaticFiles(directory=str(media_service.ensure_upload_dir())),
    name="uploads",
)

security = HTTPBasic()
def doc_auth(credentials: HTTPBasicCredentials = Depends(security)):
    if not settings.DOC_PASSWORD:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    correct_password = secrets.compare_digest(credentials.password, settings.DOC_PASSWORD)
    if not (correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username

@app.get("/docs", include_in_schema=False)
async def get_swagger_documentation(username: str = Depends(doc_auth)):
    return get_swagger_ui_html(openapi_url="/openapi.json", title="docs")

@app.get("/redoc", include_in_schema=False)
async def get_redoc_documentation(username: str = Depends(doc_auth)):
    return get_redoc_html(openapi_url="/openapi.json", title="docs")

@app.get("/openapi.json", include_in_schema=False)
async def openapi(username: str = Depends(doc_auth)):
    return get_openapi(title=app.title, version=app.version, routes=app.routes)


app.include_router(health.router)

g_prefix = settings.API_PREFIX
app.include_router(auth.router, prefix=g_prefix + "/auth")
app.include_router(content.router, prefix=g_prefix + "/content")
app.include_router(likes.router, prefix=g_prefix + "/likes")
app.include_router(comments.router, prefix=g_prefix + "/comments")
app.include_router(media.router, prefix=g_prefix + "/media")
app.include_router(tipjar.router, prefix=g_prefix + "/tipjar")


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        ssl_keyfile=settings.SSL_KEY,
        ssl_certfile=settings.SSL_CERT,
        reload=settings.DEBUG
    )
