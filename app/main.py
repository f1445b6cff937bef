"""Application entry point.

Serve locally with `uvicorn app.main:app --reload`.
"""
import logging
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import settings
from .routers.upload import method_not_allowed, router as upload_router

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

tags_metadata = [
    {
        "name": "upload",
        "description": (
            "Store an image in a GitHub repository.\n\n"
            "- Accepts raw base64 or a `data:image/...;base64,` data URL.\n"
            "- Generates a filename when none is given.\n"
            "- Returns a raw.githubusercontent.com URL to the stored file."
        ),
    }
]

app = FastAPI(
    title="GitHub Image Upload Service",
    description=(
        "How to Use:\n\n"
        "1) Set GITHUB_TOKEN (and optionally GITHUB_USERNAME, GITHUB_REPO, GITHUB_BRANCH, GITHUB_FOLDER).\n"
        "2) POST /api/upload with JSON `{\"image\": \"...\", \"filename\": \"photo.jpg\"}`.\n"
        "3) Use `data.url` from the response to fetch the stored image.\n\n"
        "Notes: The endpoint is open and answers CORS preflight requests for any origin."
    ),
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.include_router(upload_router)
app.add_exception_handler(StarletteHTTPException, method_not_allowed)


@app.get("/health", tags=["upload"], summary="Liveness check")
def health():
    return {"status": "ok"}
