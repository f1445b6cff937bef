from fastapi import APIRouter, Depends, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from ..core.config import Settings, settings as default_settings
from ..core.handler import HandlerRequest, HandlerResponse, StoreFactory, handle_upload
from ..github.storage import GitHubContentStore

router = APIRouter(prefix="/api", tags=["upload"])

UPLOAD_PATH = "/api/upload"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]


def get_settings() -> Settings:
    return default_settings


def get_store_factory() -> StoreFactory:
    return GitHubContentStore


def render(result: HandlerResponse) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code, headers=result.headers)
    return JSONResponse(content=result.body, status_code=result.status_code, headers=result.headers)


# Common verbs are routed here; anything else reaches the handler through
# `method_not_allowed`, so preflight and 405 answers always come from it.
@router.api_route(
    "/upload",
    methods=ALL_METHODS,
    summary="Upload a base64 image to GitHub",
    description=(
        "POST a JSON body `{\"image\": \"<base64 or data URL>\", \"filename\": \"optional.jpg\"}`.\n\n"
        "The image is committed to the configured repository folder and the raw URL is returned.\n"
        "Uploading the same filename again overwrites the previous file with a new commit."
    ),
)
async def upload(
    request: Request,
    settings: Settings = Depends(get_settings),
    store_factory: StoreFactory = Depends(get_store_factory),
):
    body = await request.body()
    result = await run_in_threadpool(
        handle_upload,
        HandlerRequest(method=request.method, body=body, headers=dict(request.headers)),
        settings,
        store_factory,
    )
    return render(result)


async def method_not_allowed(request: Request, exc: StarletteHTTPException):
    """Answer unrouted verbs on the upload path with the handler's 405 envelope."""
    if exc.status_code == 405 and request.url.path == UPLOAD_PATH:
        return render(handle_upload(HandlerRequest(method=request.method), default_settings))
    return await http_exception_handler(request, exc)
