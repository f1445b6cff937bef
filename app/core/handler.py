from contextlib import closing
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Union
import base64
import binascii
import json
import logging
import math
import secrets
import string
import time
import traceback
from pydantic import ValidationError
from .config import Settings
from .errors import BadRequest, MethodNotAllowed, ServerConfigError, UnknownError, UploadError
from .models import ErrorResponse, UploadRequest, UploadResponse, UploadResult
from ..github.storage import ContentStore, GitHubContentStore, blob_url, commit_message, raw_url

"""Transport-neutral upload handler.

Adapters translate their trigger into a `HandlerRequest`, call
`handle_upload` and render the returned `HandlerResponse`. The handler never
raises; every failure becomes an error envelope.
"""

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

DATA_URL_PREFIX = "data:image/"
BASE36_ALPHABET = string.digits + string.ascii_lowercase

StoreFactory = Callable[[Settings], ContentStore]


@dataclass
class HandlerRequest:
    method: str
    body: Union[Dict[str, Any], str, bytes, None] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class HandlerResponse:
    status_code: int
    body: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))


def parse_body(body: Union[Dict[str, Any], str, bytes, None]) -> Dict[str, Any]:
    """Accept an already-parsed object or JSON text, return a dict."""
    if body is None:
        return {}
    if isinstance(body, dict):
        return body
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            raise BadRequest("Invalid JSON in request body")
    if not isinstance(body, str):
        raise BadRequest("Request body must be a JSON object")
    if not body.strip():
        return {}
    try:
        parsed = json.loads(body)
    except ValueError:
        raise BadRequest("Invalid JSON in request body")
    if not isinstance(parsed, dict):
        raise BadRequest("Request body must be a JSON object")
    return parsed


def normalize_image(image: str) -> str:
    """Strip a `data:image/...;base64,` prefix, if any."""
    if image.startswith(DATA_URL_PREFIX):
        return image.split(",", 1)[1] if "," in image else ""
    return image


def check_base64(payload: str) -> None:
    # Encoders may wrap lines; the store accepts that, so only the alphabet is checked
    try:
        base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError):
        raise BadRequest("Image data is not valid base64")


def generate_filename() -> str:
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(9))
    return f"img_{millis}_{suffix}.jpg"


def approximate_size(payload: str) -> int:
    return math.ceil(len(payload) * 3 / 4)


def _error_response(exc: UploadError, settings: Settings) -> HandlerResponse:
    body = ErrorResponse(
        error=exc.message,
        details=traceback.format_exc() if settings.debug else None,
    )
    return HandlerResponse(
        status_code=exc.status_code,
        body=body.model_dump(exclude_none=True),
    )


def _upload(req: UploadRequest, settings: Settings, store_factory: StoreFactory) -> UploadResponse:
    if not settings.github_token:
        logger.error("GITHUB_TOKEN is not set")
        raise ServerConfigError("Server configuration error: GitHub token not configured")

    payload = normalize_image(req.image)
    if not payload:
        raise BadRequest("No image data provided")
    check_base64(payload)

    owner, repo, branch = settings.github_owner, settings.github_repo, settings.github_branch
    filename = req.filename or generate_filename()
    path = f"{settings.github_folder}/{filename}"
    logger.info("Uploading to: %s/%s/%s", owner, repo, path)

    with closing(store_factory(settings)) as store:
        stored = store.put(
            path=path,
            content=payload,
            branch=branch,
            message=commit_message(datetime.now()),
        )

    # The upstream download_url is not reliable; build the raw URL ourselves
    url = raw_url(owner, repo, branch, path)
    view_url = blob_url(owner, repo, branch, path)
    github_url = view_url
    if stored.html_url and f"/{owner}/{repo}/blob/" in stored.html_url:
        github_url = stored.html_url

    uploaded_at = datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")
    logger.info("Upload successful: %s", url)
    return UploadResponse(
        data=UploadResult(
            url=url,
            github_url=github_url,
            view_url=view_url,
            raw_url=url,
            filename=filename,
            path=path,
            size=approximate_size(payload),
            upload_date=uploaded_at,
        )
    )


def handle_upload(
    request: HandlerRequest,
    settings: Settings,
    store_factory: StoreFactory = GitHubContentStore,
) -> HandlerResponse:
    method = (request.method or "").upper()
    logger.info("Upload request received (%s)", method)
    if method == "OPTIONS":
        return HandlerResponse(status_code=200)

    try:
        if method != "POST":
            raise MethodNotAllowed()

        try:
            req = UploadRequest.model_validate(parse_body(request.body))
        except ValidationError:
            raise BadRequest("Invalid upload request")
        if not req.image:
            raise BadRequest("No image data provided")
        if not isinstance(req.image, str):
            raise BadRequest("Image must be a base64 string")

        result = _upload(req, settings, store_factory)
        return HandlerResponse(
            status_code=200,
            body=result.model_dump(by_alias=True, exclude_none=True),
        )
    except MethodNotAllowed as e:
        return HandlerResponse(status_code=e.status_code, body={"error": e.message})
    except UploadError as e:
        if e.status_code >= 500 or getattr(e, "status", None):
            logger.exception("Upload error: %s", e)
        else:
            logger.warning("Rejected upload request: %s", e.message)
        return _error_response(e, settings)
    except Exception as e:
        logger.exception("Upload error: %s", e)
        return _error_response(UnknownError(str(e) or "Upload failed"), settings)
