import base64
import json
from typing import Any, Dict, Optional
from ..core.config import Settings, settings as default_settings
from ..core.handler import HandlerRequest, StoreFactory, handle_upload
from ..github.storage import GitHubContentStore

"""Function-as-a-service entry point (API Gateway / Netlify style events).
"""


def _method(event: Dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method", "")
    return method.upper()


def _body(event: Dict[str, Any]) -> Optional[str]:
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        return base64.b64decode(body).decode("utf-8", errors="replace")
    return body


def handler(
    event: Dict[str, Any],
    context: Any = None,
    *,
    settings: Optional[Settings] = None,
    store_factory: StoreFactory = GitHubContentStore,
) -> Dict[str, Any]:
    method = _method(event)
    result = handle_upload(
        HandlerRequest(method=method, body=_body(event), headers=event.get("headers") or {}),
        settings or default_settings,
        store_factory,
    )
    if method == "OPTIONS":
        return {"statusCode": 204, "headers": result.headers}

    response: Dict[str, Any] = {"statusCode": result.status_code, "headers": result.headers}
    if result.body is not None:
        response["headers"] = {**result.headers, "Content-Type": "application/json"}
        response["body"] = json.dumps(result.body)
    return response
