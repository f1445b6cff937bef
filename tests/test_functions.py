import os, sys, json, base64

import pytest

# Ensure project root on path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.core.config import Settings
from app.core.errors import UpstreamError
from app.core.models import StoredFile
from app.functions.upload import handler


class RecordingStore:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, settings):
        return self

    def put(self, path, content, branch, message):
        self.calls.append((path, content, branch))
        if self.error is not None:
            raise self.error
        return StoredFile(path=path)

    def close(self):
        pass


@pytest.fixture
def fn_settings():
    return Settings(github_token="t", github_owner="o", github_repo="r", github_branch="b", github_folder="img")


def test_function_preflight_success(fn_settings):
    store = RecordingStore()
    resp = handler({"httpMethod": "OPTIONS", "body": "garbage"}, None, settings=fn_settings, store_factory=store)
    assert resp["statusCode"] == 204
    assert "body" not in resp
    assert resp["headers"]["Access-Control-Allow-Origin"] == "*"
    assert store.calls == []


def test_function_wrong_method_failure(fn_settings):
    resp = handler({"httpMethod": "GET"}, None, settings=fn_settings, store_factory=RecordingStore())
    assert resp["statusCode"] == 405
    assert json.loads(resp["body"]) == {"error": "Method not allowed. Use POST."}


def test_function_upload_success(fn_settings):
    store = RecordingStore()
    event = {"httpMethod": "POST", "body": json.dumps({"image": "data:image/jpeg;base64,QUJD", "filename": "a.jpg"})}
    resp = handler(event, None, settings=fn_settings, store_factory=store)

    assert resp["statusCode"] == 200
    assert resp["headers"]["Content-Type"] == "application/json"
    data = json.loads(resp["body"])["data"]
    assert data["url"] == "https://raw.githubusercontent.com/o/r/b/img/a.jpg"
    assert data["size"] == 3
    assert store.calls == [("img/a.jpg", "QUJD", "b")]


def test_function_base64_encoded_event_success(fn_settings):
    store = RecordingStore()
    raw = json.dumps({"image": "QUJD", "filename": "enc.jpg"}).encode("utf-8")
    event = {
        "requestContext": {"http": {"method": "post"}},
        "body": base64.b64encode(raw).decode("ascii"),
        "isBase64Encoded": True,
    }
    resp = handler(event, None, settings=fn_settings, store_factory=store)
    assert resp["statusCode"] == 200
    assert store.calls[0][0] == "img/enc.jpg"


def test_function_invalid_json_failure(fn_settings):
    store = RecordingStore()
    resp = handler({"httpMethod": "POST", "body": "{oops"}, None, settings=fn_settings, store_factory=store)
    assert resp["statusCode"] == 400
    assert json.loads(resp["body"])["error"] == "Invalid JSON in request body"
    assert store.calls == []


def test_function_upstream_error_failure(fn_settings):
    store = RecordingStore(error=UpstreamError(404, "Not Found"))
    event = {"httpMethod": "POST", "body": json.dumps({"image": "QUJD"})}
    resp = handler(event, None, settings=fn_settings, store_factory=store)
    assert resp["statusCode"] == 404
    assert json.loads(resp["body"]) == {"success": False, "error": "Repository not found"}
