from typing import Optional, Dict, Any, Protocol
from datetime import datetime
import logging
from urllib.parse import quote
import requests
from ..core.config import Settings
from ..core.errors import UpstreamError
from ..core.models import StoredFile
from .clients import github_session

"""Content store helpers for committing files into a GitHub repository.
"""

logger = logging.getLogger(__name__)

RAW_HOST = "https://raw.githubusercontent.com"
WEB_HOST = "https://github.com"

COMMITTER = {
    "name": "Monitoring Prakerin App",
    "email": "noreply@prakerin.app",
}


class ContentStore(Protocol):
    """Create-or-update one file at `path` on `branch` with base64 `content`."""

    def put(self, path: str, content: str, branch: str, message: str) -> StoredFile: ...

    def close(self) -> None: ...


def raw_url(owner: str, repo: str, branch: str, path: str) -> str:
    return f"{RAW_HOST}/{owner}/{repo}/{branch}/{quote(path, safe='/')}"


def blob_url(owner: str, repo: str, branch: str, path: str) -> str:
    return f"{WEB_HOST}/{owner}/{repo}/blob/{branch}/{quote(path, safe='/')}"


def commit_message(when: datetime) -> str:
    # Short Indonesian date, e.g. 7/3/2025
    return f"📷 Upload dokumentasi - {when.day}/{when.month}/{when.year}"


def _error_message(resp: requests.Response) -> Optional[str]:
    """Return the `message` field of a GitHub error body, if there is one."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    logger.warning("GitHub answered %s without a message: %s", resp.status_code, resp.text[:500])
    return None


class GitHubContentStore:
    """Writes files through the GitHub contents API.

    Existing files are overwritten: the current blob sha is looked up first
    and sent along with the write. Exactly one PUT is issued per `put`.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self._owns_session = session is None
        self.session = session or github_session(settings)

    def close(self) -> None:
        # Injected sessions belong to the caller
        if self._owns_session:
            self.session.close()

    def _contents_url(self, path: str) -> str:
        s = self.settings
        return (
            f"{s.github_api_url.rstrip('/')}/repos/{s.github_owner}/{s.github_repo}"
            f"/contents/{quote(path, safe='/')}"
        )

    def _current_sha(self, path: str, branch: str) -> Optional[str]:
        resp = self.session.get(
            self._contents_url(path),
            params={"ref": branch},
            timeout=self.settings.github_timeout,
        )
        if resp.status_code == 200:
            body = resp.json()
            # A directory listing comes back as a list
            if isinstance(body, dict):
                return body.get("sha")
            return None
        if resp.status_code != 404:
            logger.warning("sha lookup for %s returned %s", path, resp.status_code)
        return None

    def put(self, path: str, content: str, branch: str, message: str) -> StoredFile:
        payload: Dict[str, Any] = {
            "message": message,
            "content": content,
            "branch": branch,
            "committer": dict(COMMITTER),
        }
        sha = self._current_sha(path, branch)
        if sha:
            payload["sha"] = sha

        resp = self.session.put(
            self._contents_url(path),
            json=payload,
            timeout=self.settings.github_timeout,
        )
        if resp.status_code not in (200, 201):
            raise UpstreamError(resp.status_code, _error_message(resp))

        content_meta = (resp.json() or {}).get("content") or {}
        return StoredFile(
            path=content_meta.get("path") or path,
            html_url=content_meta.get("html_url"),
            download_url=content_meta.get("download_url"),
            sha=content_meta.get("sha"),
        )
