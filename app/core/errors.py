from typing import Optional

"""Error taxonomy for the upload handler.

Every error carries the HTTP status the handler answers with. Nothing here
is raised past the handler boundary.
"""

UPSTREAM_MESSAGES = {
    401: "GitHub token invalid or expired",
    403: "Access denied. Check repository permissions",
    404: "Repository not found",
    422: "File already exists or invalid path",
}


class UploadError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequest(UploadError):
    status_code = 400


class MethodNotAllowed(UploadError):
    status_code = 405

    def __init__(self, message: str = "Method not allowed. Use POST."):
        super().__init__(message)


class ServerConfigError(UploadError):
    status_code = 500


class UnknownError(UploadError):
    status_code = 500


class UpstreamError(UploadError):
    """The remote content store rejected or failed the write.

    `status` is the upstream HTTP status when known, else None.
    """

    def __init__(self, status: Optional[int], message: Optional[str] = None):
        self.status = status
        self.upstream_message = message
        super().__init__(
            describe_upstream_error(status, message),
            status_code=status or 500,
        )


def describe_upstream_error(status: Optional[int], message: Optional[str] = None) -> str:
    if status in UPSTREAM_MESSAGES:
        return UPSTREAM_MESSAGES[status]
    if message:
        return message
    if status:
        return f"GitHub API error: {status}"
    return "Upload failed"
