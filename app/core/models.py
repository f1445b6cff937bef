from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field


class UploadRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    image: Optional[Any] = None
    filename: Optional[str] = None


class UploadResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    github_url: str = Field(alias="githubUrl")
    view_url: Optional[str] = Field(default=None, alias="viewUrl")
    raw_url: str = Field(alias="rawUrl")
    filename: str
    path: str
    size: int
    upload_date: str = Field(alias="uploadDate")


class UploadResponse(BaseModel):
    success: bool = True
    message: str = "Image uploaded successfully to GitHub"
    data: UploadResult


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None


class StoredFile(BaseModel):
    """File metadata returned by a content store after a write."""
    path: str
    html_url: Optional[str] = None
    download_url: Optional[str] = None
    sha: Optional[str] = None
