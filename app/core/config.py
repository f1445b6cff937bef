import os
from pydantic import BaseModel, Field
from typing import Optional


def _env(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


class Settings(BaseModel):
    """Environment-driven configuration for the upload service.

    Everything except the token has a default. A missing token is not an
    error at load time; each upload request reports it instead.
    """
    github_token: Optional[str] = Field(default_factory=lambda: os.getenv("GITHUB_TOKEN") or None)
    github_owner: str = Field(default_factory=lambda: _env("GITHUB_USERNAME", "rizvenhabibi"))
    github_repo: str = Field(default_factory=lambda: _env("GITHUB_REPO", "pantaupembimbing"))
    github_branch: str = Field(default_factory=lambda: _env("GITHUB_BRANCH", "main"))
    github_folder: str = Field(default_factory=lambda: _env("GITHUB_FOLDER", "uploads").strip("/") or "uploads")
    github_api_url: str = Field(default_factory=lambda: _env("GITHUB_API_URL", "https://api.github.com"))
    github_timeout: float = Field(default_factory=lambda: float(_env("GITHUB_TIMEOUT", "20")))
    app_env: str = Field(default_factory=lambda: _env("APP_ENV", "production"))
    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL", "INFO").upper())

    @property
    def debug(self) -> bool:
        # Error details are echoed to clients only in development mode
        return self.app_env.lower() in {"development", "dev"}


settings = Settings()
