import requests
from ..core.config import Settings

USER_AGENT = "Prakerin-Monitoring-App/1.0"
API_VERSION = "2022-11-28"


def github_session(settings: Settings) -> requests.Session:
    """Create a requests session authenticated with our configured token."""
    session = requests.Session()
    session.headers.update(
        {
            "Authorization": f"Bearer {settings.github_token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": USER_AGENT,
        }
    )
    return session
