"""Internal service layer: HTTP collaborators behind injectable interfaces."""

from episode_browser.services.connectivity_service import check_connectivity
from episode_browser.services.episode_api_service import fetch_characters, fetch_page

__all__ = [
    "check_connectivity",
    "fetch_characters",
    "fetch_page",
]
