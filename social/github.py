"""
github.py -- Public GitHub repository lookup for profile pages.

The profile page shows a user's most recently created public repositories.
Unauthenticated calls work; a GITHUB_TOKEN raises the GitHub API rate limit
from 60 to 5000 requests per hour.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger("devconnector.github")

GITHUB_API = "https://api.github.com"

# Module-level session shared across calls for connection pooling.
# max_redirects=3 -- GitHub's API never needs more, and a short chain limits
# SSRF via redirects.
_session = requests.Session()
_session.max_redirects = 3
_session.headers.update({"Accept": "application/vnd.github+json", "User-Agent": "devconnector-api"})


def fetch_user_repos(username: str, count: int = 5, token: Optional[str] = None) -> Optional[list[dict[str, Any]]]:
    """Return up to `count` public repos for `username`, oldest-created first.

    Returns None when the user does not exist or GitHub is unreachable, so the
    route can answer 404 without caring which.
    """
    headers: dict[str, str] = {}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    url = f"{GITHUB_API}/users/{quote(username, safe='')}/repos"
    try:
        resp = _session.get(
            url,
            params={"per_page": count, "sort": "created", "direction": "asc"},
            headers=headers,
            timeout=10,
        )
        if resp.status_code != 200:
            logger.info("GitHub repos lookup for %s returned %d", username, resp.status_code)
            return None
        return resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("GitHub repos lookup failed for %s: %s", username, e)
        return None
