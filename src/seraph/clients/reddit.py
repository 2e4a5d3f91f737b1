"""
Reddit API client.

Fetches the submitted posts of a user through the OAuth API:
- App-only token via the client-credentials grant
- Listing pages of 100 posts, followed through the `after` cursor
- Posts mapped to RawPost with absolute permalinks

The underlying httpx.Client can be injected (tests use httpx.MockTransport).
"""

import time
from typing import Any, Dict, List, Optional

import httpx
import structlog

from ..config import settings
from ..exceptions import FetchError
from ..models.document import RawPost

logger = structlog.get_logger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
OAUTH_BASE_URL = "https://oauth.reddit.com"
PERMALINK_BASE_URL = "https://www.reddit.com"
PAGE_LIMIT = 100


def extract_username(profile_url: str) -> str:
    """
    Extract the username from a profile URL or return a bare name unchanged.

    Examples:
        >>> extract_username("https://www.reddit.com/user/spez/submitted/?sort=new")
        'spez'
        >>> extract_username("spez")
        'spez'
    """
    value = profile_url.strip()
    if "/user/" in value:
        value = value.split("/user/", 1)[1]
        value = value.split("/", 1)[0].split("?", 1)[0]
    elif value.startswith("u/"):
        value = value[2:]
    return value


def _post_from_listing_child(child: Dict[str, Any]) -> Optional[RawPost]:
    data = child.get("data") or {}
    post_id = data.get("id")
    if not post_id:
        return None

    permalink = data.get("permalink") or ""
    if permalink and not permalink.startswith("http"):
        permalink = PERMALINK_BASE_URL + permalink

    return RawPost(
        post_id=str(post_id),
        title=data.get("title") or "",
        body=data.get("selftext"),
        permalink=permalink,
        created_utc=int(data.get("created_utc") or 0),
    )


class RedditClient:
    """
    Minimal Reddit OAuth client for user submission listings.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self.client_id = client_id if client_id is not None else settings.reddit_client_id
        self.client_secret = client_secret if client_secret is not None else settings.reddit_client_secret
        self.user_agent = user_agent or settings.reddit_user_agent
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.http = http_client or httpx.Client(
            timeout=timeout_seconds or settings.reddit_timeout_seconds
        )

        self.logger = logger.bind(component="reddit_client")

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """
        Send a request with exponential backoff on transport errors.

        Raises:
            FetchError: On HTTP error status, exhausted retries or a non-JSON body
        """
        headers = kwargs.pop("headers", {})
        headers["User-Agent"] = self.user_agent

        for attempt in range(self.max_retries):
            try:
                response = self.http.request(method, url, headers=headers, **kwargs)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                self.logger.error(
                    "reddit_http_error",
                    url=url,
                    status_code=e.response.status_code,
                )
                raise FetchError(f"Reddit returned HTTP {e.response.status_code} for {url}") from e
            except httpx.TransportError as e:
                if attempt == self.max_retries - 1:
                    self.logger.error(
                        "reddit_request_failed_after_retries",
                        url=url,
                        error=str(e),
                        attempts=self.max_retries,
                    )
                    raise FetchError(f"Reddit request failed: {e}") from e

                wait_time = self.retry_delay * (2 ** attempt)
                self.logger.warning(
                    "reddit_request_retry",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    error=str(e),
                    wait_seconds=wait_time,
                )
                time.sleep(wait_time)
            except ValueError as e:
                raise FetchError(f"Reddit returned a non-JSON body for {url}") from e

        raise FetchError(f"Reddit request failed: {url}")

    def get_app_token(self) -> str:
        """
        Obtain an application-only OAuth token (client-credentials grant).

        Raises:
            FetchError: If the response carries no access_token
        """
        payload = self._request(
            "POST",
            TOKEN_URL,
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
        )
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise FetchError(f"No access_token from Reddit: {payload}")
        return str(token)

    def fetch_user_submitted(
        self, token: str, username: str, after: Optional[str] = None
    ) -> Dict[str, Any]:
        """Fetch one listing page of the user's submitted posts."""
        params = {"limit": PAGE_LIMIT}
        if after:
            params["after"] = after

        return self._request(
            "GET",
            f"{OAUTH_BASE_URL}/user/{username}/submitted",
            headers={"Authorization": f"Bearer {token}"},
            params=params,
        )

    def fetch_posts(self, username: str, max_posts: Optional[int] = None) -> List[RawPost]:
        """
        Fetch up to max_posts submitted posts, newest first.

        Args:
            username: Reddit username
            max_posts: Upper bound on returned posts (default from settings)

        Returns:
            List of RawPost; empty when the user has no submissions

        Raises:
            FetchError: On authentication, transport or HTTP failures
        """
        max_posts = max_posts or settings.reddit_max_posts
        token = self.get_app_token()

        posts: List[RawPost] = []
        after: Optional[str] = None
        pages = 0

        while len(posts) < max_posts:
            response = self.fetch_user_submitted(token, username, after)
            data = response.get("data") if isinstance(response, dict) else None
            if not data:
                break

            children = data.get("children") or []
            if not children:
                break

            pages += 1
            for child in children:
                post = _post_from_listing_child(child)
                if post is not None:
                    posts.append(post)

            after = data.get("after")
            if not after:
                break

        posts = posts[:max_posts]
        self.logger.info("reddit_posts_fetched", username=username, posts=len(posts), pages=pages)
        return posts
