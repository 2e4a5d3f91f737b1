"""
Unit tests for the Reddit client.

HTTP traffic is served by httpx.MockTransport.
"""

import httpx
import pytest

from seraph.clients.reddit import RedditClient, extract_username
from seraph.exceptions import FetchError


def _child(post_id, title="title", selftext="body", permalink=None, created_utc=1700000000.0):
    return {
        "kind": "t3",
        "data": {
            "id": post_id,
            "title": title,
            "selftext": selftext,
            "permalink": permalink or f"/r/test/comments/{post_id}/",
            "created_utc": created_utc,
        },
    }


def _listing(children, after=None):
    return {"kind": "Listing", "data": {"children": children, "after": after}}


def _make_client(handler, **kwargs):
    return RedditClient(
        client_id="id",
        client_secret="secret",
        user_agent="seraph-tests/1.0",
        max_retries=kwargs.pop("max_retries", 1),
        retry_delay=0.0,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        **kwargs,
    )


class TestExtractUsername:
    """Test extract_username()."""

    @pytest.mark.parametrize("value,expected", [
        ("https://www.reddit.com/user/spez", "spez"),
        ("https://www.reddit.com/user/spez/", "spez"),
        ("https://www.reddit.com/user/spez/submitted/?sort=new", "spez"),
        ("https://old.reddit.com/user/spez?foo=bar", "spez"),
        ("u/spez", "spez"),
        ("  spez  ", "spez"),
    ])
    def test_extracts(self, value, expected):
        assert extract_username(value) == expected


class TestRedditClient:
    """Test token and listing requests."""

    def test_get_app_token(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["user_agent"] = request.headers.get("User-Agent")
            seen["body"] = request.content.decode()
            return httpx.Response(200, json={"access_token": "tok", "token_type": "bearer"})

        token = _make_client(handler).get_app_token()

        assert token == "tok"
        assert seen["auth"].startswith("Basic ")
        assert seen["user_agent"] == "seraph-tests/1.0"
        assert seen["body"] == "grant_type=client_credentials"

    def test_missing_access_token(self):
        def handler(request):
            return httpx.Response(200, json={"error": "invalid_grant"})

        with pytest.raises(FetchError, match="No access_token"):
            _make_client(handler).get_app_token()

    def test_http_error_raises_fetch_error(self):
        def handler(request):
            return httpx.Response(401, json={"message": "Unauthorized"})

        with pytest.raises(FetchError, match="HTTP 401"):
            _make_client(handler).get_app_token()

    def test_transport_error_retried_then_raised(self):
        attempts = {"count": 0}

        def handler(request):
            attempts["count"] += 1
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError, match="request failed"):
            _make_client(handler, max_retries=3).get_app_token()

        assert attempts["count"] == 3

    def test_fetch_posts_paginates(self):
        requests = []

        def handler(request):
            if request.url.path == "/api/v1/access_token":
                return httpx.Response(200, json={"access_token": "tok"})

            requests.append(request)
            assert request.headers["Authorization"] == "Bearer tok"
            assert request.url.params["limit"] == "100"
            if "after" not in request.url.params:
                return httpx.Response(200, json=_listing([_child("a"), _child("b")], after="t3_b"))
            assert request.url.params["after"] == "t3_b"
            return httpx.Response(200, json=_listing([_child("c", selftext="")], after=None))

        posts = _make_client(handler).fetch_posts("spez", max_posts=50)

        assert [post.post_id for post in posts] == ["a", "b", "c"]
        assert len(requests) == 2
        assert requests[0].url.path == "/user/spez/submitted"
        assert posts[0].permalink == "https://www.reddit.com/r/test/comments/a/"
        assert posts[0].created_utc == 1700000000
        assert posts[2].full_text == "title"

    def test_fetch_posts_respects_max_posts(self):
        def handler(request):
            if request.url.path == "/api/v1/access_token":
                return httpx.Response(200, json={"access_token": "tok"})
            children = [_child(f"p{i}") for i in range(5)]
            return httpx.Response(200, json=_listing(children, after="next"))

        posts = _make_client(handler).fetch_posts("spez", max_posts=7)

        assert len(posts) == 7

    def test_fetch_posts_empty_profile(self):
        def handler(request):
            if request.url.path == "/api/v1/access_token":
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(200, json=_listing([]))

        assert _make_client(handler).fetch_posts("ghost") == []

    def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(FetchError, match="non-JSON"):
            _make_client(handler).get_app_token()
