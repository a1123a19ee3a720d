from datetime import datetime, timezone

import pytest
import requests

from rss_generator.config import parse_site_config

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

ARTICLES_HTML = """
<html>
  <body>
    <main>
      <article>
        <h2><a href="/posts/1">First post</a></h2>
        <p class="date">2023年12月01日に投稿</p>
      </article>
      <article>
        <h2><a href="https://other.example.com/posts/2">Second post</a></h2>
        <p class="date">2024年1月5日に投稿</p>
      </article>
    </main>
  </body>
</html>
"""


def make_site(key="example", **overrides):
    raw = {
        "name": "Example",
        "url": "https://example.com/list",
        "description": "Example listing",
        "outputFile": f"{key}.xml",
        "scraping": {
            "itemSelector": "article",
            "fields": {
                "title": {"selector": "h2 a", "attribute": "text"},
                "link": {
                    "selector": "h2 a",
                    "attribute": "href",
                    "prefix": "https://example.com",
                },
                "pubDate": {
                    "selector": "p.date",
                    "attribute": "text",
                    "transform": "parseQiitaDate",
                },
            },
        },
        "rssConfig": {
            "title": "Example feed",
            "description": "Example articles",
            "site_url": "https://example.com/list",
        },
    }
    raw.update(overrides)
    return parse_site_config(key, raw)


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Serves canned pages by URL and records every request."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        page = self.pages.get(url)
        if isinstance(page, Exception):
            raise page
        if page is None:
            return FakeResponse(status_code=404)
        return FakeResponse(page)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture(autouse=True)
def _clear_base_url(monkeypatch):
    monkeypatch.delenv("GITHUB_PAGES_URL", raising=False)


@pytest.fixture
def site_factory():
    return make_site


@pytest.fixture
def articles_html():
    return ARTICLES_HTML


@pytest.fixture
def session_factory():
    return FakeSession
