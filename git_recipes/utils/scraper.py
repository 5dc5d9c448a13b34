"""
Recipe scraping: fetch a recipe page and normalize it into a title,
ingredient list and source URL.
"""
import logging
from typing import Optional, Tuple, Union
from urllib.parse import urlparse, urlunparse

import requests
from bs4 import BeautifulSoup

from git_recipes.config import get_scraper_timeout, get_scraper_user_agent
from git_recipes.schemas.schemas import RecipeScrapeResult
from git_recipes.utils.scraping_utils import (
    dedupe_preserving_order,
    dom_ingredients,
    dom_title_candidates,
    extract_structured_recipe,
    first_non_empty,
    structured_ingredients,
    structured_title,
)

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


class RecipeScrapeError(Exception):
    """Base class for scrape failures; carries the HTTP status to report."""

    status = 500

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class RecipeScrapeRequestError(RecipeScrapeError):
    """The URL was invalid or the page could not be retrieved."""

    status = 400


class RecipeScrapeParseError(RecipeScrapeError):
    """The page was reachable but no title or ingredients could be recovered."""

    status = 422


def canonicalize_url(raw_url: str) -> str:
    """
    Validate a user-supplied URL and return its canonical form.
    Raises RecipeScrapeRequestError for anything that is not absolute http(s).
    """
    candidate = (raw_url or "").strip()
    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
        port = parsed.port
    except ValueError:
        raise RecipeScrapeRequestError("Please provide a valid http(s) recipe URL.", status=400)

    if parsed.scheme.lower() not in ("http", "https") or not hostname:
        raise RecipeScrapeRequestError("Please provide a valid http(s) recipe URL.", status=400)

    scheme = parsed.scheme.lower()
    netloc = parsed.netloc
    host_start = netloc.rfind("@") + 1
    host = netloc[host_start:].lower()
    if port is not None and port == DEFAULT_PORTS[scheme]:
        host = host[:host.rfind(":")]
    netloc = netloc[:host_start] + host

    return urlunparse((
        scheme,
        netloc,
        parsed.path or "/",
        parsed.params,
        parsed.query,
        parsed.fragment,
    ))


def fetch_recipe_html(url: str) -> Tuple[bytes, Optional[str]]:
    """
    Return the raw page body and the charset declared in Content-Type, if any.
    Decoding is left to BeautifulSoup so a <meta charset> is honoured when the
    header has none.
    """
    headers = {
        "User-Agent": get_scraper_user_agent(),
        "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
    }
    logger.info("Fetching recipe page %s", url)
    try:
        response = requests.get(url, headers=headers, timeout=get_scraper_timeout())
    except requests.RequestException as e:
        logger.warning("Failed to fetch %s: %s", url, e)
        raise RecipeScrapeRequestError(f"Unable to fetch the recipe page: {e}", status=502)

    if not response.ok:
        status = response.status_code if 400 <= response.status_code < 500 else 502
        logger.warning("Upstream returned %s for %s", response.status_code, url)
        raise RecipeScrapeRequestError(
            f"The recipe page responded with status {response.status_code}.",
            status=status,
        )

    content_type = response.headers.get("Content-Type", "")
    declared = response.encoding if "charset=" in content_type.lower() else None
    return response.content, declared


def parse_recipe_html(
    html_content: Union[str, bytes],
    source_url: str,
    encoding: Optional[str] = None,
) -> RecipeScrapeResult:
    """Extract a recipe from page HTML, preferring JSON-LD over DOM heuristics."""
    soup = BeautifulSoup(html_content, "html.parser", from_encoding=encoding)
    node = extract_structured_recipe(soup)

    title = first_non_empty((
        lambda: structured_title(node),
        *dom_title_candidates(soup),
    ))
    ingredients = first_non_empty((
        lambda: structured_ingredients(node),
        lambda: dom_ingredients(soup),
    ))
    ingredients = dedupe_preserving_order(ingredients or [])

    if not title:
        raise RecipeScrapeParseError("Unable to determine the recipe title from this page.")
    if not ingredients:
        raise RecipeScrapeParseError("Unable to find any ingredients on this page.")

    return RecipeScrapeResult(title=title, ingredients=ingredients, source_url=source_url)


def scrape_recipe_from_url(source_url: str) -> RecipeScrapeResult:
    """
    Fetch and normalize recipe data from the provided source URL.
    The returned sourceUrl is the canonicalized input, not any redirect target.
    """
    url = canonicalize_url(source_url)
    html_content, encoding = fetch_recipe_html(url)
    return parse_recipe_html(html_content, url, encoding=encoding)
