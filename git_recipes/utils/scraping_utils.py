import html
import json
import logging
import re
from typing import Any, Callable, Iterable, List, Optional, Sequence

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

WHITESPACE_RE = re.compile(r"[\s\u00a0]+")
# Single-string ingredient lists are serialized with newlines or wide gaps.
INGREDIENT_SPLIT_RE = re.compile(r"\r?\n|[\s\u00a0]{2,}")
LD_JSON_TYPE_RE = re.compile(r"application/ld\+json", re.IGNORECASE)

# Tried in order; the first selector that yields any text wins.
INGREDIENT_SELECTORS = (
    "[itemprop='recipeIngredient']",
    "[itemprop='ingredients']",
    ".wprm-recipe-ingredient",
    ".tasty-recipes-ingredients li",
    ".mv-create-ingredients li",
    ".recipe-ingredients li",
    ".ingredients li",
    "[class*='ingredient'] li",
)


def normalize_text(value: Optional[str]) -> str:
    """Collapse runs of whitespace (including NBSP) to one space and trim."""
    if not value:
        return ""
    return WHITESPACE_RE.sub(" ", value).strip()


def first_non_empty(candidates: Iterable[Callable[[], Any]]):
    """Evaluate thunks in order and return the first truthy result.

    Later candidates are never called once one succeeds. Returns None when
    every candidate comes back empty.
    """
    for candidate in candidates:
        value = candidate()
        if value:
            return value
    return None


def dedupe_preserving_order(values: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            unique.append(value)
    return unique


def _is_recipe_type(value: Any) -> bool:
    if isinstance(value, list):
        return any(_is_recipe_type(item) for item in value)
    if not isinstance(value, str):
        return False
    # Accept "Recipe", "schema:Recipe" and "https://schema.org/Recipe".
    return re.split(r"[/:#]", value.strip())[-1].lower() == "recipe"


def find_recipe_node(value: Any) -> Optional[dict]:
    """Depth-first search of a JSON-LD value for the first Recipe node."""
    if isinstance(value, list):
        for item in value:
            found = find_recipe_node(item)
            if found is not None:
                return found
        return None

    if not isinstance(value, dict):
        return None

    if _is_recipe_type(value.get("@type")):
        return value

    for key in ("@graph", "mainEntity"):
        nested = value.get(key)
        if nested is not None:
            found = find_recipe_node(nested)
            if found is not None:
                return found
    return None


def load_json_ld_blocks(soup: BeautifulSoup) -> List[Any]:
    blocks = []
    for script in soup.find_all("script", attrs={"type": LD_JSON_TYPE_RE}):
        raw = script.string if script.string is not None else script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            blocks.append(json.loads(raw))
        except ValueError as e:
            logger.debug("Skipping malformed JSON-LD block: %s", e)
    return blocks


def extract_structured_recipe(soup: BeautifulSoup) -> Optional[dict]:
    for block in load_json_ld_blocks(soup):
        node = find_recipe_node(block)
        if node is not None:
            return node
    return None


def _structured_text(value: Any) -> str:
    if isinstance(value, str):
        return normalize_text(html.unescape(value))
    return ""


def structured_title(node: Optional[dict]) -> str:
    if not node:
        return ""
    return first_non_empty((
        lambda: _structured_text(node.get("name")),
        lambda: _structured_text(node.get("headline")),
        lambda: _structured_text(node.get("title")),
    )) or ""


def structured_ingredients(node: Optional[dict]) -> List[str]:
    """Read recipeIngredient (or the legacy ingredients key) from a Recipe node."""
    if not node:
        return []

    raw = node.get("recipeIngredient")
    if raw is None:
        raw = node.get("ingredients")

    if isinstance(raw, str):
        parts = INGREDIENT_SPLIT_RE.split(raw)
        return [text for text in (_structured_text(part) for part in parts) if text]

    if not isinstance(raw, list):
        return []

    ingredients = []
    for entry in raw:
        if isinstance(entry, dict):
            entry = entry.get("item")
        text = _structured_text(entry)
        if text:
            ingredients.append(text)
    return ingredients


def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return normalize_text(tag.get("content"))


def _element_text(element) -> str:
    if element is None:
        return ""
    return normalize_text(element.get_text())


def dom_title_candidates(soup: BeautifulSoup) -> Sequence[Callable[[], str]]:
    return (
        lambda: _meta_content(soup, property="og:title"),
        lambda: _meta_content(soup, name="twitter:title"),
        lambda: _element_text(soup.find(attrs={"itemprop": "name"})),
        lambda: _element_text(soup.find("h1")),
        lambda: _element_text(soup.find("title")),
    )


def dom_ingredients(soup: BeautifulSoup, selectors: Sequence[str] = INGREDIENT_SELECTORS) -> List[str]:
    """Return ingredient text from the first selector that matches anything."""
    for selector in selectors:
        texts = [text for text in (_element_text(el) for el in soup.select(selector)) if text]
        if texts:
            return texts
    return []

