"""
Minimal HTTP client for the Weaviate REST and GraphQL endpoints.
"""
import json
import logging
from typing import Any, List, Optional
from urllib.parse import urljoin

import requests

from git_recipes.config import WEAVIATE_RECIPE_CLASS, get_search_limit, get_weaviate_config
from git_recipes.schemas.schemas import RecipeSavePayload, RecipeSearchResult, SaveRecipeResponse
from git_recipes.utils.tracing import track_external_operation

logger = logging.getLogger(__name__)

_cached_client: Optional["WeaviateClient"] = None


class WeaviateError(Exception):
    """Weaviate request failed; `upstream_message` holds the server's own text when present."""

    def __init__(self, message: str, upstream_message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.upstream_message = upstream_message
        self.status = status


def safe_parse_json(raw: str) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def extract_weaviate_error_message(body: Any) -> Optional[str]:
    """Pull the first human-readable message out of a Weaviate error body."""
    if not isinstance(body, dict):
        return None

    error = body.get("error")
    if isinstance(error, list):
        messages = [
            entry["message"]
            for entry in error
            if isinstance(entry, dict) and isinstance(entry.get("message"), str) and entry["message"]
        ]
        if messages:
            return "; ".join(messages)

    message = body.get("message")
    if isinstance(message, str) and message:
        return message

    if isinstance(error, str) and error:
        return error

    return None


def escape_graphql_string(value: str) -> str:
    """Escape a value for use inside a double-quoted GraphQL string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return "".join(ch if ord(ch) >= 0x20 else "\\u%04x" % ord(ch) for ch in escaped)


def build_search_query(query: str, limit: int) -> str:
    return (
        "{ Get { %s(hybrid: {query: \"%s\"}, limit: %d) "
        "{ title ingredients sourceUrl _additional { id score } } } }"
        % (WEAVIATE_RECIPE_CLASS, escape_graphql_string(query), limit)
    )


def _coerce_score(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class WeaviateClient:
    def __init__(self, base_url: str, api_key: str, session: Optional[requests.Session] = None):
        self.objects_endpoint = urljoin(base_url, "/v1/objects")
        self.graphql_endpoint = urljoin(base_url, "/v1/graphql")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        })

    def _post(self, endpoint: str, body: dict) -> requests.Response:
        try:
            return self.session.post(endpoint, data=json.dumps(body))
        except requests.RequestException as e:
            logger.warning("Weaviate request to %s failed: %s", endpoint, e)
            raise WeaviateError(f"Unable to reach Weaviate: {e}")

    def save_recipe(self, payload: RecipeSavePayload) -> SaveRecipeResponse:
        """Persist a recipe object and return the identifier Weaviate assigned."""
        body = {
            "class": WEAVIATE_RECIPE_CLASS,
            "properties": payload.model_dump(by_alias=True),
        }

        def execute() -> SaveRecipeResponse:
            response = self._post(self.objects_endpoint, body)
            parsed = safe_parse_json(response.text)

            if not response.ok:
                upstream = extract_weaviate_error_message(parsed) or response.text or None
                logger.warning("Weaviate save failed with %s: %s", response.status_code, upstream)
                raise WeaviateError(
                    f"Failed to save recipe to Weaviate: {response.status_code} {response.reason}"
                    + (f" - {upstream}" if upstream else ""),
                    upstream_message=upstream,
                    status=response.status_code,
                )

            object_id = parsed.get("id") if isinstance(parsed, dict) else None
            if not isinstance(object_id, str) or not object_id:
                raise WeaviateError("Weaviate response missing object id after save operation.")

            return SaveRecipeResponse(id=object_id)

        return track_external_operation(
            "weaviate.save",
            execute,
            input={"title": payload.title, "sourceUrl": payload.source_url},
            tags=["weaviate", "save"],
        )

    def search_recipes(self, query: str, limit: Optional[int] = None) -> List[RecipeSearchResult]:
        """Run a hybrid text query; blank queries return [] without a request."""
        query = (query or "").strip()
        if not query:
            return []

        limit = limit or get_search_limit()
        graphql = build_search_query(query, limit)

        def execute() -> List[RecipeSearchResult]:
            response = self._post(self.graphql_endpoint, {"query": graphql})
            parsed = safe_parse_json(response.text)

            if not response.ok:
                upstream = extract_weaviate_error_message(parsed) or response.text or None
                logger.warning("Weaviate search failed with %s: %s", response.status_code, upstream)
                raise WeaviateError(
                    f"Failed to search recipes in Weaviate: {response.status_code} {response.reason}"
                    + (f" - {upstream}" if upstream else ""),
                    upstream_message=upstream,
                    status=response.status_code,
                )

            if not isinstance(parsed, dict):
                raise WeaviateError("Weaviate returned a malformed search response.")

            errors = parsed.get("errors")
            if errors:
                messages = [
                    entry.get("message") for entry in errors
                    if isinstance(entry, dict) and isinstance(entry.get("message"), str)
                ] if isinstance(errors, list) else []
                upstream = "; ".join(messages) or "Unknown GraphQL error"
                logger.warning("Weaviate GraphQL errors: %s", upstream)
                raise WeaviateError(f"Weaviate search query failed: {upstream}", upstream_message=upstream)

            hits = ((parsed.get("data") or {}).get("Get") or {}).get(WEAVIATE_RECIPE_CLASS)
            if not isinstance(hits, list):
                return []

            results = []
            for hit in hits:
                if not isinstance(hit, dict):
                    continue
                additional = hit.get("_additional") or {}
                object_id = additional.get("id")
                if not isinstance(object_id, str) or not object_id:
                    continue
                ingredients = hit.get("ingredients")
                results.append(RecipeSearchResult(
                    id=object_id,
                    title=hit.get("title") or "",
                    ingredients=[i for i in ingredients if isinstance(i, str)] if isinstance(ingredients, list) else [],
                    source_url=hit.get("sourceUrl") or "",
                    score=_coerce_score(additional.get("score")),
                ))
            return results

        return track_external_operation(
            "weaviate.search",
            execute,
            input={"query": query, "limit": limit},
            tags=["weaviate", "search"],
        )


def get_weaviate_client() -> WeaviateClient:
    """Lazily instantiate and cache a Weaviate client from the environment."""
    global _cached_client
    if _cached_client is None:
        config = get_weaviate_config()
        _cached_client = WeaviateClient(config.url, config.api_key)
    return _cached_client


def reset_weaviate_client_for_testing() -> None:
    global _cached_client
    _cached_client = None
