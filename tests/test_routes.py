"""
Tests for the /api/recipes routes.

The scraper and Weaviate client are patched at the routes module so these
tests only cover request validation and error-to-status mapping.
"""
from unittest.mock import MagicMock, patch

import pytest

from git_recipes.config import ConfigError
from git_recipes.schemas.schemas import RecipeScrapeResult, RecipeSearchResult, SaveRecipeResponse
from git_recipes.utils.scraper import RecipeScrapeParseError, RecipeScrapeRequestError
from git_recipes.utils.weaviate_client import WeaviateError

RECIPE = {
    "title": "Unit Test Recipe",
    "ingredients": ["1 tsp salt"],
    "sourceUrl": "https://example.com",
}


@pytest.fixture
def store():
    store = MagicMock()
    with patch("git_recipes.api.routes.get_weaviate_client", return_value=store):
        yield store


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestScrapeRoute:

    def test_invalid_json(self, client):
        response = client.post(
            "/api/recipes/scrape", content="{ invalid", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert "Invalid JSON" in response.json()["error"]

    @pytest.mark.parametrize("body", [{}, {"url": ""}, {"url": "   "}, {"url": 42}])
    def test_missing_url(self, client, body):
        response = client.post("/api/recipes/scrape", json=body)
        assert response.status_code == 400
        assert "url" in response.json()["error"]

    def test_success(self, client):
        result = RecipeScrapeResult(title="Soup", ingredients=["water"], source_url="https://example.com/soup")
        with patch("git_recipes.api.routes.scrape_recipe_from_url", return_value=result) as scrape:
            response = client.post("/api/recipes/scrape", json={"url": " https://example.com/soup "})

        scrape.assert_called_once_with("https://example.com/soup")
        assert response.status_code == 200
        assert response.json() == {
            "title": "Soup",
            "ingredients": ["water"],
            "sourceUrl": "https://example.com/soup",
        }

    @pytest.mark.parametrize("error,status", [
        (RecipeScrapeRequestError("Please provide a valid http(s) recipe URL.", status=400), 400),
        (RecipeScrapeRequestError("The recipe page responded with status 404.", status=404), 404),
        (RecipeScrapeRequestError("Unable to fetch the recipe page.", status=502), 502),
        (RecipeScrapeParseError("Unable to find any ingredients on this page."), 422),
    ])
    def test_scrape_errors_keep_status_and_message(self, client, error, status):
        with patch("git_recipes.api.routes.scrape_recipe_from_url", side_effect=error):
            response = client.post("/api/recipes/scrape", json={"url": "https://example.com/x"})

        assert response.status_code == status
        assert response.json() == {"error": error.message}

    def test_unexpected_error_is_500(self, client):
        with patch("git_recipes.api.routes.scrape_recipe_from_url", side_effect=RuntimeError("boom")):
            response = client.post("/api/recipes/scrape", json={"url": "https://example.com/x"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to scrape recipe."}


class TestSaveRoute:

    def test_invalid_json(self, client):
        response = client.post(
            "/api/recipes/save", content="{ invalid", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert "Invalid JSON" in response.json()["error"]

    def test_missing_recipe(self, client):
        response = client.post("/api/recipes/save", json={})
        assert response.status_code == 400
        assert "recipe" in response.json()["error"]

    @pytest.mark.parametrize("recipe", [
        {**RECIPE, "title": "  "},
        {**RECIPE, "ingredients": "salt"},
        {**RECIPE, "sourceUrl": None},
    ])
    def test_incomplete_recipe(self, client, recipe):
        response = client.post("/api/recipes/save", json={"recipe": recipe})
        assert response.status_code == 400
        assert "non-empty title" in response.json()["error"]

    def test_non_string_ingredient(self, client):
        response = client.post("/api/recipes/save", json={"recipe": {**RECIPE, "ingredients": ["salt", 3]}})
        assert response.status_code == 400
        assert response.json() == {"error": "All ingredients must be strings."}

    def test_success_trims_fields(self, client, store):
        store.save_recipe.return_value = SaveRecipeResponse(id="abcd-1234")

        response = client.post("/api/recipes/save", json={"recipe": {
            "title": "  Unit Test Recipe ",
            "ingredients": [" 1 tsp salt "],
            "sourceUrl": " https://example.com ",
        }})

        assert response.status_code == 200
        assert response.json() == {"id": "abcd-1234"}
        saved = store.save_recipe.call_args.args[0]
        assert saved.model_dump(by_alias=True) == RECIPE

    def test_store_error_message_is_surfaced(self, client, store):
        store.save_recipe.side_effect = WeaviateError("Failed to save", upstream_message="Vectorizer offline")

        response = client.post("/api/recipes/save", json={"recipe": RECIPE})

        assert response.status_code == 502
        assert response.json() == {"error": "Vectorizer offline"}

    def test_missing_configuration_is_502(self, client):
        with patch("git_recipes.api.routes.get_weaviate_client", side_effect=ConfigError(["WEAVIATE_URL"])):
            response = client.post("/api/recipes/save", json={"recipe": RECIPE})

        assert response.status_code == 502
        assert response.json() == {"error": "Failed to save recipe. Please try again."}


class TestSearchRoute:

    def test_invalid_json(self, client):
        response = client.post(
            "/api/recipes/search", content="{ invalid", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert "Invalid JSON" in response.json()["error"]

    @pytest.mark.parametrize("body", [{}, {"query": "   "}])
    def test_missing_query(self, client, store, body):
        response = client.post("/api/recipes/search", json=body)

        assert response.status_code == 400
        assert "query" in response.json()["error"]
        store.search_recipes.assert_not_called()

    def test_returns_results(self, client, store):
        store.search_recipes.return_value = [
            RecipeSearchResult(
                id="recipe-1",
                title="Test Recipe",
                ingredients=["flour", "sugar"],
                source_url="https://example.com/recipe",
                score=0.9,
            ),
            RecipeSearchResult(id="recipe-2", title="Unscored", ingredients=[], source_url="https://example.com/2"),
        ]

        response = client.post("/api/recipes/search", json={"query": " cake "})

        store.search_recipes.assert_called_once_with("cake")
        assert response.status_code == 200
        assert response.json() == {"results": [
            {
                "id": "recipe-1",
                "title": "Test Recipe",
                "ingredients": ["flour", "sugar"],
                "sourceUrl": "https://example.com/recipe",
                "score": 0.9,
            },
            {"id": "recipe-2", "title": "Unscored", "ingredients": [], "sourceUrl": "https://example.com/2"},
        ]}

    def test_store_failure_uses_generic_message(self, client, store):
        store.search_recipes.side_effect = RuntimeError("socket closed")

        response = client.post("/api/recipes/search", json={"query": "cake"})

        assert response.status_code == 502
        assert response.json() == {"error": "Failed to search recipes. Please try again."}
