import logging

from fastapi import APIRouter, HTTPException

from git_recipes.schemas.schemas import (
    RecipeScrapeResult,
    SaveRecipeRequest,
    SaveRecipeResponse,
    ScrapeRequest,
    SearchRecipeRequest,
    SearchRecipesResponse,
)
from git_recipes.utils.scraper import RecipeScrapeError, scrape_recipe_from_url
from git_recipes.utils.validation import RecipePayloadError, validate_recipe_payload
from git_recipes.utils.weaviate_client import WeaviateError, get_weaviate_client

logger = logging.getLogger(__name__)

router = APIRouter()


def _store_error_message(error: Exception, fallback: str) -> str:
    if isinstance(error, WeaviateError) and error.upstream_message:
        return error.upstream_message
    return fallback


@router.post("/api/recipes/scrape", response_model=RecipeScrapeResult)
def scrape_recipe(payload: ScrapeRequest):
    """
    Scrape a recipe page into a title, ingredient list and source URL.
    """
    url = payload.url.strip() if isinstance(payload.url, str) else ""
    if not url:
        raise HTTPException(status_code=400, detail="The `url` field is required.")

    try:
        return scrape_recipe_from_url(url)
    except RecipeScrapeError as e:
        raise HTTPException(status_code=e.status, detail=e.message)
    except Exception:
        logger.exception("Failed to scrape recipe from %s", url)
        raise HTTPException(status_code=500, detail="Failed to scrape recipe.")


@router.post("/api/recipes/save", response_model=SaveRecipeResponse)
def save_recipe(payload: SaveRecipeRequest):
    try:
        recipe = validate_recipe_payload(payload.recipe)
    except RecipePayloadError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return get_weaviate_client().save_recipe(recipe)
    except Exception as e:
        logger.exception("Failed to save recipe to Weaviate")
        raise HTTPException(
            status_code=502,
            detail=_store_error_message(e, "Failed to save recipe. Please try again."),
        )


@router.post("/api/recipes/search", response_model=SearchRecipesResponse, response_model_exclude_none=True)
def search_recipes(payload: SearchRecipeRequest):
    query = payload.query.strip() if isinstance(payload.query, str) else ""
    if not query:
        raise HTTPException(status_code=400, detail="The `query` field is required.")

    try:
        results = get_weaviate_client().search_recipes(query)
    except Exception as e:
        logger.exception("Failed to search recipes in Weaviate")
        raise HTTPException(
            status_code=502,
            detail=_store_error_message(e, "Failed to search recipes. Please try again."),
        )
    return SearchRecipesResponse(results=results)


@router.get("/health")
async def health_check():
    return {"status": "healthy"}
