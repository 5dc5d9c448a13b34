from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional


class ScrapeRequest(BaseModel):
    url: Optional[Any] = None


class SaveRecipeRequest(BaseModel):
    recipe: Optional[Any] = None


class SearchRecipeRequest(BaseModel):
    query: Optional[Any] = None


class RecipeScrapeResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    ingredients: List[str]
    source_url: str = Field(alias="sourceUrl")


class RecipeSavePayload(RecipeScrapeResult):
    pass


class RecipeSearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    ingredients: List[str]
    source_url: str = Field(alias="sourceUrl")
    score: Optional[float] = None


class SaveRecipeResponse(BaseModel):
    id: str


class SearchRecipesResponse(BaseModel):
    results: List[RecipeSearchResult]


class ErrorResponse(BaseModel):
    error: str
