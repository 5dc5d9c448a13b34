from typing import Any

from git_recipes.schemas.schemas import RecipeSavePayload


class RecipePayloadError(ValueError):
    pass


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def validate_recipe_payload(value: Any) -> RecipeSavePayload:
    """
    Validate and coerce an arbitrary value into a recipe save payload.
    Strings are trimmed; every ingredient must be a non-empty string.
    """
    if not isinstance(value, dict):
        raise RecipePayloadError(
            "The `recipe` field must be an object containing title, ingredients, and sourceUrl."
        )

    title = value.get("title")
    ingredients = value.get("ingredients")
    source_url = value.get("sourceUrl")

    if not is_non_empty_string(title) or not isinstance(ingredients, list) or not is_non_empty_string(source_url):
        raise RecipePayloadError(
            "The `recipe` field must include non-empty title, ingredients[], and sourceUrl values."
        )

    if not all(is_non_empty_string(ingredient) for ingredient in ingredients):
        raise RecipePayloadError("All ingredients must be strings.")

    return RecipeSavePayload(
        title=title.strip(),
        ingredients=[ingredient.strip() for ingredient in ingredients],
        source_url=source_url.strip(),
    )
