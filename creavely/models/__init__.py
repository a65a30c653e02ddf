# creavely/models/__init__.py — Recipe schemas

from creavely.models.recipe import Recipe, RecipeResponse, RecipeSearchParams

__all__ = [
    "Recipe",
    "RecipeResponse",
    "RecipeSearchParams",
]
