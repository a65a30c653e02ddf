# creavely/models/recipe.py — Recipe schemas

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from creavely.utils.pagination import PaginationParams


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Recipe(_CamelModel):
    id: str | None = None
    title: str = ""
    description: str = ""
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    prep_time: int = Field(default=0, ge=0)  # minutes
    cook_time: int = Field(default=0, ge=0)  # minutes
    servings: int = 0
    cuisine: str = ""
    dietary_tags: list[str] = Field(default_factory=list)  # e.g. "vegetarian", "gluten-free"
    image_url: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RecipeSearchParams(BaseModel):
    query: str = ""
    ingredients: list[str] = Field(default_factory=list)
    cuisine: str = ""
    dietary_tags: list[str] = Field(default_factory=list)
    max_prep_time: int = 0
    max_cook_time: int = 0
    page: int = 0
    page_size: int = 0


class RecipeResponse(_CamelModel):
    recipes: list[Recipe]
    total_count: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def create(
        cls,
        recipes: list[Recipe],
        total: int,
        pagination: PaginationParams,
    ) -> "RecipeResponse":
        return cls(
            recipes=recipes,
            total_count=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=pagination.total_pages(total),
        )
