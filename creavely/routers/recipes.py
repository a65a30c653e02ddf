# creavely/routers/recipes.py — Recipe CRUD and search endpoints

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse

from creavely.config import Settings
from creavely.database import Database, get_database
from creavely.models.recipe import Recipe, RecipeResponse, RecipeSearchParams
from creavely.routers._responses import ErrorEnvelope, error_response
from creavely.services.recipe_service import RecipeService
from creavely.utils.exceptions import (
    InvalidIDError,
    NotFoundError,
    RecipeServiceError,
)

router = APIRouter()


def get_recipe_service(database: Database = Depends(get_database)) -> RecipeService:
    return RecipeService(database.recipes)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_int(value: str | None) -> int:
    """Unparseable values fall back to 0 so the service defaults apply."""
    if not value:
        return 0
    try:
        return int(value.strip())
    except ValueError:
        return 0


def _write_error_response(exc: RecipeServiceError, settings: Settings) -> JSONResponse:
    if settings.distinguish_write_errors:
        if isinstance(exc, InvalidIDError):
            return error_response(str(exc), status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, NotFoundError):
            return error_response(str(exc), status.HTTP_404_NOT_FOUND)
    return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get(
    "/recipes",
    response_model=RecipeResponse,
    responses={500: {"model": ErrorEnvelope}},
)
def search_recipes(
    query: str | None = Query(default=None),
    ingredients: str | None = Query(default=None),
    cuisine: str | None = Query(default=None),
    dietary_tags: str | None = Query(default=None, alias="dietaryTags"),
    max_prep_time: str | None = Query(default=None, alias="maxPrepTime"),
    max_cook_time: str | None = Query(default=None, alias="maxCookTime"),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    service: RecipeService = Depends(get_recipe_service),
):
    params = RecipeSearchParams(
        query=query or "",
        ingredients=_split_csv(ingredients),
        cuisine=cuisine or "",
        dietary_tags=_split_csv(dietary_tags),
        max_prep_time=_parse_int(max_prep_time),
        max_cook_time=_parse_int(max_cook_time),
        page=_parse_int(page),
        page_size=_parse_int(page_size),
    )
    try:
        return service.search(params)
    except RecipeServiceError as exc:
        return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.post(
    "/recipes",
    response_model=Recipe,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)
def create_recipe(
    payload: Recipe,
    service: RecipeService = Depends(get_recipe_service),
):
    try:
        return service.create(payload)
    except RecipeServiceError as exc:
        return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get(
    "/recipes/{recipe_id}",
    response_model=Recipe,
    responses={404: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)
def get_recipe(
    recipe_id: str,
    service: RecipeService = Depends(get_recipe_service),
):
    try:
        return service.get_by_id(recipe_id)
    except (InvalidIDError, NotFoundError) as exc:
        return error_response(str(exc), status.HTTP_404_NOT_FOUND)
    except RecipeServiceError as exc:
        return error_response(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.put(
    "/recipes/{recipe_id}",
    response_model=Recipe,
    responses={400: {"model": ErrorEnvelope}, 404: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)
def update_recipe(
    recipe_id: str,
    payload: Recipe,
    service: RecipeService = Depends(get_recipe_service),
    settings: Settings = Depends(get_app_settings),
):
    try:
        return service.update(recipe_id, payload)
    except RecipeServiceError as exc:
        return _write_error_response(exc, settings)


@router.delete(
    "/recipes/{recipe_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={400: {"model": ErrorEnvelope}, 404: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)
def delete_recipe(
    recipe_id: str,
    service: RecipeService = Depends(get_recipe_service),
    settings: Settings = Depends(get_app_settings),
):
    try:
        service.delete(recipe_id)
    except RecipeServiceError as exc:
        return _write_error_response(exc, settings)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
