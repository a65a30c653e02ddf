from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from creavely.models.recipe import Recipe, RecipeResponse, RecipeSearchParams
from creavely.utils.exceptions import InvalidIDError, NotFoundError, StoreError
from creavely.utils.pagination import PaginationParams

logger = logging.getLogger(__name__)

# Content fields written on create and overwritten on update.
_CONTENT_FIELDS = (
    "title",
    "description",
    "ingredients",
    "instructions",
    "prepTime",
    "cookTime",
    "servings",
    "cuisine",
    "dietaryTags",
    "imageUrl",
)


def _now_utc() -> datetime:
    # MongoDB keeps millisecond precision.
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _next_updated_at(previous: datetime | None) -> datetime:
    """Always later than the stored value, even within the same millisecond."""
    now = _now_utc()
    if previous is None or now > previous:
        return now
    return previous + timedelta(milliseconds=1)


def _parse_object_id(recipe_id: str) -> ObjectId:
    if not isinstance(recipe_id, str) or not ObjectId.is_valid(recipe_id):
        raise InvalidIDError(str(recipe_id))
    return ObjectId(recipe_id)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _clean_values(values: list[str]) -> list[str]:
    return [value.strip() for value in values if value and value.strip()]


def _content_document(recipe: Recipe) -> dict[str, Any]:
    dumped = recipe.model_dump(by_alias=True)
    return {field: dumped[field] for field in _CONTENT_FIELDS}


def _recipe_from_document(document: dict[str, Any]) -> Recipe:
    payload = {field: document[field] for field in _CONTENT_FIELDS if document.get(field) is not None}
    return Recipe(
        id=str(document["_id"]),
        created_at=_as_utc(document.get("createdAt")),
        updated_at=_as_utc(document.get("updatedAt")),
        **payload,
    )


def build_search_filter(params: RecipeSearchParams) -> dict[str, Any]:
    """
    Translate search parameters into a store filter.
    Blank values are treated as not specified; list filters require every value.
    """
    clauses: list[dict[str, Any]] = []

    query = params.query.strip()
    if query:
        pattern = re.escape(query)
        clauses.append(
            {
                "$or": [
                    {"title": {"$regex": pattern, "$options": "i"}},
                    {"description": {"$regex": pattern, "$options": "i"}},
                ]
            }
        )

    ingredients = _clean_values(params.ingredients)
    if ingredients:
        clauses.append({"ingredients": {"$all": ingredients}})

    cuisine = params.cuisine.strip()
    if cuisine:
        clauses.append({"cuisine": cuisine})

    dietary_tags = _clean_values(params.dietary_tags)
    if dietary_tags:
        clauses.append({"dietaryTags": {"$all": dietary_tags}})

    if params.max_prep_time > 0:
        clauses.append({"prepTime": {"$lte": params.max_prep_time}})

    if params.max_cook_time > 0:
        clauses.append({"cookTime": {"$lte": params.max_cook_time}})

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


class RecipeService:
    """CRUD and search over the recipes collection."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def get_by_id(self, recipe_id: str) -> Recipe:
        object_id = _parse_object_id(recipe_id)
        try:
            document = self.collection.find_one({"_id": object_id})
        except PyMongoError as exc:
            logger.exception("Recipe lookup failed", extra={"recipe_id": recipe_id})
            raise StoreError(str(exc)) from exc

        if document is None:
            raise NotFoundError(recipe_id)
        return _recipe_from_document(document)

    def search(self, params: RecipeSearchParams) -> RecipeResponse:
        search_filter = build_search_filter(params)
        pagination = PaginationParams.normalized(params.page, params.page_size)

        try:
            total = self.collection.count_documents(search_filter)
            cursor = (
                self.collection.find(search_filter)
                .sort("createdAt", DESCENDING)
                .skip(pagination.offset)
                .limit(pagination.limit)
            )
            recipes = [_recipe_from_document(document) for document in cursor]
        except PyMongoError as exc:
            logger.exception("Recipe search failed", extra={"filter": search_filter})
            raise StoreError(str(exc)) from exc

        logger.debug(
            "Recipe search",
            extra={"filter": search_filter, "total": total, "page": pagination.page},
        )
        return RecipeResponse.create(recipes, total, pagination)

    def create(self, recipe: Recipe) -> Recipe:
        now = _now_utc()
        document = _content_document(recipe)
        document["createdAt"] = now
        document["updatedAt"] = now

        try:
            result = self.collection.insert_one(document)
        except PyMongoError as exc:
            logger.exception("Recipe insert failed")
            raise StoreError(str(exc)) from exc

        created = recipe.model_copy(
            update={"id": str(result.inserted_id), "created_at": now, "updated_at": now}
        )
        logger.debug("Recipe created", extra={"recipe_id": created.id})
        return created

    def update(self, recipe_id: str, recipe: Recipe) -> Recipe:
        """
        Overwrite every content field of the stored recipe.
        The identifier comes from the caller; any id in the payload is ignored.
        """
        object_id = _parse_object_id(recipe_id)
        changes = _content_document(recipe)

        try:
            current = self.collection.find_one({"_id": object_id}, {"updatedAt": 1})
            if current is None:
                raise NotFoundError(recipe_id)
            changes["updatedAt"] = _next_updated_at(_as_utc(current.get("updatedAt")))
            document = self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            logger.exception("Recipe update failed", extra={"recipe_id": recipe_id})
            raise StoreError(str(exc)) from exc

        if document is None:
            raise NotFoundError(recipe_id)
        logger.debug("Recipe updated", extra={"recipe_id": recipe_id})
        return _recipe_from_document(document)

    def delete(self, recipe_id: str) -> None:
        object_id = _parse_object_id(recipe_id)
        try:
            result = self.collection.delete_one({"_id": object_id})
        except PyMongoError as exc:
            logger.exception("Recipe delete failed", extra={"recipe_id": recipe_id})
            raise StoreError(str(exc)) from exc

        if result.deleted_count == 0:
            raise NotFoundError(recipe_id)
        logger.debug("Recipe deleted", extra={"recipe_id": recipe_id})
