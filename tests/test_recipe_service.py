from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from pymongo.errors import PyMongoError

from creavely.models.recipe import Recipe, RecipeSearchParams
from creavely.services import recipe_service
from creavely.services.recipe_service import RecipeService, build_search_filter
from creavely.utils.exceptions import InvalidIDError, NotFoundError, StoreError


def _service() -> RecipeService:
    return RecipeService(mongomock.MongoClient()["creavely_test"]["recipes"])


def _install_clock(monkeypatch: pytest.MonkeyPatch) -> list[datetime]:
    issued: list[datetime] = []
    start = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def _tick() -> datetime:
        value = start + timedelta(minutes=len(issued))
        issued.append(value)
        return value

    monkeypatch.setattr(recipe_service, "_now_utc", _tick)
    return issued


def _recipe(title: str, **overrides) -> Recipe:
    fields = {
        "title": title,
        "description": f"{title} description",
        "ingredients": ["salt"],
        "instructions": ["mix", "bake"],
        "prep_time": 10,
        "cook_time": 20,
        "servings": 2,
        "cuisine": "italian",
        "dietary_tags": [],
        "image_url": "",
    }
    fields.update(overrides)
    return Recipe(**fields)


class _FailingCollection:
    def _fail(self, *_args, **_kwargs):
        raise PyMongoError("connection reset")

    find_one = _fail
    count_documents = _fail
    find = _fail
    insert_one = _fail
    find_one_and_update = _fail
    delete_one = _fail


def test_create_assigns_id_and_equal_timestamps():
    service = _service()

    created = service.create(_recipe("Pancakes", id="ignored"))

    assert created.id
    assert created.id != "ignored"
    assert len(created.id) == 24
    assert created.created_at is not None
    assert created.created_at == created.updated_at


def test_create_then_get_round_trips_content():
    service = _service()
    original = _recipe(
        "Shakshuka",
        ingredients=["egg", "tomato"],
        dietary_tags=["vegetarian"],
        image_url="https://img.example/shakshuka.jpg",
    )

    created = service.create(original)
    fetched = service.get_by_id(created.id)

    assert fetched == created
    content_fields = {"id", "created_at", "updated_at"}
    assert fetched.model_dump(exclude=content_fields) == original.model_dump(exclude=content_fields)


def test_get_unknown_id_raises_not_found():
    service = _service()

    with pytest.raises(NotFoundError):
        service.get_by_id("65f000000000000000000000")


@pytest.mark.parametrize("bad_id", ["not-an-id", "", "123", "zzzzzzzzzzzzzzzzzzzzzzzz"])
def test_malformed_ids_raise_invalid_id(bad_id: str):
    service = _service()

    with pytest.raises(InvalidIDError):
        service.get_by_id(bad_id)
    with pytest.raises(InvalidIDError):
        service.update(bad_id, _recipe("x"))
    with pytest.raises(InvalidIDError):
        service.delete(bad_id)


def test_update_replaces_fields_keeps_id_and_advances_updated_at(monkeypatch: pytest.MonkeyPatch):
    _install_clock(monkeypatch)
    service = _service()
    created = service.create(_recipe("Soup", ingredients=["leek", "potato"], dietary_tags=["vegan"]))

    replacement = _recipe("Better Soup", id="65f000000000000000000000", ingredients=["leek"], dietary_tags=[])
    updated = service.update(created.id, replacement)

    assert updated.id == created.id
    assert updated.title == "Better Soup"
    assert updated.ingredients == ["leek"]
    assert updated.dietary_tags == []
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at
    assert service.get_by_id(created.id) == updated


def test_update_unknown_id_raises_not_found():
    service = _service()

    with pytest.raises(NotFoundError):
        service.update("65f000000000000000000000", _recipe("Ghost"))


def test_delete_twice_raises_not_found_second_time():
    service = _service()
    created = service.create(_recipe("Toast"))

    service.delete(created.id)

    with pytest.raises(NotFoundError):
        service.delete(created.id)
    with pytest.raises(NotFoundError):
        service.get_by_id(created.id)


def test_search_without_params_returns_newest_first_with_default_paging(monkeypatch: pytest.MonkeyPatch):
    _install_clock(monkeypatch)
    service = _service()
    for index in range(13):
        service.create(_recipe(f"Recipe {index}"))

    response = service.search(RecipeSearchParams())

    assert response.total_count == 13
    assert response.page == 1
    assert response.page_size == 10
    assert response.total_pages == math.ceil(13 / 10)
    assert [recipe.title for recipe in response.recipes] == [f"Recipe {index}" for index in range(12, 2, -1)]


def test_search_second_page_returns_remaining_window(monkeypatch: pytest.MonkeyPatch):
    _install_clock(monkeypatch)
    service = _service()
    for index in range(7):
        service.create(_recipe(f"Recipe {index}"))

    response = service.search(RecipeSearchParams(page=2, page_size=3))

    assert response.total_count == 7
    assert response.total_pages == 3
    assert [recipe.title for recipe in response.recipes] == ["Recipe 3", "Recipe 2", "Recipe 1"]


def test_search_normalizes_non_positive_paging():
    service = _service()
    service.create(_recipe("Only"))

    response = service.search(RecipeSearchParams(page=-4, page_size=0))

    assert response.page == 1
    assert response.page_size == 10
    assert response.total_pages == 1


def test_search_empty_store_has_zero_pages():
    response = _service().search(RecipeSearchParams())

    assert response.recipes == []
    assert response.total_count == 0
    assert response.total_pages == 0


def test_search_max_prep_time_is_a_ceiling():
    service = _service()
    service.create(_recipe("Quick", prep_time=15))
    service.create(_recipe("Exact", prep_time=30))
    service.create(_recipe("Slow", prep_time=45))

    response = service.search(RecipeSearchParams(max_prep_time=30))

    assert sorted(recipe.title for recipe in response.recipes) == ["Exact", "Quick"]
    assert all(recipe.prep_time <= 30 for recipe in response.recipes)


def test_search_max_cook_time_is_a_ceiling():
    service = _service()
    service.create(_recipe("Raw", cook_time=0))
    service.create(_recipe("Roast", cook_time=90))

    response = service.search(RecipeSearchParams(max_cook_time=60))

    assert [recipe.title for recipe in response.recipes] == ["Raw"]


def test_search_ingredients_require_all_values():
    service = _service()
    service.create(_recipe("Crepes", ingredients=["egg", "flour", "milk"]))
    service.create(_recipe("Omelette", ingredients=["egg", "butter"]))
    service.create(_recipe("Flatbread", ingredients=["flour", "water"]))

    response = service.search(RecipeSearchParams(ingredients=["egg", "flour"]))

    assert [recipe.title for recipe in response.recipes] == ["Crepes"]


def test_search_dietary_tags_require_all_values():
    service = _service()
    service.create(_recipe("Salad", dietary_tags=["vegan", "gluten-free"]))
    service.create(_recipe("Pasta", dietary_tags=["vegan"]))

    response = service.search(RecipeSearchParams(dietary_tags=["vegan", "gluten-free"]))

    assert [recipe.title for recipe in response.recipes] == ["Salad"]


def test_search_query_matches_title_or_description_case_insensitively():
    service = _service()
    service.create(_recipe("Lemon Tart", description="sweet"))
    service.create(_recipe("Fish", description="with a LEMON butter sauce"))
    service.create(_recipe("Bread", description="plain"))

    response = service.search(RecipeSearchParams(query="lemon"))

    assert sorted(recipe.title for recipe in response.recipes) == ["Fish", "Lemon Tart"]


def test_search_query_is_matched_literally():
    service = _service()
    service.create(_recipe("Mac (and) cheese"))
    service.create(_recipe("Mac and cheese"))

    response = service.search(RecipeSearchParams(query="(and)"))

    assert [recipe.title for recipe in response.recipes] == ["Mac (and) cheese"]


def test_search_cuisine_is_exact_and_combines_with_other_filters():
    service = _service()
    service.create(_recipe("Carbonara", cuisine="italian", prep_time=10))
    service.create(_recipe("Lasagne", cuisine="italian", prep_time=60))
    service.create(_recipe("Ramen", cuisine="japanese", prep_time=10))

    response = service.search(RecipeSearchParams(cuisine="italian", max_prep_time=20))

    assert [recipe.title for recipe in response.recipes] == ["Carbonara"]


def test_build_search_filter_skips_blank_values():
    params = RecipeSearchParams(query="  ", ingredients=["", " "], cuisine="", dietary_tags=[""])

    assert build_search_filter(params) == {}


def test_build_search_filter_single_and_multiple_clauses():
    assert build_search_filter(RecipeSearchParams(cuisine="thai")) == {"cuisine": "thai"}

    combined = build_search_filter(RecipeSearchParams(ingredients=["egg"], max_prep_time=30))
    assert combined == {
        "$and": [
            {"ingredients": {"$all": ["egg"]}},
            {"prepTime": {"$lte": 30}},
        ]
    }


def test_store_failures_surface_as_store_error():
    service = RecipeService(_FailingCollection())
    valid_id = "65f000000000000000000000"

    with pytest.raises(StoreError):
        service.get_by_id(valid_id)
    with pytest.raises(StoreError):
        service.search(RecipeSearchParams())
    with pytest.raises(StoreError):
        service.create(_recipe("x"))
    with pytest.raises(StoreError):
        service.update(valid_id, _recipe("x"))
    with pytest.raises(StoreError):
        service.delete(valid_id)


def test_immediate_updates_always_advance_updated_at():
    service = _service()

    for index in range(50):
        created = service.create(_recipe(f"Draft {index}"))
        first = service.update(created.id, _recipe(f"Edit {index}"))
        second = service.update(created.id, _recipe(f"Re-edit {index}"))

        assert first.updated_at > created.updated_at
        assert second.updated_at > first.updated_at
        assert second.created_at == created.created_at
