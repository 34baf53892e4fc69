import httpx
import pytest

from conftest import API_BASE_URL, multipart_parts
from essenza_web.app.schemas.recipe import ImageUpload, Ingredient, RecipeDraft
from essenza_web.app.services.page_cache import PageCache
from essenza_web.app.services.recipes_gateway import SAVE_FAILED_MESSAGE, RecipesApiError, RecipesGateway


def _draft(**overrides):
    fields = {
        "title": "Salzkartoffeln",
        "description": "Einfach und gut",
        "duration": "25",
        "instructions": "Kochen.",
        "ingredients": [Ingredient(name="Salt", quantity="1 tsp")],
    }
    fields.update(overrides)
    return RecipeDraft(**fields)


@pytest.mark.asyncio
async def test_create_posts_multipart_without_image(gateway, recipe_api):
    result = await gateway.create_recipe(_draft())

    assert result.success is True
    assert result.data == {"id": 42, "title": "Salzkartoffeln"}
    request = recipe_api.posts[0]
    assert str(request.url) == f"{API_BASE_URL}/api/recipes"
    parts = multipart_parts(request)
    assert [name for name, _, _ in parts] == [
        "title",
        "description",
        "duration",
        "instructions",
        "ingredients[0][name]",
        "ingredients[0][quantity]",
    ]
    values = {name: value for name, _, value in parts}
    assert values["ingredients[0][name]"] == b"Salt"
    assert values["ingredients[0][quantity]"] == b"1 tsp"
    assert "image" not in values


@pytest.mark.asyncio
async def test_create_includes_image_part_and_ingredient_order(gateway, recipe_api):
    image = ImageUpload(filename="teller.png", content_type="image/png", data=b"\x89PNGdata")
    draft = _draft(
        image=image,
        ingredients=[Ingredient(name="Mehl", quantity="1 kg"), Ingredient(name="Wasser", quantity="1 l")],
    )
    await gateway.create_recipe(draft)

    parts = multipart_parts(recipe_api.posts[0])
    image_parts = [p for p in parts if p[0] == "image"]
    assert image_parts == [("image", "teller.png", b"\x89PNGdata")]
    names = [name for name, _, _ in parts if name.startswith("ingredients")]
    assert names == [
        "ingredients[0][name]",
        "ingredients[0][quantity]",
        "ingredients[1][name]",
        "ingredients[1][quantity]",
    ]


@pytest.mark.asyncio
async def test_successful_create_invalidates_listing(gateway, recipe_api, page_cache):
    page_cache.put("/recipes", [{"title": "old"}])
    await gateway.create_recipe(_draft())
    assert page_cache.is_stale("/recipes")


@pytest.mark.asyncio
async def test_server_error_yields_generic_failure(gateway, recipe_api, page_cache):
    recipe_api.create_status = 500
    page_cache.put("/recipes", [{"title": "old"}])

    result = await gateway.create_recipe(_draft())

    assert result.success is False
    assert result.error == SAVE_FAILED_MESSAGE
    assert "database exploded" not in result.error
    assert not page_cache.is_stale("/recipes")
    assert len(recipe_api.posts) == 1


@pytest.mark.asyncio
async def test_network_fault_is_reported_not_raised():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway = RecipesGateway(API_BASE_URL, cache=PageCache(60), transport=httpx.MockTransport(handler))
    result = await gateway.create_recipe(_draft())
    assert result.success is False
    assert result.error == "connection refused"


@pytest.mark.asyncio
async def test_malformed_json_is_reported_not_raised():
    def handler(request):
        return httpx.Response(201, text="not json")

    gateway = RecipesGateway(API_BASE_URL, cache=PageCache(60), transport=httpx.MockTransport(handler))
    result = await gateway.create_recipe(_draft())
    assert result.success is False
    assert result.error


@pytest.mark.asyncio
async def test_listing_is_cached_until_revalidated(gateway, recipe_api):
    first = await gateway.list_recipes()
    second = await gateway.list_recipes()
    assert first == second == recipe_api.recipes
    assert len(recipe_api.gets) == 1

    await gateway.create_recipe(_draft())
    await gateway.list_recipes()
    assert len(recipe_api.gets) == 2


@pytest.mark.asyncio
async def test_listing_error_raises(gateway, recipe_api):
    recipe_api.list_status = 503
    with pytest.raises(RecipesApiError):
        await gateway.list_recipes()
