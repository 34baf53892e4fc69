import re

import httpx
import pytest
from fastapi.testclient import TestClient

from essenza_web.app.api.deps import get_recipes_gateway
from essenza_web.app.main import create_app
from essenza_web.app.services.page_cache import PageCache
from essenza_web.app.services.recipes_gateway import RecipesGateway

API_BASE_URL = "http://recipes.test"


class RecipeApiStub:
    """In-process stand-in for the external recipe API."""

    def __init__(self):
        self.requests = []
        self.create_status = 201
        self.create_body = {"id": 42, "title": "Salzkartoffeln"}
        self.list_status = 200
        self.recipes = [{"id": 1, "title": "Pasta", "description": "Lecker", "duration": "20"}]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            if self.create_status >= 400:
                return httpx.Response(self.create_status, text="database exploded")
            return httpx.Response(self.create_status, json=self.create_body)
        return httpx.Response(self.list_status, json=self.recipes)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def posts(self):
        return [r for r in self.requests if r.method == "POST"]

    @property
    def gets(self):
        return [r for r in self.requests if r.method == "GET"]


def multipart_parts(request: httpx.Request):
    """Split a multipart request body into ordered (name, filename, value) tuples."""
    content_type = request.headers["content-type"]
    assert content_type.startswith("multipart/form-data")
    boundary = content_type.split("boundary=")[1].encode()
    parts = []
    for chunk in request.content.split(b"--" + boundary):
        chunk = chunk.strip(b"\r\n")
        if not chunk or chunk == b"--":
            continue
        head, _, body = chunk.partition(b"\r\n\r\n")
        name = re.search(rb'name="([^"]*)"', head).group(1).decode()
        filename = re.search(rb'filename="([^"]*)"', head)
        parts.append((name, filename.group(1).decode() if filename else None, body))
    return parts


@pytest.fixture
def recipe_api():
    return RecipeApiStub()


@pytest.fixture
def page_cache():
    return PageCache(ttl_seconds=60)


@pytest.fixture
def gateway(recipe_api, page_cache):
    return RecipesGateway(API_BASE_URL, cache=page_cache, transport=recipe_api.transport)


@pytest.fixture
def app(gateway):
    app = create_app()
    app.dependency_overrides[get_recipes_gateway] = lambda: gateway
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
