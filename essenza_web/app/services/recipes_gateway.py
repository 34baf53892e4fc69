"""
Client for the external recipe API.

Creating a recipe is a single multipart POST to ``/api/recipes``. The result
is always reported as a ``SubmissionResult``: faults are converted into a
failed result instead of being raised, so the form never sees an unhandled
exception from here. A successful create marks the cached listing stale.
"""
import logging
from typing import Any, List, Optional

import httpx

from essenza_web.app.schemas.recipe import RecipeDraft, SubmissionResult
from essenza_web.app.services.page_cache import RECIPES_PATH, PageCache
from essenza_web.app.services.recipe_payload import encode_draft

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Fehler beim Speichern"
RECIPES_ENDPOINT = "/api/recipes"


class RecipesApiError(Exception):
    """Raised when the recipe listing cannot be fetched from the API."""
    pass


class RecipesGateway:
    def __init__(
        self,
        base_url: str,
        *,
        cache: PageCache,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache = cache
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def recipes_url(self) -> str:
        return f"{self.base_url}{RECIPES_ENDPOINT}"

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(self.timeout_seconds, connect=min(self.timeout_seconds, 5.0))
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def create_recipe(self, draft: RecipeDraft) -> SubmissionResult:
        """Forward a draft to the API. One attempt, no retries."""
        try:
            async with self._client() as client:
                resp = await client.post(self.recipes_url, files=encode_draft(draft))

            if not resp.is_success:
                logger.warning(
                    "Recipe API rejected create: status=%s, body=%s",
                    resp.status_code,
                    resp.text[:500],
                )
                return SubmissionResult.fail(SAVE_FAILED_MESSAGE)

            data = resp.json()
        except httpx.TimeoutException:
            logger.warning("Recipe API create timed out after %ss", self.timeout_seconds)
            return SubmissionResult.fail(SAVE_FAILED_MESSAGE)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Recipe API create failed: %s", exc)
            return SubmissionResult.fail(str(exc) or SAVE_FAILED_MESSAGE)

        self.cache.revalidate_path(RECIPES_PATH)
        logger.info("Created recipe %r with %d ingredients", draft.title, len(draft.ingredients))
        return SubmissionResult.ok(data)

    async def list_recipes(self) -> List[Any]:
        cached = self.cache.get(RECIPES_PATH)
        if cached is not None:
            return cached

        try:
            async with self._client() as client:
                resp = await client.get(self.recipes_url)
        except httpx.HTTPError as exc:
            logger.warning("Recipe API listing request failed: %s", exc)
            raise RecipesApiError(f"Recipe API unreachable: {exc}") from exc

        if not resp.is_success:
            logger.warning("Recipe API listing returned status=%s", resp.status_code)
            raise RecipesApiError(f"Recipe API error: {resp.status_code}")

        try:
            recipes = resp.json()
        except ValueError as exc:
            raise RecipesApiError("Recipe API returned malformed JSON") from exc
        if not isinstance(recipes, list):
            raise RecipesApiError("Recipe API returned an unexpected listing payload")

        self.cache.put(RECIPES_PATH, recipes)
        return recipes
