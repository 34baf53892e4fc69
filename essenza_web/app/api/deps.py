from pathlib import Path

from fastapi.templating import Jinja2Templates

from essenza_web.app.core.config import get_settings
from essenza_web.app.services.page_cache import get_page_cache
from essenza_web.app.services.recipes_gateway import RecipesGateway

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def get_recipes_gateway() -> RecipesGateway:
    settings = get_settings()
    return RecipesGateway(
        settings.recipes_api_base_url,
        cache=get_page_cache(),
        timeout_seconds=settings.recipes_api_timeout_seconds,
    )
