import logging
import math
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from starlette.datastructures import FormData

from essenza_web.app.api.deps import get_recipes_gateway, templates
from essenza_web.app.core.config import get_settings
from essenza_web.app.schemas.form_state import FormState
from essenza_web.app.services import recipe_payload
from essenza_web.app.services.image_picker import ImageValidationError, validate_image
from essenza_web.app.services.navigation import build_navigation
from essenza_web.app.services.recipe_form import RecipeFormController
from essenza_web.app.services.recipes_gateway import RecipesApiError, RecipesGateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

LISTING_ERROR_MESSAGE = "Rezepte konnten nicht geladen werden"

ACTION_SUBMIT = "submit"
ACTION_ADD_INGREDIENT = "add_ingredient"
ACTION_REMOVE_INGREDIENT = "remove_ingredient:"
ACTION_TOGGLE_FORM = "toggle_form"
ACTION_CLEAR_IMAGE = "clear_image"


def _page_context(request: Request, **extra: Any) -> Dict[str, Any]:
    return {"nav_links": build_navigation(request.url.path), **extra}


@router.get("/", response_class=HTMLResponse)
async def home(request: Request):
    return templates.TemplateResponse(request, "home.html", _page_context(request))


@router.get("/recipes", response_class=HTMLResponse)
async def list_recipes(request: Request, gateway: RecipesGateway = Depends(get_recipes_gateway)):
    error = None
    try:
        recipes = await gateway.list_recipes()
    except RecipesApiError as exc:
        logger.warning("Unable to load recipe listing: %s", exc)
        recipes, error = [], LISTING_ERROR_MESSAGE
    return templates.TemplateResponse(
        request, "recipes.html", _page_context(request, recipes=recipes, error=error)
    )


@router.get("/recipes/add", response_class=HTMLResponse)
async def add_recipe_form(request: Request):
    return _render_form(request, FormState())


@router.post("/recipes/add", response_class=HTMLResponse)
async def submit_add_recipe_form(request: Request, gateway: RecipesGateway = Depends(get_recipes_gateway)):
    settings = get_settings()
    form = await request.form()
    now = time.time()
    action = str(form.get("action") or ACTION_SUBMIT)
    controller = RecipeFormController(
        gateway,
        max_image_bytes=settings.recipe_image_max_bytes,
        success_reset_seconds=settings.recipe_success_reset_seconds,
        initial_state=_state_from_form(form, now, settings.recipe_image_max_bytes),
    )
    async with controller:
        await _apply_action(controller, action, form)
        success_until = _success_deadline(form)
        if action == ACTION_SUBMIT:
            success_until = now + settings.recipe_success_reset_seconds
        return _render_form(request, controller.state, success_until=success_until, now=now)


def _success_deadline(form: FormData) -> Optional[float]:
    try:
        return float(str(form.get("success_until") or ""))
    except ValueError:
        return None


def _state_from_form(form: FormData, now: float, max_image_bytes: int) -> FormState:
    ingredients = tuple(recipe_payload.parse_ingredients(form))
    extra: Dict[str, Any] = {}
    if ingredients:
        extra["ingredients"] = ingredients

    success_message = form.get("success_message") or None
    form_visible = form.get("form_visible", "1") != "0"
    deadline = _success_deadline(form)
    if success_message and (deadline is None or now >= deadline):
        # The banner has been shown long enough, bring the form back
        success_message, form_visible = None, True

    image = recipe_payload.carried_image(form)
    if image is not None:
        try:
            validate_image(image, max_image_bytes)
        except ImageValidationError as exc:
            logger.warning("Discarding carried image %r: %s", image.filename, exc.message)
            image = None

    return FormState(
        **recipe_payload.text_fields(form),
        **extra,
        image=image,
        error=form.get("error") or None,
        success_message=success_message,
        form_visible=form_visible,
    )


async def _apply_action(controller: RecipeFormController, action: str, form: FormData) -> None:
    if action == ACTION_ADD_INGREDIENT:
        controller.add_ingredient()
    elif action.startswith(ACTION_REMOVE_INGREDIENT):
        try:
            controller.remove_ingredient(int(action[len(ACTION_REMOVE_INGREDIENT) :]))
        except (ValueError, IndexError):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid ingredient index") from None
    elif action == ACTION_TOGGLE_FORM:
        controller.toggle_form()
    elif action == ACTION_CLEAR_IMAGE:
        controller.clear_image()
    elif action == ACTION_SUBMIT:
        image = await recipe_payload.read_image(form)
        if image is not None and not controller.select_image([image]):
            return
        await controller.submit()
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown form action: {action}")


def _render_form(
    request: Request,
    state: FormState,
    success_until: Optional[float] = None,
    now: Optional[float] = None,
):
    settings = get_settings()
    reset_seconds = settings.recipe_success_reset_seconds
    if state.success_message and success_until is not None and now is not None:
        reset_seconds = max(success_until - now, 0.0)
    return templates.TemplateResponse(
        request,
        "add_recipe.html",
        _page_context(
            request,
            state=state,
            success_until=success_until if state.success_message else None,
            reset_seconds=math.ceil(reset_seconds),
            image_fields=recipe_payload.image_fields(state.image),
            max_image_mb=settings.recipe_image_max_bytes // (1024 * 1024),
        ),
    )
