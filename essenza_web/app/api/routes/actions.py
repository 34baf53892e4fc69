import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from essenza_web.app.api.deps import get_recipes_gateway
from essenza_web.app.core.config import get_settings
from essenza_web.app.schemas.recipe import RecipeDraft, SubmissionResult
from essenza_web.app.services import recipe_payload
from essenza_web.app.services.image_picker import ImageValidationError, validate_image
from essenza_web.app.services.recipes_gateway import RecipesGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/actions", tags=["actions"])


@router.post("/recipes", response_model=SubmissionResult)
async def create_recipe_action(
    request: Request,
    title: str = Form(...),
    description: str = Form(...),
    duration: str = Form(...),
    instructions: str = Form(...),
    gateway: RecipesGateway = Depends(get_recipes_gateway),
):
    form = await request.form()
    image = await recipe_payload.read_image(form)
    if image is not None:
        try:
            validate_image(image, get_settings().recipe_image_max_bytes)
        except ImageValidationError as exc:
            logger.info("Rejected image for recipe %r: %s", title, exc.message)
            return SubmissionResult.fail(exc.message)

    try:
        draft = RecipeDraft(
            title=title,
            description=description,
            duration=duration.strip(),
            instructions=instructions,
            ingredients=recipe_payload.parse_ingredients(form),
            image=image,
        )
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc

    return await gateway.create_recipe(draft)
