"""State container for the add-recipe form.

Every mutation replaces the current ``FormState`` with a new frozen snapshot
and hands it to the subscribers. Submission goes through the recipe gateway;
after a successful save the form is cleared and hidden, and a one-shot timer
brings it back once the success banner has been shown long enough.
"""
import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from essenza_web.app.schemas.form_state import ErrorKind, FormState
from essenza_web.app.schemas.recipe import ImageUpload, RecipeDraft, SubmissionResult
from essenza_web.app.services import ingredient_list
from essenza_web.app.services.image_picker import (
    MAX_IMAGE_BYTES,
    DragEvent,
    DropZone,
    ImageValidationError,
    first_file,
    validate_image,
)
from essenza_web.app.services.recipes_gateway import RecipesGateway

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Rezept erfolgreich hinzugefügt!"
SAVE_ERROR_MESSAGE = "Fehler beim Speichern des Rezepts"
MISSING_FIELDS_MESSAGE = "Bitte füllen Sie alle Pflichtfelder aus"

TEXT_FIELDS = ("title", "description", "duration", "instructions")

Listener = Callable[[FormState], None]


class RecipeFormController:
    def __init__(
        self,
        gateway: RecipesGateway,
        *,
        max_image_bytes: int = MAX_IMAGE_BYTES,
        success_reset_seconds: float = 5.0,
        initial_state: Optional[FormState] = None,
    ):
        self._gateway = gateway
        self._max_image_bytes = max_image_bytes
        self._success_reset_seconds = success_reset_seconds
        self._state = initial_state or FormState()
        self._listeners: List[Listener] = []
        self._drop_zone = DropZone()
        self._reset_handle: Optional[asyncio.TimerHandle] = None
        self._closed = False

    @property
    def state(self) -> FormState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: FormState) -> None:
        if self._closed:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _set(self, **changes) -> None:
        self._publish(self._state.model_copy(update=changes))

    # Field editing

    def set_field(self, name: str, value: str) -> None:
        if name not in TEXT_FIELDS:
            raise ValueError(f"Unknown form field: {name}")
        self._set(**{name: value})

    def add_ingredient(self) -> None:
        self._set(ingredients=ingredient_list.add_ingredient(self._state.ingredients))

    def remove_ingredient(self, index: int) -> None:
        if not self.can_remove_ingredient:
            logger.debug("Ignoring removal of the last ingredient")
            return
        self._set(ingredients=ingredient_list.remove_ingredient(self._state.ingredients, index))

    def update_ingredient(self, index: int, field: str, value: str) -> None:
        self._set(ingredients=ingredient_list.update_ingredient(self._state.ingredients, index, field, value))

    @property
    def can_remove_ingredient(self) -> bool:
        return ingredient_list.can_remove(self._state.ingredients)

    # Image selection

    def select_image(self, files: Optional[Sequence[ImageUpload]]) -> bool:
        image = first_file(files)
        if image is None:
            return False
        return self._accept_image(image)

    def handle_drag(self, event: DragEvent) -> None:
        self._set(drag_active=self._drop_zone.handle_drag(event))

    def handle_drop(self, event: DragEvent) -> bool:
        image = self._drop_zone.handle_drop(event)
        self._set(drag_active=self._drop_zone.active)
        if image is None:
            return False
        return self._accept_image(image)

    def clear_image(self) -> None:
        self._set(image=None)

    def _accept_image(self, image: ImageUpload) -> bool:
        try:
            validate_image(image, self._max_image_bytes)
        except ImageValidationError as exc:
            self._fail(exc.message, ErrorKind.VALIDATION)
            return False
        self._set(image=image, error=None, error_kind=None)
        return True

    # Visibility

    def toggle_form(self) -> None:
        self._set(form_visible=not self._state.form_visible)

    # Submission

    def missing_fields(self) -> List[str]:
        missing = [name for name in TEXT_FIELDS if not getattr(self._state, name).strip()]
        for index, ingredient in enumerate(self._state.ingredients):
            for field in ingredient_list.INGREDIENT_FIELDS:
                if not getattr(ingredient, field).strip():
                    missing.append(f"ingredients[{index}][{field}]")
        return missing

    @property
    def can_submit(self) -> bool:
        return not self._state.loading and not self.missing_fields()

    def build_draft(self) -> RecipeDraft:
        state = self._state
        return RecipeDraft(
            title=state.title,
            description=state.description,
            duration=state.duration.strip(),
            instructions=state.instructions,
            ingredients=list(state.ingredients),
            image=state.image,
        )

    async def submit(self) -> Optional[SubmissionResult]:
        if self._state.loading:
            logger.debug("Submission already in flight; ignoring")
            return None
        missing = self.missing_fields()
        if missing:
            logger.info("Blocked submission, missing fields: %s", ", ".join(missing))
            self._fail(MISSING_FIELDS_MESSAGE, ErrorKind.VALIDATION)
            return None

        self._cancel_reset()
        self._set(error=None, error_kind=None, loading=True)
        draft = self.build_draft()
        try:
            result = await self._gateway.create_recipe(draft)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Recipe submission failed unexpectedly")
            result = SubmissionResult.fail(str(exc) or SAVE_ERROR_MESSAGE)
            self._fail(result.error, ErrorKind.UNKNOWN)
        else:
            if result.success:
                self._succeed()
            else:
                self._fail(result.error or SAVE_ERROR_MESSAGE, ErrorKind.SUBMISSION)
        finally:
            self._set(loading=False)
        return result

    def _succeed(self) -> None:
        # Fresh fields, banner shown, form hidden until the reset timer fires
        self._publish(
            FormState(
                loading=self._state.loading,
                success_message=SUCCESS_MESSAGE,
                form_visible=False,
            )
        )
        self._schedule_reset()

    def _fail(self, message: str, kind: ErrorKind) -> None:
        self._cancel_reset()
        self._set(error=message, error_kind=kind, success_message=None)

    def _schedule_reset(self) -> None:
        self._cancel_reset()
        if self._closed:
            return
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(self._success_reset_seconds, self._restore_form)

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _restore_form(self) -> None:
        self._reset_handle = None
        self._set(success_message=None, form_visible=True)

    @property
    def reset_pending(self) -> bool:
        return self._reset_handle is not None

    # Teardown

    def close(self) -> None:
        self._cancel_reset()
        self._listeners.clear()
        self._closed = True

    async def __aenter__(self) -> "RecipeFormController":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
