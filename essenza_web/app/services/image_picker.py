"""Image selection for the recipe form.

Handles explicit file selection and drag-and-drop. Only the first file of a
selection or drop is considered; validation checks size before MIME type.
"""
import logging
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from essenza_web.app.schemas.recipe import ImageUpload

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5 * 1024 * 1024

FILE_TOO_LARGE_MESSAGE = "Bild darf maximal 5MB groß sein"
INVALID_FILE_TYPE_MESSAGE = "Bitte wählen Sie ein Bild aus"

DRAG_ACTIVATING_EVENTS = {"dragenter", "dragover"}


class ImageValidationError(ValueError):
    """Raised when a selected file cannot be used as the recipe image."""

    message = INVALID_FILE_TYPE_MESSAGE

    def __init__(self, message: Optional[str] = None):
        if message:
            self.message = message
        super().__init__(self.message)


class FileTooLarge(ImageValidationError):
    message = FILE_TOO_LARGE_MESSAGE


class InvalidFileType(ImageValidationError):
    message = INVALID_FILE_TYPE_MESSAGE


def validate_image(image: ImageUpload, max_bytes: int = MAX_IMAGE_BYTES) -> ImageUpload:
    if image.size > max_bytes:
        logger.info("Rejected image %s: %d bytes exceeds %d", image.filename, image.size, max_bytes)
        raise FileTooLarge()
    if not image.content_type.startswith("image/"):
        logger.info("Rejected image %s: content type %r", image.filename, image.content_type)
        raise InvalidFileType()
    return image


def first_file(files: Optional[Sequence[ImageUpload]]) -> Optional[ImageUpload]:
    if not files:
        return None
    return files[0]


class DragEvent(BaseModel):
    type: str
    files: list[ImageUpload] = Field(default_factory=list)
    default_prevented: bool = False
    propagation_stopped: bool = False

    model_config = ConfigDict(validate_assignment=True)

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


class DropZone:
    """Tracks the cosmetic drag-hover state of the image drop area."""

    def __init__(self) -> None:
        self.active = False

    def handle_drag(self, event: DragEvent) -> bool:
        _suppress(event)
        if event.type in DRAG_ACTIVATING_EVENTS:
            self.active = True
        elif event.type == "dragleave":
            self.active = False
        return self.active

    def handle_drop(self, event: DragEvent) -> Optional[ImageUpload]:
        _suppress(event)
        self.active = False
        return first_file(event.files)


def _suppress(event: DragEvent) -> None:
    # Dropped files must never be opened by the browser itself
    event.prevent_default()
    event.stop_propagation()
