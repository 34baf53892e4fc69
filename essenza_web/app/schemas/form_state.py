from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from essenza_web.app.schemas.recipe import ImageUpload, Ingredient


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    SUBMISSION = "submission"
    UNKNOWN = "unknown"


def _initial_ingredients() -> Tuple[Ingredient, ...]:
    return (Ingredient(),)


class FormState(BaseModel):
    """Immutable snapshot of the add-recipe form."""

    title: str = ""
    description: str = ""
    duration: str = ""
    instructions: str = ""
    ingredients: Tuple[Ingredient, ...] = Field(default_factory=_initial_ingredients)
    image: Optional[ImageUpload] = None
    loading: bool = False
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    success_message: Optional[str] = None
    form_visible: bool = True
    drag_active: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def can_remove_ingredient(self) -> bool:
        return len(self.ingredients) > 1
