from typing import Tuple

from essenza_web.app.schemas.recipe import Ingredient

Ingredients = Tuple[Ingredient, ...]

INGREDIENT_FIELDS = ("name", "quantity")


def can_remove(items: Ingredients) -> bool:
    return len(items) > 1


def add_ingredient(items: Ingredients) -> Ingredients:
    return (*items, Ingredient())


def remove_ingredient(items: Ingredients, index: int) -> Ingredients:
    """Drop the entry at ``index``; the last remaining entry is never removed."""
    _check_index(items, index)
    if not can_remove(items):
        return items
    return items[:index] + items[index + 1 :]


def update_ingredient(items: Ingredients, index: int, field: str, value: str) -> Ingredients:
    """Replace one field of one entry; siblings are carried over as the same objects."""
    if field not in INGREDIENT_FIELDS:
        raise ValueError(f"Unknown ingredient field: {field}")
    _check_index(items, index)
    updated = items[index].model_copy(update={field: value})
    return items[:index] + (updated,) + items[index + 1 :]


def _check_index(items: Ingredients, index: int) -> None:
    if index < 0 or index >= len(items):
        raise IndexError(f"Ingredient index {index} out of range")
