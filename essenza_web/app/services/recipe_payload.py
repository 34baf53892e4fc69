"""Multipart encoding of recipe drafts.

Ingredients travel as an indexed map, ``ingredients[<i>][name]`` and
``ingredients[<i>][quantity]``, so their order and pairing survive the trip
through a flat form body.
"""
import base64
import logging
import re
from typing import Dict, List, Optional, Tuple

from starlette.datastructures import FormData, UploadFile

from essenza_web.app.schemas.recipe import ImageUpload, Ingredient, RecipeDraft

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "description", "duration", "instructions")

CARRIED_IMAGE_NAME = "image_filename"
CARRIED_IMAGE_TYPE = "image_content_type"
CARRIED_IMAGE_DATA = "image_data"

_INGREDIENT_KEY = re.compile(r"^ingredients\[(\d+)\]\[(name|quantity)\]$")

# (field name, (filename, content[, content type])) as accepted by httpx ``files=``
MultipartPart = Tuple[str, tuple]


def ingredient_key(index: int, field: str) -> str:
    return f"ingredients[{index}][{field}]"


def encode_draft(draft: RecipeDraft) -> List[MultipartPart]:
    """Ordered multipart parts for a draft.

    Text parts carry no filename, which keeps the body ``multipart/form-data``
    even when no image is attached.
    """
    parts: List[MultipartPart] = [
        ("title", (None, draft.title)),
        ("description", (None, draft.description)),
        ("duration", (None, draft.duration)),
        ("instructions", (None, draft.instructions)),
    ]
    if draft.image is not None:
        parts.append(("image", (draft.image.filename, draft.image.data, draft.image.content_type)))
    for index, ingredient in enumerate(draft.ingredients):
        parts.append((ingredient_key(index, "name"), (None, ingredient.name)))
        parts.append((ingredient_key(index, "quantity"), (None, ingredient.quantity)))
    return parts


def text_fields(form: FormData) -> Dict[str, str]:
    values = {}
    for name in TEXT_FIELDS:
        value = form.get(name)
        values[name] = value if isinstance(value, str) else ""
    return values


def parse_ingredients(form: FormData) -> List[Ingredient]:
    collected: Dict[int, Dict[str, str]] = {}
    for key, value in form.multi_items():
        match = _INGREDIENT_KEY.match(key)
        if not match or not isinstance(value, str):
            continue
        index, field = int(match.group(1)), match.group(2)
        collected.setdefault(index, {})[field] = value
    return [Ingredient(**collected[index]) for index in sorted(collected)]


async def read_image(form: FormData) -> Optional[ImageUpload]:
    upload = form.get("image")
    # Browsers post an empty, nameless file part when nothing was chosen
    if not isinstance(upload, UploadFile) or not upload.filename:
        return None
    image = await ImageUpload.from_upload(upload)
    if not image.data:
        return None
    return image


def image_fields(image: Optional[ImageUpload]) -> Dict[str, str]:
    """Hidden form fields that carry an already chosen image to the next post.

    File inputs cannot be pre-filled, so the bytes travel base64 encoded.
    """
    if image is None:
        return {}
    return {
        CARRIED_IMAGE_NAME: image.filename,
        CARRIED_IMAGE_TYPE: image.content_type,
        CARRIED_IMAGE_DATA: base64.b64encode(image.data).decode("ascii"),
    }


def carried_image(form: FormData) -> Optional[ImageUpload]:
    filename = form.get(CARRIED_IMAGE_NAME)
    encoded = form.get(CARRIED_IMAGE_DATA)
    if not isinstance(filename, str) or not isinstance(encoded, str) or not filename:
        return None
    try:
        data = base64.b64decode(encoded, validate=True)
    except ValueError:
        logger.warning("Discarding carried image %r with malformed data", filename)
        return None
    if not data:
        return None
    content_type = form.get(CARRIED_IMAGE_TYPE)
    return ImageUpload(
        filename=filename,
        content_type=content_type if isinstance(content_type, str) else "",
        data=data,
    )
