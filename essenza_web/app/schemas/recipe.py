from typing import Any, List, Optional

from fastapi import UploadFile
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Ingredient(BaseModel):
    name: str = ""
    quantity: str = ""

    model_config = ConfigDict(frozen=True)


class ImageUpload(BaseModel):
    filename: str
    content_type: str = ""
    data: bytes = Field(default=b"", repr=False)

    model_config = ConfigDict(frozen=True)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> str:
        return f"{self.size / 1024 / 1024:.2f}"

    @classmethod
    async def from_upload(cls, upload: UploadFile) -> "ImageUpload":
        data = await upload.read()
        return cls(
            filename=upload.filename or "upload",
            content_type=upload.content_type or "",
            data=data,
        )


class RecipeDraft(BaseModel):
    title: str
    description: str
    duration: str
    instructions: str
    ingredients: List[Ingredient]
    image: Optional[ImageUpload] = None

    @field_validator("title", "description", "duration", "instructions")
    @classmethod
    def validate_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Field must not be blank")
        return value

    @field_validator("ingredients")
    @classmethod
    def validate_ingredients(cls, value: List[Ingredient]) -> List[Ingredient]:
        if not value:
            raise ValueError("At least one ingredient is required")
        for ingredient in value:
            if not ingredient.name.strip() or not ingredient.quantity.strip():
                raise ValueError("Every ingredient needs a name and a quantity")
        return value


class SubmissionResult(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any) -> "SubmissionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str) -> "SubmissionResult":
        return cls(success=False, error=message)
