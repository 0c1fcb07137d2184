"""
Product update requests.

A save arrives as a loosely typed multipart form. build_update_request turns
it into either an ImageUpdate or a TextUpdate before it reaches the service,
so the service never sees a missing payload or an unmapped target.
"""

from pydantic import Field, model_validator
from typing import Literal, Optional, Union

from models.base import BaseSchema
from models.save_target import ContentKind, SaveTarget
from exceptions import InvalidInputError


class ImageUpdate(BaseSchema):
    """Upload an image and store its URL on the target column."""

    kind: Literal[ContentKind.IMAGE] = ContentKind.IMAGE
    target: SaveTarget
    content: bytes = Field(..., min_length=1, repr=False)
    content_type: str = Field(default="image/webp")
    original: Optional[bytes] = Field(
        None,
        repr=False,
        description="Unedited upload, persisted once to the original-image column"
    )
    original_content_type: str = Field(default="image/webp")

    @model_validator(mode="after")
    def target_is_image(self) -> "ImageUpdate":
        if not self.target.is_image:
            raise ValueError(f"{self.target.value} is not an image target")
        return self


class TextUpdate(BaseSchema):
    """Store a piece of text on the target column."""

    kind: Literal[ContentKind.DESCRIPTION] = ContentKind.DESCRIPTION
    target: SaveTarget
    text: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def target_is_text(self) -> "TextUpdate":
        if self.target.is_image:
            raise ValueError(f"{self.target.value} is not a text target")
        return self


UpdateRequest = Union[ImageUpdate, TextUpdate]


class UpdateResult(BaseSchema):
    """Outcome of a successful update."""

    success: bool = True
    message: str
    updated_fields: list[str] = Field(default_factory=list)
    image_url: Optional[str] = None


def build_update_request(
    target: Optional[str],
    data_type: Optional[str],
    description: Optional[str] = None,
    image: Optional[bytes] = None,
    image_content_type: Optional[str] = None,
    original_image: Optional[bytes] = None,
    original_content_type: Optional[str] = None
) -> UpdateRequest:
    """
    Validate raw form fields into a typed update request.

    Args:
        target: Save target id (form field "type")
        data_type: "Image" or "Description" (form field "dataType")
        description: Text payload for Description saves
        image: Image bytes for Image saves
        image_content_type: MIME type of the image upload
        original_image: Optional unedited image bytes
        original_content_type: MIME type of the unedited upload

    Returns:
        ImageUpdate or TextUpdate

    Raises:
        InvalidInputError: Missing type/dataType/payload, or unknown dataType
        InvalidTargetError: Target not mapped for this kind of content
    """
    if not target:
        raise InvalidInputError("No save target (type) was provided.")

    try:
        kind = ContentKind(data_type)
    except ValueError:
        raise InvalidInputError(
            "Invalid dataType provided.",
            details={"dataType": data_type, "valid": [k.value for k in ContentKind]}
        )

    resolved = SaveTarget.resolve(target, kind)

    if kind is ContentKind.IMAGE:
        if not image:
            raise InvalidInputError("No image file was provided for an Image update.")
        return ImageUpdate(
            target=resolved,
            content=image,
            content_type=image_content_type or "image/webp",
            original=original_image or None,
            original_content_type=original_content_type or "image/webp"
        )

    if description is None or not description.strip():
        raise InvalidInputError("No description text was provided.")
    return TextUpdate(target=resolved, text=description)
