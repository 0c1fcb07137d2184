"""
Save targets and the product columns they write to.

Each SaveTarget member carries its column, the kind of content it accepts
and, for image stages, the phrase used in storage keys. The set is closed:
anything not listed here is rejected with InvalidTargetError.
"""

from enum import Enum
from typing import Optional

from exceptions import InvalidTargetError


class ContentKind(str, Enum):
    """Kind of payload a save carries (the form's dataType)."""
    IMAGE = "Image"
    DESCRIPTION = "Description"


class SaveTarget(str, Enum):
    """Where a piece of content is persisted on the product row."""

    def __new__(
        cls,
        value: str,
        column: str,
        kind: ContentKind,
        phrase: Optional[str] = None
    ):
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.column = column
        obj.kind = kind
        obj.phrase = phrase
        return obj

    # Images
    PRE = ("Pre", "pre_image_url", ContentKind.IMAGE, "original concept")
    SKETCH = ("Sketch", "sketch_image_url", ContentKind.IMAGE, "concept sketch")
    WAX = ("Wax", "wax_image_url", ContentKind.IMAGE, "wax prototype")
    CAST = ("Cast", "cast_image_url", ContentKind.IMAGE, "raw casting")
    FINAL = ("Final", "final_image_url", ContentKind.IMAGE, "finished piece")

    # Stage descriptions
    SKETCH_DESCRIPTION = ("Sketch_description", "sketch_description", ContentKind.DESCRIPTION)
    WAX_DESCRIPTION = ("Wax_description", "wax_description", ContentKind.DESCRIPTION)
    CAST_DESCRIPTION = ("Cast_description", "cast_description", ContentKind.DESCRIPTION)
    FINAL_DESCRIPTION = ("Final_description", "final_description", ContentKind.DESCRIPTION)

    # Alt text
    SKETCH_ALT = ("Sketch_alt", "sketch_image_alt_text", ContentKind.DESCRIPTION)
    WAX_ALT = ("Wax_alt", "wax_image_alt_text", ContentKind.DESCRIPTION)
    CAST_ALT = ("Cast_alt", "cast_image_alt_text", ContentKind.DESCRIPTION)
    FINAL_ALT = ("Final_alt", "final_image_alt_text", ContentKind.DESCRIPTION)

    # Product-level text
    META_TITLE = ("Meta_title", "meta_title", ContentKind.DESCRIPTION)
    META_DESCRIPTION = ("Meta_description", "meta_description", ContentKind.DESCRIPTION)
    PRODUCT_NAME = ("Product_name", "product_name", ContentKind.DESCRIPTION)

    @property
    def is_image(self) -> bool:
        return self.kind is ContentKind.IMAGE

    @property
    def is_original(self) -> bool:
        """The write-once original ("pre") image."""
        return self is SaveTarget.PRE

    @classmethod
    def resolve(cls, value: Optional[str], kind: ContentKind) -> "SaveTarget":
        """
        Look up a target id sent by the client.

        Args:
            value: Raw target id (e.g. "Wax", "Meta_title")
            kind: Content kind the caller is saving

        Returns:
            Matching SaveTarget

        Raises:
            InvalidTargetError: Unknown id, or id belongs to the other kind
        """
        try:
            target = cls(value)
        except ValueError:
            raise InvalidTargetError(value, kind.value)

        if target.kind is not kind:
            raise InvalidTargetError(value, kind.value)

        return target


IMAGE_TARGETS = [t for t in SaveTarget if t.kind is ContentKind.IMAGE]
TEXT_TARGETS = [t for t in SaveTarget if t.kind is ContentKind.DESCRIPTION]

# Fields counted by the listing's completeness indicator
TRACKED_FIELDS: tuple[str, ...] = tuple(
    t.column for t in (
        SaveTarget.SKETCH, SaveTarget.WAX, SaveTarget.CAST, SaveTarget.FINAL,
        SaveTarget.SKETCH_DESCRIPTION, SaveTarget.WAX_DESCRIPTION,
        SaveTarget.CAST_DESCRIPTION, SaveTarget.FINAL_DESCRIPTION,
        SaveTarget.SKETCH_ALT, SaveTarget.WAX_ALT,
        SaveTarget.CAST_ALT, SaveTarget.FINAL_ALT,
    )
)
