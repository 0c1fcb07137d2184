"""
Editing session: the images a user is working on and the UI state around them.

One session serves one user. Actions run synchronously; while an AI call or a
save is in flight the session is busy and further actions are refused. Any
failure ends up in session.error as a message for the error panel, and is
never retried automatically.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, TypeVar, Union
from uuid import uuid4
import structlog

from editor.history import Artifact, ImageHistory
from exceptions import AppError, ProductApiError
from integrations.product_api import FilePart, ProductApiClient, SaveResponse
from models.save_target import SaveTarget
from services.gemini_service import GeminiService, Hotspot
from services.image_service import CropRect, crop_image, resize_to_square, to_webp

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class EditorTab(str, Enum):
    RETOUCH = "retouch"
    ADJUST = "adjust"
    FILTERS = "filters"
    CROP = "crop"
    DESCRIBE = "describe"


class DescriptionTab(str, Enum):
    DESCRIPTION = "Description"
    ALT_DESCRIPTION = "Alt Description"
    META_DESCRIPTION = "Meta Description"


DEFAULT_DESCRIPTION_PROMPTS = {
    DescriptionTab.DESCRIPTION:
        "Write a concise, engaging product description highlighting key features.",
    DescriptionTab.ALT_DESCRIPTION:
        "Write a short alt text describing the visual appearance of the product for accessibility.",
    DescriptionTab.META_DESCRIPTION:
        "Write a SEO-friendly meta description including call to action, under 160 characters.",
}


@dataclass
class ImageItem:
    """One uploaded image and everything derived from it."""
    id: str
    history: ImageHistory
    description: Optional[str] = None
    is_description_saved: bool = False
    assigned_sku: Optional[str] = None

    @property
    def original(self) -> Artifact:
        return self.history.original()

    @property
    def current(self) -> Artifact:
        return self.history.current()


class EditorSession:
    """
    In-memory state for the editor.

    Args:
        gemini: Gemini service used for edits and text
        api: Client for the product API (saves)
    """

    def __init__(self, gemini: GeminiService, api: ProductApiClient):
        self.gemini = gemini
        self.api = api

        self.images: list[ImageItem] = []
        self.selected_id: Optional[str] = None
        self.active_tab = EditorTab.RETOUCH
        self.hotspot: Optional[Hotspot] = None
        self.crop: Optional[CropRect] = None
        self.description_tab = DescriptionTab.DESCRIPTION
        self.description_prompt = ""
        self.is_busy = False
        self.error: Optional[str] = None

    # ===================
    # SELECTION
    # ===================

    @property
    def selected(self) -> Optional[ImageItem]:
        for item in self.images:
            if item.id == self.selected_id:
                return item
        return None

    def add_images(self, files: Iterable[tuple[str, bytes]]) -> list[ImageItem]:
        """
        Add uploads to the session as 1024x1024 squares.

        Files that cannot be read are skipped. The first new image is
        selected if nothing was selected yet.
        """
        self.error = None
        added = []

        for filename, data in files:
            try:
                square = resize_to_square(data)
            except AppError as e:
                logger.warning("image_upload_skipped", filename=filename, error=e.message)
                continue

            original = Artifact(data=square, mime_type="image/png", filename=filename)
            added.append(ImageItem(id=f"{filename}-{uuid4().hex[:12]}", history=ImageHistory(original)))

        self.images.extend(added)

        if self.selected_id is None and added:
            self.selected_id = added[0].id

        self._reset_view()
        logger.info("images_added", count=len(added), total=len(self.images))
        return added

    def select_image(self, image_id: str) -> ImageItem:
        item = next((i for i in self.images if i.id == image_id), None)
        if item is None:
            raise KeyError(image_id)
        self.selected_id = image_id
        self.error = None
        self._reset_view()
        return item

    def clear(self) -> None:
        """Drop every image and start over with an empty session."""
        self.images = []
        self.selected_id = None
        self.error = None
        self._reset_view()
        logger.info("session_cleared")

    def set_active_tab(self, tab: Union[EditorTab, str]) -> None:
        self.active_tab = EditorTab(tab)

    def set_hotspot(self, x: int, y: int) -> Hotspot:
        """Mark the pixel a retouch should focus on."""
        if x < 0 or y < 0:
            raise ValueError("Hotspot coordinates must be non-negative")
        self.hotspot = Hotspot(x=int(x), y=int(y))
        return self.hotspot

    def set_crop(self, rect: Optional[CropRect]) -> None:
        self.crop = rect

    def dismiss_error(self) -> None:
        self.error = None

    # ===================
    # HISTORY
    # ===================

    def undo(self) -> Artifact:
        return self._require_selected().history.undo()

    def redo(self) -> Artifact:
        return self._require_selected().history.redo()

    def reset(self) -> Artifact:
        """Go back to the original upload and clear the error and hotspot."""
        artifact = self._require_selected().history.reset()
        self.error = None
        self.hotspot = None
        return artifact

    # ===================
    # IMAGE EDITS
    # ===================

    def generate_edit(self, prompt: str) -> Optional[Artifact]:
        """Retouch the selected image around the hotspot."""
        item = self.selected
        if item is None:
            return self._fail("No image selected to edit.")
        if not prompt or not prompt.strip():
            return self._fail("Please enter a description for your edit.")
        if self.hotspot is None:
            return self._fail("Please click on the image to select an area to edit.")

        hotspot = self.hotspot

        def action() -> Artifact:
            current = item.current
            result = self.gemini.generate_edited_image(
                current.data, current.mime_type, prompt.strip(), hotspot
            )
            artifact = self._append(item, result.data, result.mime_type, "edited")
            self.hotspot = None
            return artifact

        return self._run("Failed to generate the image.", action)

    def apply_filter(self, prompt: str) -> Optional[Artifact]:
        item = self.selected
        if item is None:
            return self._fail("No image selected to apply a filter to.")
        if not prompt or not prompt.strip():
            return self._fail("Please choose a filter.")

        def action() -> Artifact:
            current = item.current
            result = self.gemini.generate_filtered_image(current.data, current.mime_type, prompt.strip())
            return self._append(item, result.data, result.mime_type, "filtered")

        return self._run("Failed to apply the filter.", action)

    def apply_adjustment(self, prompt: str) -> Optional[Artifact]:
        item = self.selected
        if item is None:
            return self._fail("No image selected to apply an adjustment to.")
        if not prompt or not prompt.strip():
            return self._fail("Please describe the adjustment.")

        def action() -> Artifact:
            current = item.current
            result = self.gemini.generate_adjusted_image(current.data, current.mime_type, prompt.strip())
            return self._append(item, result.data, result.mime_type, "adjusted")

        return self._run("Failed to apply the adjustment.", action)

    def apply_crop(self) -> Optional[Artifact]:
        item = self.selected
        if item is None or self.crop is None:
            return self._fail("Please select an area to crop.")

        rect = self.crop

        def action() -> Artifact:
            data = crop_image(item.current.data, rect)
            return self._append(item, data, "image/png", "cropped")

        return self._run("Failed to crop the image.", action)

    # ===================
    # TEXT
    # ===================

    def change_description_tab(self, tab: Union[DescriptionTab, str]) -> str:
        """Switch text tab and load its default instructions."""
        self.description_tab = DescriptionTab(tab)
        self.description_prompt = DEFAULT_DESCRIPTION_PROMPTS[self.description_tab]
        return self.description_prompt

    def generate_description(self, prompt: str) -> Optional[str]:
        item = self.selected
        if item is None:
            return self._fail("No image selected to describe.")
        if not prompt or not prompt.strip():
            return self._fail("Please enter instructions for the text.")

        def action() -> str:
            self.description_prompt = prompt
            item.description = None
            item.is_description_saved = False
            current = item.current
            item.description = self.gemini.generate_description(
                current.data, current.mime_type, prompt.strip()
            )
            return item.description

        return self._run("Failed to generate description.", action)

    def edit_description(self, text: str) -> None:
        item = self._require_selected()
        item.description = text
        item.is_description_saved = False

    # ===================
    # SAVE AND EXPORT
    # ===================

    def save(self, sku: str, target: Union[SaveTarget, str]) -> Optional[SaveResponse]:
        """
        Save the current image or the description against a SKU.

        Image targets send the current artifact and the original, both as
        WebP. Text targets send the selected image's description.
        """
        item = self.selected
        if item is None:
            return self._fail("No item selected to save.")

        sku = (sku or "").strip()
        if not sku:
            return self._fail("Please enter a SKU.")

        try:
            target = SaveTarget(target)
        except ValueError:
            return self._fail(f"Invalid save target: {target}")

        if not target.is_image and not item.description:
            return self._fail("No description available to save.")

        def action() -> SaveResponse:
            if target.is_image:
                stem = item.original.filename.rsplit(".", 1)[0]
                response = self.api.update_product(
                    sku,
                    target,
                    FilePart(f"{stem}.webp", to_webp(item.current.data)),
                    original=FilePart(f"{stem}.webp", to_webp(item.original.data))
                )
            else:
                response = self.api.update_product(sku, target, item.description)

            if not response.success:
                raise ProductApiError(500, response.message)

            if not target.is_image:
                item.is_description_saved = True
            item.assigned_sku = sku
            return response

        return self._run("Failed to save.", action)

    def download(self) -> Optional[tuple[str, bytes]]:
        """
        Export the selected image's current version.

        Returns:
            (filename, data) with the image encoded as WebP,
            e.g. ("edited-ring.webp", ...)
        """
        item = self.selected
        if item is None:
            return self._fail("No image selected to download.")

        def action() -> tuple[str, bytes]:
            stem = item.original.filename.rsplit(".", 1)[0]
            return f"edited-{stem}.webp", to_webp(item.current.data)

        return self._run("Failed to download the image.", action)

    # ===================
    # HELPERS
    # ===================

    def _require_selected(self) -> ImageItem:
        item = self.selected
        if item is None:
            raise LookupError("No image selected")
        return item

    def _reset_view(self) -> None:
        self.hotspot = None
        self.crop = None
        self.active_tab = EditorTab.RETOUCH

    def _append(self, item: ImageItem, data: bytes, mime_type: str, label: str) -> Artifact:
        extension = mime_type.split("/")[-1]
        artifact = Artifact(
            data=data,
            mime_type=mime_type,
            filename=f"{label}-{len(item.history)}.{extension}"
        )
        item.history.apply_edit(artifact)
        self.crop = None
        return artifact

    def _fail(self, message: str) -> None:
        self.error = message
        logger.info("editor_action_rejected", reason=message)
        return None

    def _run(self, failure_prefix: str, action: Callable[[], T]) -> Optional[T]:
        """Busy-gated call; failures become session.error."""
        if self.is_busy:
            logger.warning("editor_busy_action_ignored")
            return None

        self.is_busy = True
        self.error = None
        try:
            return action()
        except AppError as e:
            self.error = f"{failure_prefix} {e.message}"
            logger.error("editor_action_failed", code=e.code, error=e.message)
            return None
        except Exception as e:
            self.error = f"{failure_prefix} {e}"
            logger.exception("editor_action_failed_unexpected", error=str(e))
            return None
        finally:
            self.is_busy = False
