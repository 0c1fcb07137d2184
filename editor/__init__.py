"""
Editor-side state: image history and the editing session.
"""

from editor.history import Artifact, ImageHistory
from editor.session import (
    DEFAULT_DESCRIPTION_PROMPTS,
    DescriptionTab,
    EditorSession,
    EditorTab,
    ImageItem,
)

__all__ = [
    "Artifact",
    "ImageHistory",
    "DEFAULT_DESCRIPTION_PROMPTS",
    "DescriptionTab",
    "EditorSession",
    "EditorTab",
    "ImageItem",
]
