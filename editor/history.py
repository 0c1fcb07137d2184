"""
Linear edit history for one image.

history[0] is the original upload. Applying an edit drops anything after the
current position before appending, so there is never more than one branch.
"""

import hashlib
from dataclasses import dataclass, field

from exceptions import HistoryNavigationError


@dataclass(frozen=True)
class Artifact:
    """An image produced by an upload or an edit. Never mutated."""
    data: bytes = field(repr=False)
    mime_type: str = "image/png"
    filename: str = "image.png"

    @property
    def digest(self) -> str:
        """Content address of the bytes."""
        return hashlib.sha256(self.data).hexdigest()


class ImageHistory:
    """
    Append-and-truncate history with a cursor.

    Invariant: 0 <= index < len(history).
    """

    def __init__(self, original: Artifact):
        self._entries: list[Artifact] = [original]
        self._index = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def entries(self) -> tuple[Artifact, ...]:
        return tuple(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def current(self) -> Artifact:
        return self._entries[self._index]

    def original(self) -> Artifact:
        return self._entries[0]

    def apply_edit(self, artifact: Artifact) -> Artifact:
        """Discard redo steps, append the new artifact and move to it."""
        del self._entries[self._index + 1:]
        self._entries.append(artifact)
        self._index = len(self._entries) - 1
        return artifact

    def undo(self) -> Artifact:
        if not self.can_undo:
            raise HistoryNavigationError("undo", self._index, len(self._entries))
        self._index -= 1
        return self.current()

    def redo(self) -> Artifact:
        if not self.can_redo:
            raise HistoryNavigationError("redo", self._index, len(self._entries))
        self._index += 1
        return self.current()

    def reset(self) -> Artifact:
        """Go back to the original without discarding later steps."""
        self._index = 0
        return self.current()
