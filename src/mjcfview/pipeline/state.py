"""Hand compiled scenes over to a renderer running on another thread."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

from ..core.mesh import MeshCollection
from ..core.nodes import TextureData


@dataclass(frozen=True)
class RenderSnapshot:
    """A compiled scene as the renderer sees it.

    Attributes:
        meshes: The flattened mesh collection
        textures: Loaded textures the draw map refers to
        generation: Publish counter, starting at 1
    """

    meshes: MeshCollection
    textures: tuple[TextureData, ...]
    generation: int


class RenderState:
    """The current renderable scene, guarded by one lock.

    A publish replaces the whole snapshot at once, so a reader sees either
    the previous scene or the new one, never a mix.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._snapshot: RenderSnapshot | None = None
        self._generation = 0

    def publish(
        self,
        meshes: MeshCollection,
        textures: list[TextureData] | tuple[TextureData, ...] = (),
    ) -> RenderSnapshot:
        """Replace the current scene."""
        with self._lock:
            self._generation += 1
            self._snapshot = RenderSnapshot(meshes, tuple(textures), self._generation)
            return self._snapshot

    def current(self) -> RenderSnapshot | None:
        """The latest published scene, left in place."""
        with self._lock:
            return self._snapshot

    def take(self) -> RenderSnapshot | None:
        """The latest published scene, cleared so it is consumed once."""
        with self._lock:
            snapshot, self._snapshot = self._snapshot, None
            return snapshot

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation
