"""Staged compilation of a scene document."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from ..assets.files import AssetFileLoader
from ..assets.manager import AssetManager
from ..config import CompilerConfig
from ..core.errors import CompileError
from ..core.mesh import MeshCollection
from ..core.nodes import TextureData
from ..core.tree import SceneTree
from ..document.builder import TreeBuilder
from ..document.defaults import DefaultResolver
from ..document.reader import ElementEvent, events_from_string, iter_events
from ..plugins.base import PluginManager
from .composer import SceneComposer
from .state import RenderState

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Load stages, in the order they run."""

    BUILD = "build"
    RESOLVE_DEFAULTS = "resolve_defaults"
    BIND_ASSETS = "bind_assets"
    LOAD_FILES = "load_files"


STAGES = tuple(Stage)


class SceneModel:
    """A loaded scene document, ready to be compiled into meshes.

    Loading runs four stages in a fixed order: build the tree, resolve
    default classes, bind asset references, load asset files. Each stage
    needs the previous one complete. Compiling reads the tree and may be
    repeated, for example after a plugin has appended body rotations.

    Example:
        model = SceneModel.from_file(Path("scene.xml"))
        collection = model.compile()
        vertices = collection.interleaved_vertices()
    """

    def __init__(
        self,
        base_dir: Path | None = None,
        config: CompilerConfig | None = None,
        plugins: PluginManager | None = None,
    ) -> None:
        self.config = config or CompilerConfig()
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self.plugins = plugins or PluginManager()
        self.tree = SceneTree()
        self.assets = AssetManager(self.tree)
        self.completed: list[Stage] = []

    @classmethod
    def from_file(
        cls,
        path: Path | str,
        config: CompilerConfig | None = None,
        plugins: PluginManager | None = None,
    ) -> SceneModel:
        """Load a document file; asset paths resolve against its directory.

        Raises:
            FileNotFoundError: If the document does not exist
            CompileError: If any load stage fails
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Scene document not found: {path}")

        model = cls(base_dir=path.parent, config=config, plugins=plugins)
        model.load(iter_events(path))
        return model

    @classmethod
    def from_string(
        cls,
        text: str,
        base_dir: Path | str | None = None,
        config: CompilerConfig | None = None,
        plugins: PluginManager | None = None,
    ) -> SceneModel:
        """Load a document held in a string.

        Raises:
            CompileError: If any load stage fails
        """
        model = cls(base_dir=base_dir, config=config, plugins=plugins)
        model.load(events_from_string(text))
        return model

    def load(self, events: Iterable[ElementEvent]) -> None:
        """Run every load stage, then the plugins' model-load hooks.

        Raises:
            CompileError: If a stage fails; later stages do not run
        """
        if self.completed:
            raise CompileError("Model has already been loaded")

        handlers: dict[Stage, Callable[[], None]] = {
            Stage.BUILD: lambda: self._build(events),
            Stage.RESOLVE_DEFAULTS: self._resolve_defaults,
            Stage.BIND_ASSETS: self._bind_assets,
            Stage.LOAD_FILES: self._load_files,
        }
        for stage in STAGES:
            handlers[stage]()
            self.completed.append(stage)

        self.plugins.process_model_load(self.tree)

    @property
    def is_loaded(self) -> bool:
        return len(self.completed) == len(STAGES)

    def _build(self, events: Iterable[ElementEvent]) -> None:
        TreeBuilder(self.tree).build(events)
        logger.info(f"Built scene tree with {len(self.tree)} nodes")

    def _resolve_defaults(self) -> None:
        applied = DefaultResolver(self.tree).resolve()
        logger.info(f"Resolved default classes ({applied} attributes set)")

    def _bind_assets(self) -> None:
        bound = self.assets.apply_assets()
        logger.info(f"Bound {bound} asset references")

    def _load_files(self) -> None:
        files = self.assets.to_load_files()
        if not files:
            return

        loader = AssetFileLoader(
            self.config.asset_base(self.base_dir),
            image_suffixes=self.config.image_suffixes,
            mesh_suffixes=self.config.mesh_suffixes,
        )
        loaded = loader.load_into(self.assets, files)
        logger.info(f"Loaded {loaded} of {len(files)} asset files")

    def compile(self) -> MeshCollection:
        """Generate and compose the world-space mesh collection.

        Raises:
            CompileError: If the model is not loaded or geometry fails
        """
        if not self.is_loaded:
            raise CompileError("Model must be loaded before it can be compiled")
        return SceneComposer(self.tree, self.config).compose()

    def textures(self) -> list[TextureData]:
        """Loaded textures bound to materials, for the renderer."""
        return self.assets.loaded_textures()

    def publish(self, state: RenderState) -> MeshCollection:
        """Compile and hand the result to ``state`` in one step."""
        collection = self.compile()
        state.publish(collection, self.textures())
        return collection

    def step(self) -> None:
        """Run the plugins' per-step hooks."""
        self.plugins.process_sim_loop(self.tree)

    def __repr__(self) -> str:
        stages = ", ".join(stage.value for stage in self.completed)
        return f"SceneModel({len(self.tree)} nodes, stages=[{stages}])"
