"""Read the files that assets refer to."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from PIL import Image

from ..core.errors import AssetResolutionError
from .manager import AssetManager

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".bmp")
DEFAULT_MESH_SUFFIXES = (".obj",)


class AssetFileLoader:
    """Decodes asset files and pushes their content into an ``AssetManager``.

    Images are decoded to RGB8; mesh files are read as text. Relative paths
    are resolved against ``base_dir``.
    """

    def __init__(
        self,
        base_dir: Path,
        image_suffixes: Iterable[str] = DEFAULT_IMAGE_SUFFIXES,
        mesh_suffixes: Iterable[str] = DEFAULT_MESH_SUFFIXES,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.image_suffixes = {suffix.lower() for suffix in image_suffixes}
        self.mesh_suffixes = {suffix.lower() for suffix in mesh_suffixes}

    def resolve(self, file: str) -> Path:
        """Absolute location of an asset file."""
        path = Path(file)
        return path if path.is_absolute() else self.base_dir / path

    def read_image(self, file: str) -> tuple[int, int, bytes]:
        """Decode an image into (width, height, RGB8 bytes).

        Raises:
            AssetResolutionError: If the file is missing or not an image
        """
        path = self.resolve(file)
        try:
            with Image.open(path) as image:
                rgb = image.convert("RGB")
        except FileNotFoundError as e:
            raise AssetResolutionError(f"Texture file not found: {path}") from e
        except OSError as e:
            raise AssetResolutionError(f"Could not decode image {path}: {e}") from e
        return rgb.width, rgb.height, rgb.tobytes()

    def read_text(self, file: str) -> str:
        """Read a mesh file as text.

        Raises:
            AssetResolutionError: If the file is missing
        """
        path = self.resolve(file)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise AssetResolutionError(f"Mesh file not found: {path}") from e

    def load_into(self, manager: AssetManager, files: Iterable[str]) -> int:
        """Read each file and hand its content to ``manager``.

        Returns:
            Number of files loaded
        """
        dimensions: dict[str, tuple[int, int]] = {}
        pixels: dict[str, bytes] = {}
        texts: dict[str, str] = {}

        for file in files:
            suffix = Path(file).suffix.lower()
            if suffix in self.image_suffixes:
                width, height, data = self.read_image(file)
                dimensions[file] = (width, height)
                pixels[file] = data
            elif suffix in self.mesh_suffixes:
                texts[file] = self.read_text(file)
            else:
                logger.warning(f"Skipping asset file with unsupported type: {file}")

        manager.load_dimensions(dimensions)
        manager.load_files(pixels)
        manager.load_obj_meshes(texts)
        return len(dimensions) + len(texts)
