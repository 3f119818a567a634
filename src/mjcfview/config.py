"""Compiler settings and loading them from YAML."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .assets.files import DEFAULT_IMAGE_SUFFIXES, DEFAULT_MESH_SUFFIXES
from .core.mesh import DEFAULT_TINT


@dataclass
class CompilerConfig:
    """Settings for compiling a scene document.

    YAML format:
    ```yaml
    asset_dir: assets/
    sphere_subdivisions: 24
    cylinder_segments: 16
    fallback_tint: [0.8, 0.7, 0.2]
    image_suffixes: [.png, .jpg]
    mesh_suffixes: [.obj]
    ```

    Attributes:
        asset_dir: Base directory for asset files; the document's directory
            when None
        sphere_subdivisions: Latitude and longitude count for spheres,
            ellipsoids and capsules
        cylinder_segments: Ring segment count for cylinders
        fallback_tint: Color of meshes with no filling
        image_suffixes: File suffixes decoded as images
        mesh_suffixes: File suffixes read as OBJ text
    """

    asset_dir: Path | None = None
    sphere_subdivisions: int = 32
    cylinder_segments: int = 32
    fallback_tint: tuple[float, float, float] = DEFAULT_TINT
    image_suffixes: tuple[str, ...] = DEFAULT_IMAGE_SUFFIXES
    mesh_suffixes: tuple[str, ...] = DEFAULT_MESH_SUFFIXES

    def __post_init__(self) -> None:
        if self.asset_dir is not None:
            self.asset_dir = Path(self.asset_dir)
        if self.sphere_subdivisions < 3:
            raise ValueError(f"sphere_subdivisions must be at least 3, got {self.sphere_subdivisions}")
        if self.cylinder_segments < 3:
            raise ValueError(f"cylinder_segments must be at least 3, got {self.cylinder_segments}")
        if len(self.fallback_tint) != 3:
            raise ValueError(f"fallback_tint needs 3 values, got {len(self.fallback_tint)}")
        self.fallback_tint = tuple(float(c) for c in self.fallback_tint)
        self.image_suffixes = tuple(self.image_suffixes)
        self.mesh_suffixes = tuple(self.mesh_suffixes)

    def asset_base(self, document_dir: Path) -> Path:
        """Directory asset files are resolved against."""
        if self.asset_dir is None:
            return document_dir
        if self.asset_dir.is_absolute():
            return self.asset_dir
        return document_dir / self.asset_dir


_KEYS = {f.name for f in fields(CompilerConfig)}


def parse_config(data: Any) -> CompilerConfig:
    """Build a config from parsed YAML data.

    Raises:
        ValueError: If the data is not a mapping or has unknown keys
    """
    if data is None:
        return CompilerConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping, got {type(data).__name__}")

    unknown = set(data) - _KEYS
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    return CompilerConfig(**data)


def load_config(path: Path | str) -> CompilerConfig:
    """Load compiler settings from a YAML file.

    An empty file yields the defaults.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the YAML format is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return parse_config(data)
