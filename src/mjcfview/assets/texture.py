"""Cutting cube map faces out of a packed texture image."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ..core.errors import AssetResolutionError

if TYPE_CHECKING:
    from ..core.nodes import TextureData

FACE_LETTERS = frozenset("LRUDFB")


def _to_byte(channel: float) -> int:
    return min(int(channel * 256), 255)


def cell_size(texture: TextureData) -> tuple[int, int]:
    """(width, height) of one grid cell of a loaded texture."""
    if texture.dimensions is None:
        raise AssetResolutionError(f"Texture {texture.asset_name!r} has no known dimensions")
    width, height = texture.dimensions
    rows, cols = texture.gridsize
    return width // cols, height // rows


def fallback_face(texture: TextureData) -> bytes:
    """One grid cell filled with the texture's ``rgb1`` color."""
    cell_width, cell_height = cell_size(texture)
    pixel = bytes(_to_byte(channel) for channel in texture.rgb1)
    return pixel * (cell_width * cell_height)


def extract_cube_face(texture: TextureData, face: str) -> bytes:
    """RGB8 pixels of ``face`` (one of L, R, U, D, F, B), row-major.

    The face's position in ``gridlayout`` picks a cell of the ``gridsize``
    grid, counted row by row. A face missing from the layout, or placed
    beyond the grid, gets a solid ``rgb1`` cell instead.

    Raises:
        ValueError: If ``face`` is not a face letter
        AssetResolutionError: If the texture has no image data, or the data
            is shorter than its dimensions require
    """
    if face not in FACE_LETTERS:
        raise ValueError(f"Unknown cube face {face!r}")
    if not texture.is_loaded:
        raise AssetResolutionError(f"Texture {texture.asset_name!r} has not been loaded")

    rows, cols = texture.gridsize
    position = texture.gridlayout.find(face)
    if position < 0 or position >= rows * cols:
        return fallback_face(texture)

    width, height = texture.dimensions
    expected = width * height * 3
    if len(texture.file_data) < expected:
        raise AssetResolutionError(
            f"Texture {texture.asset_name!r} holds {len(texture.file_data)} bytes, "
            f"expected {expected} for {width}x{height} RGB"
        )

    pixels = np.frombuffer(texture.file_data, dtype=np.uint8, count=expected)
    pixels = pixels.reshape(height, width, 3)

    row, col = divmod(position, cols)
    cell_width, cell_height = cell_size(texture)
    block = pixels[
        row * cell_height:(row + 1) * cell_height,
        col * cell_width:(col + 1) * cell_width,
    ]
    return np.ascontiguousarray(block).tobytes()
