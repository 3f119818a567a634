"""Scene node variants and attribute parsing.

A node is a closed tagged variant: a ``NodeKind`` plus a payload dataclass
holding the typed fields for that kind. Behavior that differs per kind is
looked up in tables keyed by ``NodeKind`` instead of living on subclasses.

Attributes follow first-write-wins: once a key is recorded on a node, any
later write to it is refused, so default classes only fill gaps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from .errors import AttributeValueError
from .transform import Transform

logger = logging.getLogger(__name__)

DEFAULT_CLASS = "main"

# Upload order of the six faces of a cube texture
CUBE_FACE_ORDER = ("L", "R", "D", "U", "F", "B")


class NodeKind(str, Enum):
    """Element kinds understood by the compiler, valued by tag name."""

    WORLDBODY = "worldbody"
    BODY = "body"
    GEOM = "geom"
    JOINT = "joint"
    DEFAULT = "default"
    ASSET = "asset"
    MESH = "mesh"
    TEXTURE = "texture"
    MATERIAL = "material"

    @classmethod
    def from_tag(cls, tag: str) -> NodeKind | None:
        """Kind for a tag name, or None when the tag is not understood."""
        try:
            return cls(tag)
        except ValueError:
            return None

    @property
    def is_container(self) -> bool:
        """True for kinds that stay open on the builder stack."""
        return self in _CONTAINERS

    @property
    def is_classed(self) -> bool:
        """True for kinds that take part in default class resolution."""
        return self in _CLASSED


_CONTAINERS = frozenset({NodeKind.WORLDBODY, NodeKind.BODY, NodeKind.DEFAULT, NodeKind.ASSET})
_CLASSED = frozenset({
    NodeKind.WORLDBODY, NodeKind.BODY, NodeKind.GEOM, NodeKind.JOINT, NodeKind.DEFAULT,
})


class GeomType(str, Enum):
    PLANE = "plane"
    HFIELD = "hfield"
    SPHERE = "sphere"
    CAPSULE = "capsule"
    ELLIPSOID = "ellipsoid"
    CYLINDER = "cylinder"
    BOX = "box"
    MESH = "mesh"
    SDF = "sdf"


class JointType(str, Enum):
    FREE = "free"
    BALL = "ball"
    SLIDE = "slide"
    HINGE = "hinge"


class TextureType(str, Enum):
    TWO_D = "2d"
    CUBE = "cube"
    SKYBOX = "skybox"


class MeshContent(Enum):
    """Where a mesh asset's geometry comes from."""

    INLINE = "inline"
    FILE = "file"


# ----------------------------------------------------------------------------
# Value parsing
# ----------------------------------------------------------------------------


def parse_floats(
    key: str,
    value: str,
    count: int | None = None,
    min_count: int = 0,
    max_count: int | None = None,
    multiple_of: int | None = None,
) -> NDArray[np.float64]:
    """Parse whitespace-separated floats, checking the token count.

    Raises:
        AttributeValueError: On a non-numeric token or a wrong token count
    """
    tokens = value.split()
    try:
        values = np.array([float(token) for token in tokens], dtype=np.float64)
    except ValueError as e:
        raise AttributeValueError(key, value, "non-numeric token") from e

    if count is not None and len(values) != count:
        raise AttributeValueError(key, value, f"expected {count} values, got {len(values)}")
    if len(values) < min_count:
        raise AttributeValueError(key, value, f"expected at least {min_count} values")
    if max_count is not None and len(values) > max_count:
        raise AttributeValueError(key, value, f"expected at most {max_count} values")
    if multiple_of is not None and len(values) % multiple_of:
        raise AttributeValueError(key, value, f"expected a multiple of {multiple_of} values")
    return values


def parse_ints(key: str, value: str, count: int) -> tuple[int, ...]:
    """Parse exactly ``count`` whitespace-separated non-negative integers."""
    tokens = value.split()
    if len(tokens) != count:
        raise AttributeValueError(key, value, f"expected {count} values, got {len(tokens)}")
    try:
        values = tuple(int(token) for token in tokens)
    except ValueError as e:
        raise AttributeValueError(key, value, "non-integer token") from e
    if any(v < 0 for v in values):
        raise AttributeValueError(key, value, "negative value")
    return values


# ----------------------------------------------------------------------------
# Payloads
# ----------------------------------------------------------------------------


@dataclass
class WorldBodyData:
    name: str = ""


@dataclass
class BodyData:
    name: str = ""
    transform: Transform = field(default_factory=Transform)


@dataclass
class GeomData:
    """Typed fields of a geom.

    ``size`` is always three floats; a document giving fewer leaves the
    remaining entries at zero. ``mesh_id`` and ``material_id`` are arena ids
    of the bound assets, filled in by the asset binding pass.
    """

    name: str = ""
    geom_type: GeomType = GeomType.BOX
    transform: Transform = field(default_factory=Transform)
    size: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    mesh_name: str | None = None
    material_name: str | None = None
    rgba: NDArray[np.float64] | None = None
    mesh_id: int | None = None
    material_id: int | None = None


@dataclass
class JointData:
    name: str = ""
    joint_type: JointType = JointType.FREE
    axis: NDArray[np.float64] = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))


@dataclass
class DefaultsData:
    """A default class scope.

    ``element_attrs`` maps a tag name to the attributes a matching element of
    that tag inherits from this scope.
    """

    element_attrs: dict[str, dict[str, str]] = field(default_factory=dict)


@dataclass
class AssetsData:
    pass


@dataclass
class MeshData:
    name: str = ""
    file: str = ""
    content: MeshContent = MeshContent.INLINE
    vertices: NDArray[np.float64] = field(default_factory=lambda: np.zeros((0, 3)))
    indices: NDArray[np.uint32] = field(default_factory=lambda: np.zeros(0, dtype=np.uint32))
    scale: NDArray[np.float64] | None = None

    @property
    def asset_name(self) -> str:
        """Lookup name: the declared name, else the file stem."""
        if self.name:
            return self.name
        return Path(self.file).stem if self.file else ""


@dataclass
class TextureData:
    """A texture asset and, once loaded, its decoded RGB8 payload."""

    name: str = ""
    file: str = ""
    texture_type: TextureType = TextureType.CUBE
    gridsize: tuple[int, int] = (1, 1)
    gridlayout: str = ""
    rgb1: tuple[float, float, float] = (0.5, 0.4, 0.3)
    dimensions: tuple[int, int] | None = None
    file_data: bytes | None = None

    @property
    def asset_name(self) -> str:
        """Lookup name: the declared name, else the file stem."""
        if self.name:
            return self.name
        return Path(self.file).stem if self.file else ""

    @property
    def is_loaded(self) -> bool:
        return self.file_data is not None and self.dimensions is not None

    def cube_face(self, face: str) -> bytes:
        """RGB8 pixels of one cube face cut out of the packed image."""
        from ..assets.texture import extract_cube_face

        return extract_cube_face(self, face)

    def cube_faces(self) -> list[bytes]:
        """All six faces in upload order."""
        return [self.cube_face(face) for face in CUBE_FACE_ORDER]


@dataclass
class MaterialData:
    name: str = ""
    texture_name: str | None = None
    rgba: NDArray[np.float64] | None = None
    texture_id: int | None = None

    @property
    def asset_name(self) -> str:
        return self.name


Payload = (
    WorldBodyData | BodyData | GeomData | JointData | DefaultsData | AssetsData
    | MeshData | TextureData | MaterialData
)

_PAYLOADS: dict[NodeKind, Callable[[], Any]] = {
    NodeKind.WORLDBODY: WorldBodyData,
    NodeKind.BODY: BodyData,
    NodeKind.GEOM: GeomData,
    NodeKind.JOINT: JointData,
    NodeKind.DEFAULT: DefaultsData,
    NodeKind.ASSET: AssetsData,
    NodeKind.MESH: MeshData,
    NodeKind.TEXTURE: TextureData,
    NodeKind.MATERIAL: MaterialData,
}


# ----------------------------------------------------------------------------
# Attribute setters
# ----------------------------------------------------------------------------
# Each setter parses one attribute into the payload. Keys without a setter
# are not recognized for that kind and are dropped.

Setter = Callable[[Any, str, str], None]


def _keep(data: Any, key: str, value: str) -> None:
    """Recorded in the attribute map only."""


def _set_name(data: Any, key: str, value: str) -> None:
    data.name = value


def _set_pos(data: Any, key: str, value: str) -> None:
    data.transform.translation = parse_floats(key, value, count=3)


def _set_euler(data: Any, key: str, value: str) -> None:
    data.transform.rotation = parse_floats(key, value, count=3)


def _set_body_scale(data: BodyData, key: str, value: str) -> None:
    data.transform.scale = parse_floats(key, value, count=3)


def _set_geom_type(data: GeomData, key: str, value: str) -> None:
    try:
        data.geom_type = GeomType(value)
    except ValueError:
        logger.warning(f"Unknown geom type {value!r}, using box")
        data.geom_type = GeomType.BOX


def _set_geom_size(data: GeomData, key: str, value: str) -> None:
    values = parse_floats(key, value, min_count=1, max_count=3)
    size = np.zeros(3)
    size[: len(values)] = values
    data.size = size


def _set_geom_mesh(data: GeomData, key: str, value: str) -> None:
    data.mesh_name = value


def _set_geom_material(data: GeomData, key: str, value: str) -> None:
    data.material_name = value


def _set_rgba(data: Any, key: str, value: str) -> None:
    data.rgba = parse_floats(key, value, count=4)


def _set_joint_type(data: JointData, key: str, value: str) -> None:
    try:
        data.joint_type = JointType(value)
    except ValueError as e:
        raise AttributeValueError(key, value, "unknown joint type") from e


def _set_joint_axis(data: JointData, key: str, value: str) -> None:
    data.axis = parse_floats(key, value, count=3)


def _set_mesh_file(data: MeshData, key: str, value: str) -> None:
    data.file = value
    data.content = MeshContent.FILE


def _set_mesh_vertex(data: MeshData, key: str, value: str) -> None:
    data.vertices = parse_floats(key, value, multiple_of=3).reshape(-1, 3)
    data.content = MeshContent.INLINE


def _set_mesh_scale(data: MeshData, key: str, value: str) -> None:
    data.scale = parse_floats(key, value, count=3)


def _set_texture_file(data: TextureData, key: str, value: str) -> None:
    data.file = value


def _set_texture_type(data: TextureData, key: str, value: str) -> None:
    try:
        data.texture_type = TextureType(value.lower())
    except ValueError:
        logger.warning(f"Unknown texture type {value!r}, keeping {data.texture_type.value}")


def _set_gridsize(data: TextureData, key: str, value: str) -> None:
    rows, cols = parse_ints(key, value, count=2)
    if rows == 0 or cols == 0:
        raise AttributeValueError(key, value, "grid dimensions must be positive")
    data.gridsize = (rows, cols)


def _set_gridlayout(data: TextureData, key: str, value: str) -> None:
    data.gridlayout = value


def _set_rgb1(data: TextureData, key: str, value: str) -> None:
    data.rgb1 = tuple(float(v) for v in parse_floats(key, value, count=3))


def _set_material_texture(data: MaterialData, key: str, value: str) -> None:
    data.texture_name = value


ATTRIBUTE_SETTERS: dict[NodeKind, dict[str, Setter]] = {
    NodeKind.WORLDBODY: {
        "name": _set_name,
        "class": _keep,
        "childclass": _keep,
    },
    NodeKind.BODY: {
        "name": _set_name,
        "class": _keep,
        "childclass": _keep,
        "pos": _set_pos,
        "euler": _set_euler,
        "scale": _set_body_scale,
    },
    NodeKind.GEOM: {
        "name": _set_name,
        "class": _keep,
        "type": _set_geom_type,
        "pos": _set_pos,
        "euler": _set_euler,
        "size": _set_geom_size,
        "mesh": _set_geom_mesh,
        "material": _set_geom_material,
        "rgba": _set_rgba,
    },
    NodeKind.JOINT: {
        "name": _set_name,
        "class": _keep,
        "type": _set_joint_type,
        "axis": _set_joint_axis,
    },
    NodeKind.DEFAULT: {
        "class": _keep,
    },
    NodeKind.ASSET: {},
    NodeKind.MESH: {
        "name": _set_name,
        "file": _set_mesh_file,
        "vertex": _set_mesh_vertex,
        "scale": _set_mesh_scale,
    },
    NodeKind.TEXTURE: {
        "name": _set_name,
        "file": _set_texture_file,
        "type": _set_texture_type,
        "gridsize": _set_gridsize,
        "gridlayout": _set_gridlayout,
        "rgb1": _set_rgb1,
    },
    NodeKind.MATERIAL: {
        "name": _set_name,
        "texture": _set_material_texture,
        "rgba": _set_rgba,
    },
}


# ----------------------------------------------------------------------------
# Node
# ----------------------------------------------------------------------------


@dataclass
class SceneNode:
    """One element of the scene tree.

    Nodes live in a ``SceneTree`` arena; ``id``, ``parent`` and ``children``
    are arena ids. A node created with ``SceneNode.create`` is detached
    (``id == -1``) until the tree attaches it.

    Example:
        geom = SceneNode.create(NodeKind.GEOM)
        geom.set_attr("type", "box")
        geom.set_attr("size", "1 1 1")
        geom.set_attr("size", "2 2 2")  # refused, first write wins
    """

    kind: NodeKind
    data: Payload
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[int] = field(default_factory=list)
    parent: int | None = None
    id: int = -1

    @classmethod
    def create(cls, kind: NodeKind, attrs: dict[str, str] | None = None) -> SceneNode:
        """Create a detached node of ``kind``, applying ``attrs`` in order."""
        node = cls(kind=kind, data=_PAYLOADS[kind]())
        for key, value in (attrs or {}).items():
            node.set_attr(key, value)
        return node

    @property
    def tag(self) -> str:
        """Element tag name of this node's kind."""
        return self.kind.value

    @property
    def name(self) -> str:
        return getattr(self.data, "name", "")

    @property
    def class_name(self) -> str:
        """Resolved default class: the ``class`` attribute, else "main".

        Kinds that do not take part in default resolution have no class.
        """
        if not self.kind.is_classed:
            return ""
        return self.attrs.get("class", DEFAULT_CLASS)

    @property
    def childclass(self) -> str | None:
        return self.attrs.get("childclass")

    def has_attr(self, key: str) -> bool:
        return key in self.attrs

    def set_attr(self, key: str, value: str) -> bool:
        """Set an attribute unless it is already set or not recognized.

        Args:
            key: Attribute name
            value: Raw attribute text

        Returns:
            True if the attribute was recorded, False if it was already set
            on this node or is not recognized for this kind

        Raises:
            AttributeValueError: If the value cannot be parsed
        """
        if key in self.attrs:
            return False

        setter = ATTRIBUTE_SETTERS[self.kind].get(key)
        if setter is None:
            return False

        setter(self.data, key, value)
        self.attrs[key] = value
        return True

    def __repr__(self) -> str:
        name_str = f" {self.name!r}" if self.name else ""
        children_str = f", children={len(self.children)}" if self.children else ""
        return f"SceneNode({self.tag}{name_str}, id={self.id}{children_str})"
