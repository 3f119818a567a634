"""Geometry generators."""

from .base import Generator, MeshGenerator
from .hull import HullGenerator
from .imported import ImportedMeshGenerator
from .primitives import (
    BoxGenerator,
    CapsuleGenerator,
    CylinderGenerator,
    PlaneGenerator,
    SphereGenerator,
    primitive_generator,
)

__all__ = [
    "Generator",
    "MeshGenerator",
    "HullGenerator",
    "ImportedMeshGenerator",
    "BoxGenerator",
    "CapsuleGenerator",
    "CylinderGenerator",
    "PlaneGenerator",
    "SphereGenerator",
    "primitive_generator",
]
