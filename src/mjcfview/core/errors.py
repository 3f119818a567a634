"""Exceptions raised while compiling a scene document."""


class CompileError(Exception):
    """Base class for every fatal compilation failure.

    Any CompileError leaves the model unusable; callers should report it
    and decline to render.
    """


class ParseError(CompileError):
    """The document stream could not be read (malformed markup, bad bytes)."""


class StructuralError(CompileError):
    """An element is missing its parent, is placed illegally, or is closed
    by a tag that does not match the open element."""


class AttributeValueError(CompileError, ValueError):
    """A numeric attribute has the wrong number of tokens or a non-numeric token."""

    def __init__(self, key: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid value for attribute '{key}': {value!r} ({reason})")
        self.key = key
        self.value = value


class AssetResolutionError(CompileError, LookupError):
    """A named mesh, material or texture (or its file) could not be resolved."""


class GeometryError(CompileError):
    """Geometry could not be generated from otherwise valid input."""
