"""Turn a scene document into a stream of element events."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator

import lxml.etree as ET

from ..core.errors import ParseError


class EventType(Enum):
    START = "start"
    END = "end"
    EMPTY = "empty"


@dataclass(frozen=True)
class ElementEvent:
    """One element event.

    Attributes:
        type: START for an element with children, EMPTY for one without,
            END when an element with children closes
        tag: Local tag name (namespace stripped)
        attrs: Attributes in document order (empty for END)
        line: Source line of the element, if known
    """

    type: EventType
    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    line: int | None = None

    @classmethod
    def start(cls, tag: str, attrs: dict[str, str] | None = None) -> ElementEvent:
        return cls(EventType.START, tag, dict(attrs or {}))

    @classmethod
    def empty(cls, tag: str, attrs: dict[str, str] | None = None) -> ElementEvent:
        return cls(EventType.EMPTY, tag, dict(attrs or {}))

    @classmethod
    def end(cls, tag: str) -> ElementEvent:
        return cls(EventType.END, tag)


def _local_name(element: ET._Element) -> str:
    return ET.QName(element).localname


def _from_element(event_type: EventType, element: ET._Element) -> ElementEvent:
    attrs = {ET.QName(key).localname: value for key, value in element.attrib.items()}
    return ElementEvent(event_type, _local_name(element), attrs, element.sourceline)


def iter_events(source: str | Path | bytes) -> Iterator[ElementEvent]:
    """Yield element events for a document.

    An element whose start is directly followed by its own end (no child
    elements) is reported as a single EMPTY event.

    Args:
        source: Path to a document file, or the document content as bytes

    Raises:
        ParseError: If the document is not well-formed or cannot be decoded
    """
    if isinstance(source, bytes):
        stream = io.BytesIO(source)
    else:
        stream = str(source)

    pending: ET._Element | None = None
    try:
        for action, element in ET.iterparse(stream, events=("start", "end")):
            if action == "start":
                if pending is not None:
                    yield _from_element(EventType.START, pending)
                pending = element
                continue

            if pending is element:
                yield _from_element(EventType.EMPTY, element)
                pending = None
            else:
                yield ElementEvent(EventType.END, _local_name(element), line=element.sourceline)
            element.clear()
            while element.getprevious() is not None:
                del element.getparent()[0]
    except ET.XMLSyntaxError as e:
        raise ParseError(f"Malformed document: {e}") from e


def events_from_string(text: str) -> Iterator[ElementEvent]:
    """Yield element events for a document held in a string."""
    return iter_events(text.encode("utf-8"))
