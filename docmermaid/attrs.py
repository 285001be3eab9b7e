# docmermaid/attrs.py
"""Annotation and attribute types flowing through the pipeline.

Annotations are what a declaration carries on the way in and out:
``DocComment`` for documentation text and ``Forward`` for anything opaque.
Attrs are the classifier's typed view of those annotations. The set of
attr kinds is closed; consumers dispatch on it exhaustively.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple, Optional, Union


class Location(Enum):
    """Whether the classifier is currently inside a diagram block."""

    OUTSIDE = "outside"
    INSIDE = "inside"


class Origin(NamedTuple):
    """Zero-based position of a token within a declaration's fragments."""

    fragment: int
    token: int


# ============================================================
# Annotations (input / output contract)
# ============================================================

@dataclass(frozen=True)
class DocComment:
    """Text-bearing documentation annotation (one docstring line)."""

    text: str


@dataclass(frozen=True)
class Forward:
    """Opaque annotation passed through untouched."""

    payload: Any


Annotation = Union[DocComment, Forward]


# ============================================================
# Attrs (classifier output)
# ============================================================

@dataclass(frozen=True)
class PlainText:
    """Documentation text outside any diagram."""

    text: str


@dataclass(frozen=True)
class DiagramStart:
    """Opening ```mermaid marker."""

    origin: Optional[Origin] = field(default=None, compare=False)


@dataclass(frozen=True)
class DiagramLine:
    """One line of diagram source."""

    text: str


@dataclass(frozen=True)
class DiagramEnd:
    """Closing ``` marker."""

    pass


@dataclass(frozen=True)
class IncludeAnchor:
    """Reference to a diagram file relative to the project root."""

    path: str
    origin: Optional[Origin] = field(default=None, compare=False)


# Forward is shared between annotations and attrs: it is never inspected.
Attr = Union[Forward, PlainText, DiagramStart, DiagramLine, DiagramEnd, IncludeAnchor]
