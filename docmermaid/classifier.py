# docmermaid/classifier.py
"""State machine turning a declaration's annotations into typed attrs.

The Inside/Outside location is folded across all fragments of one
declaration, so a diagram block may open in one docstring line and close
several lines later. State never outlives a single ``classify`` call.

Transitions for each token of a fragment, checked in this order:

    OUTSIDE  include_mmd!(...)        -> IncludeAnchor           OUTSIDE
    OUTSIDE  ``` followed by mermaid  -> PlainText?, DiagramStart INSIDE
    INSIDE   ```                      -> DiagramLine?, DiagramEnd OUTSIDE
    INSIDE   include_mmd!(...)        -> StructuralError
    any      anything else            -> buffered                unchanged

At the end of each fragment the buffer is flushed as PlainText (outside)
or DiagramLine (inside, only if not blank).
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .attrs import (
    Annotation,
    Attr,
    DiagramEnd,
    DiagramLine,
    DiagramStart,
    DocComment,
    Forward,
    IncludeAnchor,
    Location,
    Origin,
    PlainText,
)
from .errors import StructuralError
from .scanner import MERMAID, TokenKind, tokenize

logger = logging.getLogger(__name__)

UNTERMINATED_ERROR = "diagram code block is not terminated"
UNEXPECTED_ATTR_ERROR = (
    "unexpected attribute inside a diagram definition: only documentation is allowed"
)
INCLUDE_INSIDE_ERROR = "include_mmd! is not allowed inside a diagram code block"


@dataclass(frozen=True)
class ClassifierState:
    """Location carried between fragments, plus where the open block began."""

    location: Location = Location.OUTSIDE
    opened_at: Optional[Origin] = None

    @property
    def inside(self) -> bool:
        return self.location is Location.INSIDE


def classify_fragment(
    text: str,
    location: Location,
    fragment_index: int = 0,
) -> Tuple[Location, List[Attr], Optional[Origin]]:
    """Classify the tokens of one fragment.

    Args:
        text: Raw fragment text.
        location: Location before the fragment.
        fragment_index: Index of the fragment, used for origins.

    Returns:
        Tuple of (location after the fragment, attrs, origin of the last
        DiagramStart emitted in this fragment or None).

    Raises:
        StructuralError: If an include directive appears inside a block.
    """
    tokens = tokenize(text)

    # Empty documentation lines are kept for spacing
    if not tokens and location is Location.OUTSIDE:
        return location, [PlainText("")], None

    attrs: List[Attr] = []
    buffer: List[str] = []
    opened_at: Optional[Origin] = None

    def flush_as_text() -> None:
        if buffer:
            attrs.append(PlainText(" ".join(buffer)))
            buffer.clear()

    def flush_as_line() -> None:
        line = " ".join(buffer)
        buffer.clear()
        if line.strip():
            attrs.append(DiagramLine(line))

    i = 0
    while i < len(tokens):
        token = tokens[i]
        lookahead = tokens[i + 1] if i + 1 < len(tokens) else None
        origin = Origin(fragment_index, token.position)

        if location is Location.OUTSIDE and token.kind is TokenKind.INCLUDE:
            attrs.append(IncludeAnchor(token.path, origin))
        elif (
            location is Location.OUTSIDE
            and token.kind is TokenKind.FENCE
            and lookahead is not None
            and lookahead.kind is TokenKind.WORD
            and lookahead.text == MERMAID
        ):
            i += 1
            flush_as_text()
            attrs.append(DiagramStart(origin))
            location = Location.INSIDE
            opened_at = origin
        elif location is Location.INSIDE and token.kind is TokenKind.FENCE:
            flush_as_line()
            attrs.append(DiagramEnd())
            location = Location.OUTSIDE
        elif location is Location.INSIDE and token.kind is TokenKind.INCLUDE:
            raise StructuralError(INCLUDE_INSIDE_ERROR, origin)
        else:
            buffer.append(token.text)
        i += 1

    if location is Location.INSIDE:
        flush_as_line()
    else:
        flush_as_text()

    return location, attrs, opened_at


def step(
    state: ClassifierState,
    annotation: Annotation,
    index: int,
) -> Tuple[ClassifierState, List[Attr]]:
    """Fold one annotation into the classifier state.

    Returns:
        Tuple of (new state, attrs produced by this annotation).
    """
    if isinstance(annotation, DocComment):
        location, attrs, opened_at = classify_fragment(
            annotation.text, state.location, index
        )
        if location is Location.OUTSIDE:
            opened_at = None
        elif opened_at is None:
            opened_at = state.opened_at
        return ClassifierState(location, opened_at), attrs

    if isinstance(annotation, Forward):
        if state.inside:
            raise StructuralError(UNEXPECTED_ATTR_ERROR, Origin(index, 0))
        return state, [annotation]

    raise TypeError(f"unsupported annotation: {annotation!r}")


def classify(annotations: Sequence[Annotation]) -> List[Attr]:
    """Classify every annotation of one declaration.

    Raises:
        StructuralError: If a diagram block is left open after the last
            annotation (the error carries the block's opening origin), or if
            anything but documentation appears inside a block.
    """
    state = ClassifierState()
    attrs: List[Attr] = []

    for index, annotation in enumerate(annotations):
        state, produced = step(state, annotation, index)
        attrs.extend(produced)

    if state.inside:
        raise StructuralError(UNTERMINATED_ERROR, state.opened_at)

    logger.debug("classified %d annotation(s) into %d attr(s)", len(annotations), len(attrs))
    return attrs
