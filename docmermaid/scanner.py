# docmermaid/scanner.py
"""Tokenizer for documentation fragments.

A fragment is split on the fence literal first, so a fence is never broken
across tokens, then every remaining span is split on single spaces. Empty
words are kept: joining the words back with one space restores runs of
spaces, but whitespace around fences is normalized. That loss is accepted.

    >>> [t.text for t in tokenize("left```mermaid abcd```")]
    ['left', '```', 'mermaid', 'abcd', '```']
"""

import re
from enum import Enum
from typing import List, NamedTuple, Optional

FENCE = "```"
MERMAID = "mermaid"
INCLUDE_PREFIX = "include_mmd!"

_FENCE_SPLIT = re.compile("(" + re.escape(FENCE) + ")")


class TokenKind(Enum):
    """Kinds of token produced by the scanner."""

    FENCE = "fence"
    WORD = "word"
    INCLUDE = "include"


class Token(NamedTuple):
    """A single token of a fragment.

    ``path`` is only set for INCLUDE tokens.
    """

    kind: TokenKind
    text: str
    position: int
    path: Optional[str] = None


def split_fences(text: str) -> List[str]:
    """Split text into spans, keeping each fence as its own span.

    Empty spans between adjacent fences (or at either end) are dropped.
    """
    return [span for span in _FENCE_SPLIT.split(text) if span]


def parse_include(word: str) -> str:
    """Extract the relative path from an ``include_mmd!(...)`` word."""
    path = word[len(INCLUDE_PREFIX):].strip()
    path = path.lstrip("(").rstrip(")")
    return path.strip("\"'")


def tokenize(text: str) -> List[Token]:
    """Split one fragment into an ordered token list."""
    tokens: List[Token] = []
    for span in split_fences(text):
        if span == FENCE:
            tokens.append(Token(TokenKind.FENCE, span, len(tokens)))
            continue
        # str.split(" ") rather than split() so that empty words survive
        for word in span.split(" "):
            if word.startswith(INCLUDE_PREFIX):
                tokens.append(
                    Token(TokenKind.INCLUDE, word, len(tokens), parse_include(word))
                )
            else:
                tokens.append(Token(TokenKind.WORD, word, len(tokens)))
    return tokens
