# docmermaid/errors.py
"""Exceptions raised and recorded by the docmermaid pipeline.

Only StructuralError is ever raised out of a transformation. The include
and asset errors are recovered locally: they are logged and collected on
the component that hit them so callers can inspect what was skipped.
"""

from typing import List, Optional


class MermaidDocError(Exception):
    """Base exception for docmermaid errors."""

    pass


class StructuralError(MermaidDocError):
    """Raised when a declaration's diagram blocks are malformed.

    Covers unterminated blocks, include directives inside a block and
    non-documentation annotations inside a block.
    """

    def __init__(self, message: str, origin=None):
        self.origin = origin

        if origin is not None:
            message = f"{message} (fragment {origin.fragment}, token {origin.token})"
        super().__init__(message)


class IncludeIOError(MermaidDocError):
    """Recorded when an included diagram file cannot be read."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause

        message = f"failed to read mermaid file from path {path!r}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class AssetPlacementError(MermaidDocError):
    """Recorded when the runtime bundle cannot be placed in the docs tree."""

    def __init__(self, target: str, cause: Optional[BaseException] = None):
        self.target = target
        self.cause = cause

        message = f"failed to place mermaid runtime at {target}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class ConfigValidationError(MermaidDocError):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Configuration validation failed: {'; '.join(errors)}")
