# docmermaid/__init__.py
"""Render mermaid diagrams embedded in Python documentation.

Detects ```mermaid code blocks and include_mmd!("path.mmd") directives in
docstrings and replaces them with ``<div class="mermaid">`` markup plus a
script loading the mermaid runtime (locally, then remotely, then showing a
notice explaining how to view the docs).
"""

from .attrs import DocComment, Forward
from .decorator import mermaid_doc
from .errors import (
    AssetPlacementError,
    ConfigValidationError,
    IncludeIOError,
    MermaidDocError,
    StructuralError,
)
from .plugin import DeclarationResult, MermaidDocPlugin, create_plugin, transform

__all__ = [
    "AssetPlacementError",
    "ConfigValidationError",
    "DeclarationResult",
    "DocComment",
    "Forward",
    "IncludeIOError",
    "MermaidDocError",
    "MermaidDocPlugin",
    "StructuralError",
    "create_plugin",
    "mermaid_doc",
    "transform",
]
