# docmermaid/decorator.py
"""``@mermaid_doc`` decorator rewriting an object's docstring in place."""

from typing import Any, Optional

from .plugin import MermaidDocPlugin, create_plugin

_default_plugin: Optional[MermaidDocPlugin] = None


def get_default_plugin() -> MermaidDocPlugin:
    """Return the shared plugin, initialized from the environment on first use."""
    global _default_plugin
    if _default_plugin is None:
        _default_plugin = create_plugin()
        _default_plugin.initialize()
    return _default_plugin


def mermaid_doc(obj: Any = None, *, plugin: Optional[MermaidDocPlugin] = None) -> Any:
    """Render mermaid blocks in the decorated object's docstring.

    Usable bare or with arguments::

        @mermaid_doc
        def example():
            '''Docs

            ```mermaid
            graph LR
                a --> b
            ```
            '''

        @mermaid_doc(plugin=my_plugin)
        class Example: ...

    Raises:
        StructuralError: At decoration time, if a diagram block is malformed.
    """
    def decorate(target: Any) -> Any:
        doc = getattr(target, "__doc__", None)
        if not doc:
            return target
        target.__doc__ = (plugin or get_default_plugin()).process_docstring(doc)
        return target

    if obj is None:
        return decorate
    return decorate(obj)
