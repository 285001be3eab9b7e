# docmermaid/assembler.py
"""Reassembles classified attrs into documentation annotations.

Each diagram becomes two DocComment annotations: a module script that
loads the mermaid runtime, and the diagram source wrapped in a
``<div class="mermaid">`` container that the runtime renders in place.
"""

import html
import logging
from pathlib import PurePath
from typing import Iterable, List, Optional, Sequence

from .assets import AssetPlacer, NullAssetPlacer, local_module_path
from .attrs import (
    Annotation,
    Attr,
    DiagramEnd,
    DiagramLine,
    DiagramStart,
    DocComment,
    Forward,
    IncludeAnchor,
    PlainText,
)
from .classifier import UNEXPECTED_ATTR_ERROR, UNTERMINATED_ERROR
from .errors import MermaidDocError, StructuralError
from .includes import IncludeResolver

logger = logging.getLogger(__name__)

DIAGRAM_OPEN = '<div class="mermaid">'
DIAGRAM_CLOSE = "</div>"

DEFAULT_REMOTE_URL = "https://unpkg.com/mermaid@10/dist/mermaid.esm.min.mjs"

# Placeholders are substituted with str.replace: the script itself is full
# of braces.
LOADER_SCRIPT_TEMPLATE = r"""
    const localModulePath = "{localModulePath}";
    const remoteFallbackUrl = "{remoteFallbackUrl}";

    function initializeMermaid(mermaid) {
      var docmermaidTheme =
        window.matchMedia && window.matchMedia('(prefers-color-scheme: dark)').matches
        ? 'dark'
        : 'default';

      mermaid.initialize({
        'startOnLoad': true,
        'theme': docmermaidTheme,
        'logLevel': 3 });
      mermaid.run();
    }

    function failedToLoadWarnings() {
      for (var elem of document.getElementsByClassName("mermaid")) {
        elem.innerHTML =
        `<div><mark>
          &#9888; Cannot render diagram! Failed to import the mermaid module
          from the local file and from the remote location.
          Either browse the documentation over HTTP using a
          <a href="https://developer.mozilla.org/en-US/docs/Learn/Common_questions/Tools_and_setup/set_up_a_local_testing_server">
            local web server
          </a>, for example:
          python3 -m http.server --directory {docsDir}, <br> or enable local
          file access in your browser, for example by starting Chrome with
          the flag '--allow-file-access-from-files'.
        </mark></div>`;
      }
    }

    function documentationRoot() {
      var root = document.documentElement.dataset.content_root;
      return root === undefined ? "" : root;
    }

    // Opening the docs straight from disk makes the local import fail;
    // the remote copy is tried next, then a notice replaces the diagrams.
    try {
      const { default: mermaid } = await import(documentationRoot() + localModulePath);
      initializeMermaid(mermaid);
    } catch (e) {
      try {
        const { default: mermaid } = await import(remoteFallbackUrl);
        initializeMermaid(mermaid);
      } catch (e) {
        failedToLoadWarnings();
      }
    }
"""


DEFAULT_DOCS_DIR_HINT = "path/to/docs"


def _docs_dir_hint(docs_dir) -> str:
    # Ends up inside a JS template literal that is assigned to innerHTML
    hint = PurePath(docs_dir).as_posix() if docs_dir else DEFAULT_DOCS_DIR_HINT
    return html.escape(hint).replace("`", "&#96;").replace("$", "&#36;")


def render_loader_script(local_path: str, remote_url: str, docs_dir=None) -> str:
    """Substitute the template parameters and wrap in a module script.

    ``docs_dir`` only feeds the "serve the docs over HTTP" hint shown when
    the runtime cannot be loaded.
    """
    body = (
        LOADER_SCRIPT_TEMPLATE
        .replace("{localModulePath}", local_path)
        .replace("{remoteFallbackUrl}", remote_url)
        .replace("{docsDir}", _docs_dir_hint(docs_dir))
    )
    return f'<script type="module">{body}</script>'


def wrap_diagram(lines: Iterable[str]) -> str:
    """Join diagram lines inside the container markup."""
    return "\n".join([DIAGRAM_OPEN, *lines, DIAGRAM_CLOSE])


class Assembler:
    """Turns an attr sequence back into annotations.

    Include and asset failures do not stop assembly. The ones hit during
    the latest ``assemble`` call are available from ``warnings``.
    """

    def __init__(
        self,
        include_resolver: Optional[IncludeResolver] = None,
        asset_placer: Optional[AssetPlacer] = None,
        local_path: Optional[str] = None,
        remote_url: str = DEFAULT_REMOTE_URL,
        docs_dir=None,
    ):
        self._include_resolver = include_resolver or IncludeResolver()
        self._asset_placer = asset_placer or NullAssetPlacer()
        self._local_path = local_path or local_module_path()
        self._remote_url = remote_url
        self._docs_dir = docs_dir
        self._warnings: List[MermaidDocError] = []

    @property
    def include_resolver(self) -> IncludeResolver:
        return self._include_resolver

    @property
    def warnings(self) -> List[MermaidDocError]:
        return list(self._warnings)

    def loader_script(self) -> str:
        return render_loader_script(self._local_path, self._remote_url, self._docs_dir)

    def render_diagram(self, lines: Iterable[str]) -> List[Annotation]:
        """Return the script and container annotations for one diagram."""
        body = wrap_diagram(lines)
        self._asset_placer.ensure_placed()
        return [DocComment(self.loader_script()), DocComment(body)]

    def assemble(self, attrs: Sequence[Attr]) -> List[Annotation]:
        """Reassemble annotations from classified attrs, preserving order.

        Raises:
            StructuralError: If a diagram run contains anything but lines
                or is never closed.
        """
        # Drop anything left over from a call that did not go through here
        self._include_resolver.take_errors()
        self._asset_placer.take_errors()
        try:
            return self._assemble(attrs)
        finally:
            self._warnings = [
                *self._include_resolver.take_errors(),
                *self._asset_placer.take_errors(),
            ]

    def _assemble(self, attrs: Sequence[Attr]) -> List[Annotation]:
        out: List[Annotation] = []
        i = 0
        while i < len(attrs):
            attr = attrs[i]
            i += 1

            if isinstance(attr, Forward):
                out.append(attr)
            elif isinstance(attr, PlainText):
                out.append(DocComment(attr.text))
            elif isinstance(attr, DiagramStart):
                lines: List[str] = []
                while True:
                    if i >= len(attrs):
                        raise StructuralError(UNTERMINATED_ERROR, attr.origin)
                    entry = attrs[i]
                    i += 1
                    if isinstance(entry, DiagramEnd):
                        break
                    if not isinstance(entry, DiagramLine):
                        raise StructuralError(UNEXPECTED_ATTR_ERROR, attr.origin)
                    lines.append(entry.text)
                out.extend(self.render_diagram(lines))
            elif isinstance(attr, DiagramLine):
                # The classifier never emits lines outside a run
                logger.warning("ignoring diagram line outside of a diagram: %r", attr.text)
            elif isinstance(attr, DiagramEnd):
                pass
            elif isinstance(attr, IncludeAnchor):
                data = self._include_resolver.resolve(attr.path)
                if data is None:
                    continue
                out.extend(self.render_diagram([data]))
            else:
                raise TypeError(f"unsupported attr: {attr!r}")

        return out
