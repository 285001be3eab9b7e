# docmermaid/plugin.py
"""Mermaid documentation plugin.

Finds ```mermaid blocks (and include_mmd! directives) in the documentation
attached to a declaration and replaces them with markup rendered by the
mermaid runtime in the browser, plus a script that loads that runtime.

Usage:
    from docmermaid import create_plugin

    plugin = create_plugin()
    plugin.initialize({"docs_dir": "build/html", "project_root": "."})

    doc = plugin.process_docstring(func.__doc__)
"""

import inspect
import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .assembler import Assembler, DEFAULT_REMOTE_URL
from .assets import AssetPlacer, NullAssetPlacer, create_placer, local_module_path
from .attrs import Annotation, DocComment
from .classifier import classify
from .config import MermaidDocConfig, load_config
from .errors import MermaidDocError, StructuralError
from .includes import IncludeResolver
from .vendor import runtime_bundle_dir

logger = logging.getLogger(__name__)


@dataclass
class DeclarationResult:
    """Outcome of processing one declaration in a batch."""

    declaration: Any
    annotations: List[Annotation]
    error: Optional[StructuralError] = None
    # Recovered include and asset failures hit while processing it
    warnings: List[MermaidDocError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def transform(
    annotations: Sequence[Annotation],
    project_root: Optional[str] = None,
    asset_placer: Optional[AssetPlacer] = None,
    remote_url: str = DEFAULT_REMOTE_URL,
) -> List[Annotation]:
    """Classify and reassemble the annotations of one declaration.

    Raises:
        StructuralError: If the declaration's diagram blocks are malformed.
    """
    assembler = Assembler(
        include_resolver=IncludeResolver(project_root),
        asset_placer=asset_placer or NullAssetPlacer(),
        remote_url=remote_url,
    )
    return assembler.assemble(classify(annotations))


def docstring_fragments(doc: str) -> List[DocComment]:
    """Split a docstring into one DocComment per cleaned line."""
    return [DocComment(line) for line in inspect.cleandoc(doc).splitlines()]


class MermaidDocPlugin:
    """Plugin that renders mermaid blocks in declaration documentation."""

    def __init__(self):
        self._config = MermaidDocConfig()
        self._assembler: Optional[Assembler] = None
        self._asset_placer: Optional[AssetPlacer] = None
        self._last_warnings: List[MermaidDocError] = []

    @property
    def name(self) -> str:
        return "docmermaid"

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @property
    def config(self) -> MermaidDocConfig:
        return self._config

    @property
    def asset_placer(self) -> AssetPlacer:
        if self._asset_placer is None:
            self._asset_placer = self._create_placer()
        return self._asset_placer

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Initialize with configuration.

        Args:
            config: Dict with optional settings, see MermaidDocConfig.
                Environment variables override the dict.
        """
        self._config = load_config(config)
        self._asset_placer = None
        self._assembler = None
        logger.debug("docmermaid initialized: %s", self._config)

    def reset(self) -> None:
        """Drop collaborators so the next call starts from a clean state."""
        self._assembler = None
        self._asset_placer = None
        self._last_warnings = []

    def set_asset_placer(self, placer: AssetPlacer) -> None:
        """Replace the asset placer, e.g. with a NullAssetPlacer in tests."""
        self._asset_placer = placer
        self._assembler = None

    def _create_placer(self) -> AssetPlacer:
        if not self._config.place_assets or self._config.docs_dir is None:
            return NullAssetPlacer()
        # Resolved by the placer only when a copy is needed, so vendoring
        # never downloads anything for docs that are not being rendered
        bundle = partial(
            runtime_bundle_dir,
            self._config.vendor_runtime,
            self._config.package_url,
            self._config.cache_dir,
        )
        return create_placer(
            Path(self._config.docs_dir),
            bundle_dir=bundle,
            subdir=self._config.asset_subdir,
        )

    def _get_assembler(self) -> Assembler:
        if self._assembler is None:
            self._assembler = Assembler(
                include_resolver=IncludeResolver(self._config.project_root),
                asset_placer=self.asset_placer,
                local_path=local_module_path(self._config.asset_subdir),
                remote_url=self._config.remote_url,
                docs_dir=self._config.docs_dir,
            )
        return self._assembler

    @property
    def last_warnings(self) -> List[MermaidDocError]:
        """Include and asset failures recovered during the latest call."""
        return list(self._last_warnings)

    def process_annotations(self, annotations: Sequence[Annotation]) -> List[Annotation]:
        """Process the annotations of one declaration.

        Raises:
            StructuralError: If the declaration's diagram blocks are malformed.
        """
        self._last_warnings = []
        if not self._config.enabled:
            return list(annotations)
        attrs = classify(annotations)
        assembler = self._get_assembler()
        try:
            return assembler.assemble(attrs)
        finally:
            self._last_warnings = assembler.warnings

    def process_docstring(self, doc: Optional[str]) -> Optional[str]:
        """Return ``doc`` with its mermaid blocks rendered.

        Raises:
            StructuralError: If a diagram block is not terminated.
        """
        if not doc or not self._config.enabled:
            return doc
        annotations = self.process_annotations(docstring_fragments(doc))
        return "\n".join(a.text for a in annotations if isinstance(a, DocComment))

    def process_batch(
        self, items: Iterable[Tuple[Any, Sequence[Annotation]]]
    ) -> List[DeclarationResult]:
        """Process declarations independently.

        A StructuralError aborts only the declaration that raised it; its
        result carries the error and no annotations. Recovered include and
        asset failures are reported on the declaration that hit them.
        """
        results: List[DeclarationResult] = []
        for declaration, annotations in items:
            try:
                processed = self.process_annotations(annotations)
            except StructuralError as e:
                logger.error("failed to process %r: %s", declaration, e)
                results.append(DeclarationResult(declaration, [], e, self.last_warnings))
                continue
            results.append(DeclarationResult(declaration, processed, warnings=self.last_warnings))
        return results


def create_plugin() -> MermaidDocPlugin:
    """Factory function to create the docmermaid plugin."""
    return MermaidDocPlugin()
