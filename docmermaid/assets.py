# docmermaid/assets.py
"""Placement of the mermaid runtime bundle into a documentation tree.

The assembler only sees the ``AssetPlacer`` protocol, so classification and
assembly stay testable without touching a filesystem (``NullAssetPlacer``).
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Union

from .errors import AssetPlacementError

logger = logging.getLogger(__name__)

# Relative to the documentation root
DEFAULT_ASSET_SUBDIR = "_static/mermaid"
RUNTIME_MODULE = "mermaid.esm.min.mjs"

PACKAGED_BUNDLE_DIR = Path(__file__).resolve().parent / "static" / "mermaid"

PathLike = Union[str, os.PathLike]
# A directory, or a callable returning one when the copy actually happens
BundleSource = Union[PathLike, Callable[[], PathLike], None]


class AssetPlacer(Protocol):
    """Protocol for making the runtime bundle available to the viewer."""

    def ensure_placed(self) -> None:
        """Place the bundle if needed. Must not raise."""
        ...

    def take_errors(self) -> List[AssetPlacementError]:
        """Return the failures recorded since the last call and forget them."""
        ...


class NullAssetPlacer:
    """Placer that does nothing."""

    def ensure_placed(self) -> None:
        pass

    def take_errors(self) -> List[AssetPlacementError]:
        return []


class FilesystemAssetPlacer:
    """Copies the runtime bundle into ``docs_dir / subdir`` once.

    Nothing happens when ``docs_dir`` does not exist, since then no
    documentation is being rendered. An existing target directory is left
    alone, including one created concurrently by another process.

    ``bundle_dir`` may be a callable; it is only invoked once a copy is
    really needed, so an expensive source (a download) is never fetched
    for documentation that is not being rendered.
    """

    def __init__(
        self,
        docs_dir: PathLike,
        bundle_dir: BundleSource = None,
        subdir: str = DEFAULT_ASSET_SUBDIR,
    ):
        self._docs_dir = Path(docs_dir)
        self._bundle_source = bundle_dir if bundle_dir is not None else PACKAGED_BUNDLE_DIR
        self._bundle_dir: Optional[Path] = None
        self._subdir = subdir
        self.errors: List[AssetPlacementError] = []

    @property
    def target_dir(self) -> Path:
        return self._docs_dir / self._subdir

    @property
    def bundle_dir(self) -> Path:
        if self._bundle_dir is None:
            source = self._bundle_source
            self._bundle_dir = Path(source() if callable(source) else source)
        return self._bundle_dir

    def ensure_placed(self) -> None:
        if not self._docs_dir.is_dir():
            logger.debug("docs dir %s missing, skipping runtime placement", self._docs_dir)
            return

        target = self.target_dir
        if target.exists():
            return

        bundle = self.bundle_dir
        try:
            target.mkdir(parents=True, exist_ok=True)
            shutil.copytree(bundle, target, dirs_exist_ok=True)
            logger.debug("placed mermaid runtime from %s in %s", bundle, target)
        except OSError as e:
            error = AssetPlacementError(str(target), e)
            self.errors.append(error)
            logger.warning("%s", error)

    def take_errors(self) -> List[AssetPlacementError]:
        errors, self.errors = self.errors, []
        return errors


def create_placer(
    docs_dir: Optional[PathLike],
    bundle_dir: BundleSource = None,
    subdir: str = DEFAULT_ASSET_SUBDIR,
) -> Union[FilesystemAssetPlacer, NullAssetPlacer]:
    """Return a filesystem placer, or a null placer when no docs dir is set."""
    if docs_dir is None:
        return NullAssetPlacer()
    return FilesystemAssetPlacer(docs_dir, bundle_dir=bundle_dir, subdir=subdir)


def local_module_path(subdir: str = DEFAULT_ASSET_SUBDIR, module: Optional[str] = None) -> str:
    """Path of the runtime module relative to the documentation root."""
    return f"{subdir.strip('/')}/{module or RUNTIME_MODULE}"
