# docmermaid/vendor.py
"""Vendoring of the mermaid runtime.

The packaged bundle only re-exports the published module, which still
needs network access in the browser. The published ES module entry point
is itself small and imports hashed chunk files relative to its own
location, so vendoring downloads the whole npm package tarball once and
extracts the entry module together with its chunk directory into a cache
directory that the asset placer then copies from. The rendered docs then
work offline.
"""

import io
import logging
import os
import shutil
import tarfile
from pathlib import Path, PurePosixPath
from typing import Optional, Union
from urllib.parse import urlparse

from .assets import PACKAGED_BUNDLE_DIR, RUNTIME_MODULE
from .http_client import get_httpx_client

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path(os.path.expanduser("~")) / ".cache" / "docmermaid"
DEFAULT_PACKAGE_URL = "https://registry.npmjs.org/mermaid/-/mermaid-10.9.1.tgz"

# The entry module loads its chunks from chunks/<entry stem>/
CHUNK_DIR = PurePosixPath("chunks") / RUNTIME_MODULE[: -len(".mjs")]


def _runtime_member_path(name: str) -> Optional[PurePosixPath]:
    """Map a tarball member to its path inside the runtime bundle.

    npm tarballs hold a single top-level directory (usually ``package/``).
    Only the ESM entry module and its chunk files under ``dist/`` are kept.
    """
    parts = PurePosixPath(name).parts
    if len(parts) < 3 or parts[1] != "dist" or ".." in parts:
        return None
    rel = PurePosixPath(*parts[2:])
    if rel == PurePosixPath(RUNTIME_MODULE) or rel.parts[:2] == CHUNK_DIR.parts:
        return rel
    return None


def extract_runtime(archive: bytes, dest_dir: Union[str, os.PathLike]) -> int:
    """Extract the runtime files of a gzipped npm tarball into ``dest_dir``.

    Returns:
        Number of files written.

    Raises:
        tarfile.TarError: If the archive cannot be read.
    """
    dest_dir = Path(dest_dir)
    count = 0
    with tarfile.open(fileobj=io.BytesIO(archive), mode="r:gz") as tar:
        for member in tar.getmembers():
            if not member.isfile():
                continue
            rel = _runtime_member_path(member.name)
            if rel is None:
                continue
            source = tar.extractfile(member)
            if source is None:
                continue
            target = dest_dir.joinpath(*rel.parts)
            target.parent.mkdir(parents=True, exist_ok=True)
            with source:
                target.write_bytes(source.read())
            count += 1
    return count


def fetch_runtime(dest_dir: Union[str, os.PathLike], url: str = DEFAULT_PACKAGE_URL,
                  timeout: float = 30.0) -> Optional[Path]:
    """Download the mermaid package tarball and extract the runtime.

    An already extracted runtime is reused. Extraction happens in a
    sibling staging directory that replaces ``dest_dir`` only once complete,
    so an interrupted download is never picked up.

    Returns:
        The directory holding the runtime, or None if the download failed.
    """
    dest_dir = Path(dest_dir)
    if (dest_dir / RUNTIME_MODULE).is_file():
        return dest_dir

    staging = dest_dir.with_name(dest_dir.name + ".part")
    try:
        with get_httpx_client(url, timeout=timeout, follow_redirects=True) as client:
            response = client.get(url)
            if response.status_code != 200:
                logger.warning(
                    "mermaid runtime download from %s failed: HTTP %s",
                    url, response.status_code,
                )
                return None

        shutil.rmtree(staging, ignore_errors=True)
        staging.mkdir(parents=True)
        extract_runtime(response.content, staging)
        if not (staging / RUNTIME_MODULE).is_file():
            logger.warning("mermaid package from %s does not contain dist/%s", url, RUNTIME_MODULE)
            shutil.rmtree(staging, ignore_errors=True)
            return None

        if dest_dir.exists():
            shutil.rmtree(dest_dir)
        os.replace(staging, dest_dir)
    except Exception as e:
        logger.warning("mermaid runtime download from %s failed: %s", url, e)
        shutil.rmtree(staging, ignore_errors=True)
        return None

    logger.debug("vendored mermaid runtime from %s into %s", url, dest_dir)
    return dest_dir


def cache_dir_for(url: str, cache_dir: Union[str, os.PathLike, None] = None) -> Path:
    """Cache location for one package URL, e.g. ``<cache>/mermaid-10.9.1``."""
    name = PurePosixPath(urlparse(url).path).name
    for suffix in (".tgz", ".tar.gz"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return Path(cache_dir or DEFAULT_CACHE_DIR) / (name or "mermaid")


def runtime_bundle_dir(vendor: bool, url: str = DEFAULT_PACKAGE_URL,
                       cache_dir: Union[str, os.PathLike, None] = None) -> Path:
    """Return the directory the asset placer should copy from.

    Falls back to the packaged bundle when vendoring is off or fails.
    """
    if not vendor:
        return PACKAGED_BUNDLE_DIR

    vendored = fetch_runtime(cache_dir_for(url, cache_dir), url)
    if vendored is None:
        return PACKAGED_BUNDLE_DIR
    return vendored
