# docmermaid/config.py
"""Configuration loading and validation for docmermaid.

Values come from an optional config dict layered over the defaults, then
from environment variables:

    DOCMERMAID_ENABLED       "off", "0", "false" or "no" disables rendering
    DOCMERMAID_PROJECT_ROOT  base directory for include_mmd! paths
    DOCMERMAID_DOCS_DIR      rendered documentation root
    DOCMERMAID_REMOTE_URL    remote fallback for the mermaid module
    DOCMERMAID_VENDOR        "1", "true" or "yes" downloads the runtime
    DOCMERMAID_PACKAGE_URL   npm tarball the runtime is downloaded from
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional, Tuple

from .assembler import DEFAULT_REMOTE_URL
from .assets import DEFAULT_ASSET_SUBDIR
from .errors import ConfigValidationError
from .vendor import DEFAULT_PACKAGE_URL

ENV_ENABLED = "DOCMERMAID_ENABLED"
ENV_PROJECT_ROOT = "DOCMERMAID_PROJECT_ROOT"
ENV_DOCS_DIR = "DOCMERMAID_DOCS_DIR"
ENV_REMOTE_URL = "DOCMERMAID_REMOTE_URL"
ENV_VENDOR = "DOCMERMAID_VENDOR"
ENV_PACKAGE_URL = "DOCMERMAID_PACKAGE_URL"

_FALSE_VALUES = ("off", "0", "false", "no")
_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class MermaidDocConfig:
    """Settings for one docmermaid plugin instance."""

    enabled: bool = True
    project_root: str = "."
    docs_dir: Optional[str] = "build/html"  # None disables asset placement
    asset_subdir: str = DEFAULT_ASSET_SUBDIR
    remote_url: str = DEFAULT_REMOTE_URL
    place_assets: bool = True
    vendor_runtime: bool = False
    package_url: str = DEFAULT_PACKAGE_URL
    cache_dir: Optional[str] = None


_FIELD_TYPES = {
    "enabled": (bool,),
    "project_root": (str,),
    "docs_dir": (str, type(None)),
    "asset_subdir": (str,),
    "remote_url": (str,),
    "place_assets": (bool,),
    "vendor_runtime": (bool,),
    "package_url": (str,),
    "cache_dir": (str, type(None)),
}


def validate_config(config: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """Validate a docmermaid configuration dict.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors: List[str] = []
    known = {f.name for f in fields(MermaidDocConfig)}

    for key, value in config.items():
        if key not in known:
            errors.append(f"Unknown option: {key}")
            continue
        if not isinstance(value, _FIELD_TYPES[key]):
            expected = " or ".join(t.__name__ for t in _FIELD_TYPES[key])
            errors.append(f"'{key}' must be {expected}, got {type(value).__name__}")

    asset_subdir = config.get("asset_subdir")
    if isinstance(asset_subdir, str) and not asset_subdir.strip("/"):
        errors.append("'asset_subdir' must not be empty")

    return len(errors) == 0, errors


def load_config(config: Optional[Dict[str, Any]] = None) -> MermaidDocConfig:
    """Build a config from a dict and the environment.

    Raises:
        ConfigValidationError: If the dict contains unknown or mistyped options.
    """
    config = dict(config or {})
    is_valid, errors = validate_config(config)
    if not is_valid:
        raise ConfigValidationError(errors)

    result = MermaidDocConfig(**config)

    env_enabled = os.environ.get(ENV_ENABLED, "").lower()
    if env_enabled in _FALSE_VALUES:
        result.enabled = False

    env_root = os.environ.get(ENV_PROJECT_ROOT)
    if env_root:
        result.project_root = env_root

    env_docs = os.environ.get(ENV_DOCS_DIR)
    if env_docs:
        result.docs_dir = env_docs

    env_remote = os.environ.get(ENV_REMOTE_URL)
    if env_remote:
        result.remote_url = env_remote

    env_vendor = os.environ.get(ENV_VENDOR, "").lower()
    if env_vendor in _TRUE_VALUES:
        result.vendor_runtime = True

    env_package = os.environ.get(ENV_PACKAGE_URL)
    if env_package:
        result.package_url = env_package

    return result
