# docmermaid/includes.py
"""Resolution of ``include_mmd!(...)`` directives to diagram source."""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from .errors import IncludeIOError

logger = logging.getLogger(__name__)


class IncludeResolver:
    """Reads included diagram files relative to a project root.

    Read failures never propagate: each one is logged, recorded in
    ``errors`` and the include is skipped by the caller.
    """

    def __init__(self, project_root: Union[str, os.PathLike, None] = None):
        self._project_root = Path(project_root) if project_root is not None else Path(".")
        self.errors: List[IncludeIOError] = []

    @property
    def project_root(self) -> Path:
        return self._project_root

    def resolve(self, path: Union[str, os.PathLike]) -> Optional[str]:
        """Return the content of ``project_root / path``, or None on failure."""
        full_path = self._project_root / path
        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            error = IncludeIOError(str(full_path), e)
            self.errors.append(error)
            logger.warning("%s", error)
            return None

    def take_errors(self) -> List[IncludeIOError]:
        """Return the errors recorded since the last call and forget them."""
        errors, self.errors = self.errors, []
        return errors
