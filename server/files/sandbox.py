"""
Path sandbox for the server storage root.

Every file the server touches is named by a client, so every such name goes
through PathSandbox.resolve before it becomes a path.
"""

import os
import re
from pathlib import Path, PurePosixPath
from typing import List

from common.errors import InvalidPath

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')


class PathSandbox:
    """Confines file names to direct children of a fixed storage root."""

    def __init__(self, root):
        self.root = Path(root).resolve()

    @property
    def name(self) -> str:
        return self.root.name

    def ensure_root(self):
        """Create the storage root if it does not exist yet."""
        self.root.mkdir(parents=True, exist_ok=True)

    def resolve(self, raw_name: str) -> Path:
        """
        Map a client supplied name to a path directly under the root.

        Directory components are dropped (both '/' and '\\' count as
        separators) and control characters removed. The joined path is
        normalised and symlinks resolved; anything that is not a strict
        descendant of the root is rejected.
        """
        if raw_name is None or not raw_name.strip():
            raise InvalidPath("Invalid file name")

        cleaned = _CONTROL_CHARS.sub('', raw_name).replace('\\', '/')
        name = PurePosixPath(cleaned).name
        if name in ('', '.', '..'):
            raise InvalidPath(f"Invalid file name: {raw_name!r}")

        candidate = Path(os.path.normpath(self.root / name)).resolve()
        if self.root not in candidate.parents:
            raise InvalidPath(f"Invalid file path: {raw_name!r}")
        return candidate

    def list_files(self) -> List[str]:
        """Names of regular files directly under the root, sorted."""
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_file())
