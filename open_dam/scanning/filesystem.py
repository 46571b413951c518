import os
import logging
from pathlib import Path
from typing import Iterator, List

from .. import config
from ..exceptions import FileOperationError

class PathScanner:
    def __init__(self, hidden_prefix: str = config.HIDDEN_PREFIX):
        self.hidden_prefix = hidden_prefix

    def iter_files(self, root: Path) -> Iterator[Path]:
        """
        Depth-first walker using os.scandir.

        Hidden entries (and everything below a hidden directory) are skipped.
        Paths are built from `root`, the working directory is never touched.
        Any listing failure raises FileOperationError and ends the walk.
        """
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = [e for e in it if not e.name.startswith(self.hidden_prefix)]
            except OSError as e:
                raise FileOperationError(f"Cannot list directory {current}: {e}") from e

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                try:
                    if e.is_dir(follow_symlinks=False):
                        dirs.append(Path(e.path))
                    elif e.is_file(follow_symlinks=False):
                        files.append(Path(e.path))
                except OSError as err:
                    raise FileOperationError(f"Cannot stat {e.path}: {err}") from err

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f

    def collect(self, root: Path) -> List[Path]:
        """Walks the whole tree up front so nothing is moved on a partial listing."""
        files = list(self.iter_files(root))
        logging.debug(f"Found {len(files)} files under {root}")
        return files
