import os
import errno
import shutil
import logging
from datetime import datetime
from pathlib import Path, PurePosixPath

from .. import config
from ..exceptions import FileOperationError
from ..models import CatalogEntry


def canonical_relpath(created: datetime, name: str) -> PurePosixPath:
    """`<year>/<Mon_DD>/<name>` relative to the catalog root."""
    folder = config.FOLDER_PATTERN.format(
        year=created.year,
        month_abbr=config.MONTH_ABBR[created.month - 1],
        day=created.day,
    )
    return PurePosixPath(folder) / name


class Reorganizer:
    def __init__(self, root: Path):
        self.root = root

    def destination(self, entry: CatalogEntry) -> Path:
        return self.root.joinpath(*canonical_relpath(entry.created, entry.name).parts)

    def relocate(self, entry: CatalogEntry) -> Path:
        """
        Moves the entry's file to its canonical destination and updates
        `entry.path`. A file already in place is left alone.
        """
        src = entry.path
        dest = self.destination(entry)

        if src == dest:
            return dest

        if dest.exists():
            if self._same_file(src, dest):
                entry.path = dest
                return dest
            raise FileOperationError(f"Destination already taken: {dest}")

        created_dirs = [d for d in (dest.parent, *dest.parent.parents) if not d.exists()]
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            self._move(src, dest)
        except OSError as e:
            self._rollback(src, dest, created_dirs)
            raise FileOperationError(f"Failed to move {src} -> {dest}: {e}") from e

        logging.debug(f"Moved {src} -> {dest}")
        entry.path = dest
        self._prune(src.parent)
        return dest

    @staticmethod
    def _move(src: Path, dest: Path):
        try:
            os.rename(src, dest)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            # Import from another device (card, USB stick): copy then delete
            logging.debug(f"Cross-device move {src} -> {dest}")
            shutil.move(str(src), str(dest))

    @staticmethod
    def _rollback(src: Path, dest: Path, created_dirs):
        """Undoes what a failed move left in the catalog. Never fails."""
        if src.exists() and dest.exists():
            try:
                dest.unlink()
            except OSError:
                pass
        # created_dirs runs deepest first
        for d in created_dirs:
            try:
                d.rmdir()
            except OSError:
                break

    def _prune(self, directory: Path):
        """Removes the old parent if it is now empty. Never fails."""
        # Only directories below the root belong to the catalog
        if self.root not in directory.parents:
            return
        try:
            directory.rmdir()
            logging.debug(f"Removed empty directory {directory}")
        except OSError:
            pass

    @staticmethod
    def _same_file(a: Path, b: Path) -> bool:
        try:
            return os.path.samefile(a, b)
        except OSError:
            return False
