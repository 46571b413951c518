import logging
from pathlib import Path
from datetime import datetime
from typing import Optional

import exifread

from .. import config
from ..exceptions import FileOperationError
from ..scanning.identity import IdentityComputer, path_text


class FileInfo:
    """
    Single adapter for everything the catalog asks about a path.

    Strategies for the creation time:
      - Images: EXIF capture date via 'exifread'.
      - Everything else: the filesystem (birth time when the platform has
        one, modification time otherwise).
    """

    def __init__(self, identity: Optional[IdentityComputer] = None):
        self.identity = identity or IdentityComputer()

    def name(self, path: Path) -> str:
        return path_text(path.name)

    def checksum(self, path) -> int:
        return self.identity.compute_id(path)

    def created(self, path: Path) -> datetime:
        """Best known creation timestamp, naive local time."""
        dt = self.get_exif_datetime(path)
        if dt:
            return dt
        return self._filesystem_datetime(path)

    def get_exif_datetime(self, path: Path) -> Optional[datetime]:
        try:
            with path.open('rb') as f:
                # details=False speeds up processing significantly
                tags = exifread.process_file(f, details=False)
        except Exception as e:
            logging.debug(f"ExifRead failed for {path}: {e}")
            return None

        return self._parse_exif_date(tags)

    def _parse_exif_date(self, tags) -> Optional[datetime]:
        """Helper to parse standard EXIF date strings from exifread."""
        for tag in config.DATE_TAGS:
            if tag in tags:
                try:
                    # EXIF format is usually "YYYY:MM:DD HH:MM:SS"
                    dt_str = str(tags[tag]).replace(':', '-', 2)
                    return datetime.strptime(dt_str, "%Y-%m-%d %H:%M:%S")
                except ValueError:
                    continue
        return None

    def _filesystem_datetime(self, path: Path) -> datetime:
        try:
            st = path.stat()
        except OSError as e:
            raise FileOperationError(f"Cannot stat {path}: {e}") from e

        ts = st.st_mtime
        # A copied file gets a fresh birth time but keeps its mtime; take the older.
        birth = getattr(st, "st_birthtime", None)
        if birth is not None:
            ts = min(ts, birth)
        return datetime.fromtimestamp(ts)
