import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from tqdm import tqdm

from .database.db import DBManager
from .database.ops import CatalogStore
from .exceptions import AlreadyInitializedError, DecodeError, FileOperationError, NotInitializedError
from .launcher import open_with_default_app
from .metadata.extract import FileInfo
from .metadata.thumbnail import ThumbnailGenerator
from .models import CatalogEntry
from .organization.mover import Reorganizer, canonical_relpath
from .scanning.filesystem import PathScanner
from .scanning.identity import path_text


@dataclass
class Empty:
    root: Path


@dataclass
class Initialized:
    engine: "DamEngine"


DamStatus = Union[Empty, Initialized]


class DamEngine:
    """
    A catalog root bound to its store. Owns the connection until close().
    """

    def __init__(self,
                 root: Path,
                 launcher: Optional[Callable[[Path], None]] = None,
                 thumbnailer: Optional[ThumbnailGenerator] = None,
                 file_info: Optional[FileInfo] = None):
        self.root = Path(root).resolve()
        self.db_manager = DBManager(self.root)
        self.store = CatalogStore(self.db_manager.connect())

        self.scanner = PathScanner()
        self.reorganizer = Reorganizer(self.root)
        self.file_info = file_info or FileInfo()
        self.thumbnailer = thumbnailer or ThumbnailGenerator()
        self.launcher = launcher or open_with_default_app

    # --- Lifecycle ---

    @staticmethod
    def check(root: Path, **kwargs) -> DamStatus:
        """Read-only probe; opens the catalog only when the marker is there."""
        root = Path(root).resolve()
        if DBManager(root).exists():
            return Initialized(DamEngine(root, **kwargs))
        return Empty(root)

    @classmethod
    def init(cls, root: Path, **kwargs) -> "DamEngine":
        root = Path(root).resolve()
        if DBManager(root).exists():
            raise AlreadyInitializedError(f"{root} is already set up as a catalog")
        logging.info(f"Creating catalog at {root}")
        return cls(root, **kwargs)

    @classmethod
    def load(cls, root: Path, **kwargs) -> "DamEngine":
        root = Path(root).resolve()
        if not DBManager(root).exists():
            raise NotInitializedError(f"No catalog found at {root}")
        return cls(root, **kwargs)

    def close(self):
        self.db_manager.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # --- Operations ---

    def scan(self) -> int:
        """
        Catalogs every visible file below the root, moving each into the
        canonical layout. The first filesystem, identity or store error
        aborts the scan; files handled before it stay moved and recorded.
        """
        logging.info(f"Scanning {self.root}...")
        files = self.scanner.collect(self.root)

        processed_count = 0
        for path in tqdm(files, desc="Scanning", unit="file", disable=not files):
            self._process_file(path)
            processed_count += 1

        logging.info(f"Scan complete. Processed {processed_count} files.")
        return processed_count

    def add(self, path: Path) -> CatalogEntry:
        """Catalogs a single file, which may live outside the root."""
        path = Path(path).resolve()
        if not path.is_file():
            raise FileOperationError(f"Not a file: {path}")
        return self._process_file(path)

    def list(self) -> List[CatalogEntry]:
        return self.store.list_entries()

    def find(self, name: str) -> CatalogEntry:
        return self.store.find_by_name(name)

    def info(self, name: str) -> CatalogEntry:
        return self.find(name)

    def open(self, name: str) -> CatalogEntry:
        """Opens the first entry matching `name`; LaunchError is left to the caller."""
        entry = self.find(name)
        logging.info(f"Opening {entry.path}")
        self.launcher(entry.path.resolve())
        return entry

    # --- Pipeline ---

    def _process_file(self, path: Path) -> CatalogEntry:
        # Fail on untextual paths before anything touches the disk
        path_text(path)
        name = self.file_info.name(path)
        created = self.file_info.created(path)

        # The id follows the canonical location, so re-scans map to the same row
        rel = canonical_relpath(created, name)
        entry = CatalogEntry(
            id=self.file_info.checksum(rel.as_posix()),
            name=name,
            path=path,
            created=created,
        )

        self.reorganizer.relocate(entry)
        entry.thumbnail = self._thumbnail(entry.path)
        self.store.upsert(entry)
        return entry

    def _thumbnail(self, path: Path) -> Optional[bytes]:
        try:
            return self.thumbnailer.generate(path)
        except DecodeError as e:
            logging.debug(f"No thumbnail: {e}")
            return None
