from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

@dataclass
class CatalogEntry:
    """
    One cataloged file. Passed by value into and out of the store.
    """
    id: int                 # CRC-32 of the catalog-relative path, never updated
    name: str
    path: Path              # canonical location once reorganized
    created: datetime

    # JPEG bytes, None when the file could not be decoded as an image
    thumbnail: Optional[bytes] = None
