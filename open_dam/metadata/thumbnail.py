import io
import logging
from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from .. import config
from ..exceptions import DecodeError


class ThumbnailGenerator:
    def __init__(self,
                 size: Tuple[int, int] = config.THUMBNAIL_SIZE,
                 quality: int = config.THUMBNAIL_QUALITY):
        self.size = size
        self.quality = quality

    def generate(self, path: Path) -> bytes:
        """
        Decodes the image at `path` and returns a JPEG no larger than `size`.

        The whole payload is encoded in memory so the store writes it once.
        Raises DecodeError for anything Pillow cannot read.
        """
        try:
            with Image.open(path) as im:
                im.thumbnail(self.size)
                out = io.BytesIO()
                im.convert("RGB").save(out, format=config.THUMBNAIL_FORMAT, quality=self.quality)
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Cannot build thumbnail for {path}: {e}") from e

        data = out.getvalue()
        logging.debug(f"Thumbnail for {path.name}: {len(data)} bytes")
        return data
