import zlib
from pathlib import PurePath
from typing import Union

from ..exceptions import IdentityError


def path_text(path: Union[str, PurePath]) -> str:
    """
    Returns the path as text that is guaranteed to encode as UTF-8.

    On POSIX, undecodable bytes in a file name survive as lone surrogates in
    the str form; those cannot be rendered and raise IdentityError.
    """
    text = str(path)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise IdentityError(f"Path is not representable as text: {text!r}") from e
    return text


class IdentityComputer:
    def compute_id(self, path: Union[str, PurePath]) -> int:
        """
        Derives the entry id from the path text, not the file content.

        CRC-32 over the UTF-8 bytes, as an unsigned value so it is the same on
        every platform and Python build. Distinct paths may collide.
        """
        data = path_text(path).encode("utf-8")
        return zlib.crc32(data) & 0xFFFFFFFF
