"""
Transparent access to the compressed files Wikimedia publishes.

Dumps come as .bz2 (page XML) or .gz (SQL tables); the intermediate link
stream is written as .bz2. Anything else is opened as a plain file.
"""
import bz2
import gzip
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union

PathLike = Union[str, Path]


def open_compressed(path: PathLike, mode: str = 'rb') -> BinaryIO:
    """
    Open a file, picking the codec from its suffix.

    Args:
        path: File to open
        mode: 'rb' or 'wb'

    Returns:
        Binary file object (decompressing on read, compressing on write)
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == '.bz2':
        return bz2.open(path, mode)
    if suffix in ('.gz', '.gzip'):
        return gzip.open(path, mode)
    return open(path, mode)


@contextmanager
def open_source(source: Union[PathLike, BinaryIO]) -> Iterator[BinaryIO]:
    """
    Yield a readable binary stream for a path or an already open file.

    Files opened here are closed on exit; file objects passed in are left
    open for their owner.
    """
    if hasattr(source, 'read'):
        yield source
        return
    with open_compressed(source, 'rb') as f:
        yield f
