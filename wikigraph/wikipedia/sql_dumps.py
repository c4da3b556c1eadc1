"""
Readers for the MySQL table dumps published next to the XML dump.

Each table comes as a gzipped mysqldump script. The rows are in long
INSERT INTO `table` VALUES (...),(...); lines, which are tokenized here
rather than evaluated.
"""
import io
import logging
import re
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

from ..compression import PathLike, open_source
from ..progress import ProgressCounter
from .pages import Geotags

logger = logging.getLogger(__name__)

Source = Union[PathLike, BinaryIO]
Row = List[Optional[str]]

_TOKEN = re.compile(
    r"""\s*(?:
        (?P<open>\()
      | (?P<close>\))
      | (?P<comma>,)
      | (?P<end>;)
      | '(?P<string>(?:[^'\\]|\\.)*)'
      | (?P<null>NULL)\b
      | (?P<literal>[^\s,()';]+)
    )""",
    re.VERBOSE | re.DOTALL,
)

_ESCAPE = re.compile(r"\\(.)", re.DOTALL)
_ESCAPES = {'0': '\0', 'n': '\n', 'r': '\r', 't': '\t', 'b': '\b', 'Z': '\x1a'}


def _unescape(value: str) -> str:
    return _ESCAPE.sub(lambda match: _ESCAPES.get(match.group(1), match.group(1)), value)


def parse_values(values: str) -> Iterator[Row]:
    """
    Tokenize the tuples of one INSERT statement.

    Example:
        >>> list(parse_values("(1,'Paris',NULL),(2,'',3.5);"))
        [['1', 'Paris', None], ['2', '', '3.5']]

    Raises:
        ValueError: On text that is not a list of SQL tuples
    """
    position = 0
    row: Optional[Row] = None
    while position < len(values):
        match = _TOKEN.match(values, position)
        if match is None:
            if not values[position:].strip():
                break
            raise ValueError(f"Unexpected SQL at column {position}: {values[position:position + 40]!r}")
        position = match.end()
        kind = match.lastgroup
        if kind == 'open':
            if row is not None:
                raise ValueError(f"Nested tuple at column {match.start()}")
            row = []
        elif kind == 'close':
            if row is None:
                raise ValueError(f"Unbalanced ')' at column {match.start()}")
            yield row
            row = None
        elif kind == 'comma':
            continue
        elif kind == 'end':
            break
        elif row is None:
            raise ValueError(f"Value outside of a tuple at column {match.start()}")
        elif kind == 'string':
            row.append(_unescape(match.group('string')))
        elif kind == 'null':
            row.append(None)
        else:
            row.append(match.group('literal'))
    if row is not None:
        raise ValueError("Unterminated tuple at end of INSERT statement")


def iter_sql_rows(source: Source, table: str) -> Iterator[Row]:
    """
    Stream the rows inserted into a table by a mysqldump script.

    Args:
        source: Path of the (compressed) dump or a binary stream
        table: Table name, e.g. "geo_tags"

    Yields:
        One list per row; quoted values unescaped, NULL as None, numbers as text
    """
    prefix = f"INSERT INTO `{table}` VALUES "
    with open_source(source) as stream:
        lines = io.TextIOWrapper(stream, encoding='utf-8', errors='replace')
        for line in lines:
            if line.startswith(prefix):
                yield from parse_values(line[len(prefix):])
        lines.detach()


def read_geotags(source: Source, show_progress: bool = True) -> Dict[str, Geotags]:
    """
    Read the primary coordinates of every page from a geo_tags dump.

    Columns: gt_id, gt_page_id, gt_globe, gt_primary, gt_lat, gt_lon, gt_dim,
    gt_type, ... Secondary coordinates and rows without latitude or longitude
    are skipped; the first primary row of a page wins.

    Returns:
        Geotags keyed by wiki id (page id as text)
    """
    geotags: Dict[str, Geotags] = {}
    with ProgressCounter("Reading geotags", unit="pages", show_progress=show_progress) as counter:
        for row in iter_sql_rows(source, 'geo_tags'):
            if len(row) < 8:
                raise ValueError(f"geo_tags row has {len(row)} columns, expected at least 8")
            wiki_id, globe, primary, latitude, longitude, kind = (
                row[1], row[2], row[3], row[4], row[5], row[7]
            )
            if wiki_id is None or primary != '1' or latitude is None or longitude is None:
                continue
            if wiki_id in geotags:
                continue
            geotags[wiki_id] = Geotags(
                latitude=float(latitude),
                longitude=float(longitude),
                globe=globe or None,
                type=kind or None,
            )
            counter.increment()
    logger.info(f"Read geotags for {len(geotags)} pages")
    return geotags


def iter_langlinks(source: Source) -> Iterator[Tuple[str, str, str]]:
    """
    Stream the rows of a langlinks dump.

    Yields:
        (wiki id of the page, language code of the target, target title)
    """
    for row in iter_sql_rows(source, 'langlinks'):
        if len(row) < 3:
            raise ValueError(f"langlinks row has {len(row)} columns, expected 3")
        wiki_id, language, title = row[0], row[1], row[2]
        if wiki_id is None or language is None or title is None:
            continue
        yield wiki_id, language, title
