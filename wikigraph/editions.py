"""
Wikipedia language editions and the files that belong to each of them.
"""
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

EDITIONS_RESOURCE = 'wikipedias.tsv'
DISAMBIGUATION_ROOTS_RESOURCE = 'disambiguation-root-categories.tsv'
INFOBOX_ROOTS_RESOURCE = 'infobox-root-categories.tsv'


def _resource_lines(name: str) -> Iterable[List[str]]:
    text = (resources.files('wikigraph') / 'resources' / name).read_text(encoding='utf-8')
    for line in text.splitlines():
        if line.strip() and not line.startswith('#'):
            yield line.split('\t')


@dataclass(frozen=True)
class Edition:
    """A language edition, e.g. Edition("French", "Français", "fr")."""
    language: str
    local_name: str
    code: str


def load_editions(codes: Optional[Iterable[str]] = None) -> List[Edition]:
    """
    Editions from the packaged table, in table order.

    Args:
        codes: Language codes to keep, or None for every edition

    Raises:
        ValueError: If a requested code is not in the table
    """
    editions = [Edition(*fields[:3]) for fields in _resource_lines(EDITIONS_RESOURCE)]
    if codes is None:
        return editions
    wanted = list(dict.fromkeys(codes))
    known = {edition.code: edition for edition in editions}
    unknown = [code for code in wanted if code not in known]
    if unknown:
        raise ValueError(f"Unknown Wikipedia edition(s): {', '.join(unknown)}")
    return [known[code] for code in wanted]


def load_root_categories(resource: str) -> Dict[str, str]:
    """Language code -> root category, from one of the packaged root-category tables."""
    return {fields[0]: fields[1] for fields in _resource_lines(resource)}


class EditionFiles:
    """
    Input dumps and working files of one edition, all in one directory.

    Input dumps are found by pattern, as named on dumps.wikimedia.org
    (e.g. frwiki-latest-pages-articles.xml.bz2); working files are written
    by the import and removed after a successful run.
    """

    PAGES_PATTERN = '*pages-articles*.xml*'
    LANGLINKS_PATTERN = '*langlinks.sql*'
    GEOTAGS_PATTERN = '*geo_tags.sql*'

    LINKS_FILE = 'links.xml.bz2'
    NAMESPACES_FILE = 'namespaces.tsv'
    CROSSLINKS_FILE = 'cross-links.csv'
    DISAMBIGUATION_FILE = 'disambiguation-pages.txt'
    INFOBOX_FILE = 'infobox-templates.txt'

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _find(self, pattern: str) -> Optional[Path]:
        matches = sorted(self.directory.glob(pattern))
        return matches[0] if matches else None

    @property
    def pages_dump(self) -> Optional[Path]:
        return self._find(self.PAGES_PATTERN)

    @property
    def langlinks_dump(self) -> Optional[Path]:
        return self._find(self.LANGLINKS_PATTERN)

    @property
    def geotags_dump(self) -> Optional[Path]:
        return self._find(self.GEOTAGS_PATTERN)

    @property
    def links(self) -> Path:
        return self.directory / self.LINKS_FILE

    @property
    def namespaces(self) -> Path:
        return self.directory / self.NAMESPACES_FILE

    @property
    def cross_links(self) -> Path:
        return self.directory / self.CROSSLINKS_FILE

    @property
    def disambiguation_pages(self) -> Path:
        return self.directory / self.DISAMBIGUATION_FILE

    @property
    def infobox_templates(self) -> Path:
        return self.directory / self.INFOBOX_FILE

    def working_files(self) -> List[Path]:
        """Files produced by the import; the precomputed title lists are inputs and stay."""
        return [self.links, self.namespaces, self.cross_links]

    def __repr__(self):
        return f"EditionFiles({str(self.directory)!r})"
