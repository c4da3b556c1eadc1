"""
Wikipedia namespaces and page-title helpers.

Every language edition declares its namespaces in the <siteinfo> block of its
XML dump: a numeric id, identical across editions, and a local title
("Category", "Catégorie", "Kategorie", ...). Only the Main and Category
namespaces end up in the graph; everything else is filtered on the way in.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional

MAIN = 0
TALK = 1
USER = 2
USER_TALK = 3
WIKIPEDIA = 4
WIKIPEDIA_TALK = 5
FILE = 6
FILE_TALK = 7
MEDIAWIKI = 8
MEDIAWIKI_TALK = 9
TEMPLATE = 10
TEMPLATE_TALK = 11
HELP = 12
HELP_TALK = 13
CATEGORY = 14
CATEGORY_TALK = 15
PORTAL = 100
PORTAL_TALK = 101
BOOK = 108
BOOK_TALK = 109
DRAFT = 118
DRAFT_TALK = 119
EDUCATION_PROGRAM = 446
EDUCATION_PROGRAM_TALK = 447
TIMED_TEXT = 710
TIMED_TEXT_TALK = 711
MODULE = 828
MODULE_TALK = 829
GADGET = 2300
GADGET_TALK = 2301
GADGET_DEFINITION = 2302
GADGET_DEFINITION_TALK = 2303
TOPIC = 2600
SPECIAL = -1
MEDIA = -2
ANY = -2 ** 31

GRAPHED_NAMESPACES = frozenset({MAIN, CATEGORY})

# MediaWiki accepts the canonical English names in every language edition.
CANONICAL_NAMESPACES: Dict[str, int] = {
    'talk': TALK,
    'user': USER,
    'user talk': USER_TALK,
    'wikipedia': WIKIPEDIA,
    'project': WIKIPEDIA,
    'wikipedia talk': WIKIPEDIA_TALK,
    'project talk': WIKIPEDIA_TALK,
    'file': FILE,
    'image': FILE,
    'file talk': FILE_TALK,
    'image talk': FILE_TALK,
    'mediawiki': MEDIAWIKI,
    'mediawiki talk': MEDIAWIKI_TALK,
    'template': TEMPLATE,
    'template talk': TEMPLATE_TALK,
    'help': HELP,
    'help talk': HELP_TALK,
    'category': CATEGORY,
    'category talk': CATEGORY_TALK,
    'portal': PORTAL,
    'portal talk': PORTAL_TALK,
    'book': BOOK,
    'book talk': BOOK_TALK,
    'draft': DRAFT,
    'draft talk': DRAFT_TALK,
    'education program': EDUCATION_PROGRAM,
    'education program talk': EDUCATION_PROGRAM_TALK,
    'timedtext': TIMED_TEXT,
    'timedtext talk': TIMED_TEXT_TALK,
    'module': MODULE,
    'module talk': MODULE_TALK,
    'gadget': GADGET,
    'gadget talk': GADGET_TALK,
    'gadget definition': GADGET_DEFINITION,
    'gadget definition talk': GADGET_DEFINITION_TALK,
    'topic': TOPIC,
    'special': SPECIAL,
    'media': MEDIA,
}


def normalize_title(title: str) -> str:
    """
    Upper-case the first character of a page title, as MediaWiki does.

    Examples:
        >>> normalize_title("java (island)")
        'Java (island)'
        >>> normalize_title("x")
        'X'
    """
    if len(title) <= 1:
        return title.upper()
    return title[0].upper() + title[1:]


def _fold(name: str) -> str:
    return name.replace('_', ' ').strip().lower()


@dataclass(frozen=True)
class Namespace:
    """A namespace of one language edition."""
    id: int
    title: str


class Namespaces:
    """
    The namespace table of one language edition.

    Ids and titles are both unique within a table. The table is filled once
    from the dump (or from its cached TSV copy) and only read afterwards, so
    it can be shared between threads.
    """

    def __init__(self, namespaces: Iterable[Namespace] = ()):
        self._by_id: Dict[int, Namespace] = {}
        self._by_title: Dict[str, Namespace] = {}
        self._by_folded_title: Dict[str, Namespace] = {}
        for namespace in namespaces:
            self.add(namespace)

    def add(self, namespace: Namespace) -> None:
        known = self._by_id.get(namespace.id)
        if known is not None and known.title != namespace.title:
            raise ValueError(
                f"Namespace id {namespace.id} already declared as {known.title!r}"
            )
        known = self._by_title.get(namespace.title)
        if known is not None and known.id != namespace.id:
            raise ValueError(
                f"Namespace title {namespace.title!r} already declared with id {known.id}"
            )
        self._by_id[namespace.id] = namespace
        self._by_title[namespace.title] = namespace
        self._by_folded_title[_fold(namespace.title)] = namespace

    def from_id(self, namespace_id: int) -> Optional[Namespace]:
        return self._by_id.get(namespace_id)

    def from_title(self, title: str) -> Optional[Namespace]:
        return self._by_title.get(title)

    def namespace_of(self, title: str) -> int:
        """
        Return the namespace id of a page title.

        The prefix before the first colon is looked up in this table, then
        among the canonical English names. A prefix that matches neither
        means the colon is part of an ordinary article title.

        Args:
            title: Page title, e.g. "Category:Islands of Indonesia"

        Returns:
            Namespace id, or ANY for an empty title
        """
        if not title:
            return ANY
        colon = title.find(':')
        if colon < 0:
            return MAIN
        prefix = _fold(title[:colon])
        namespace = self._by_folded_title.get(prefix)
        if namespace is not None:
            return namespace.id
        return CANONICAL_NAMESPACES.get(prefix, MAIN)

    def is_graphed(self, title: str) -> bool:
        """True if pages with this title become graph nodes (Main or Category)."""
        return self.namespace_of(title) in GRAPHED_NAMESPACES

    def save(self, path: Path) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            for namespace in self:
                f.write(f"{namespace.id}\t{namespace.title}\n")

    @classmethod
    def load(cls, path: Path) -> 'Namespaces':
        namespaces = cls()
        with open(path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.rstrip('\n')
                if not line:
                    continue
                namespace_id, _, title = line.partition('\t')
                namespaces.add(Namespace(int(namespace_id), title))
        return namespaces

    def __iter__(self) -> Iterator[Namespace]:
        return iter(sorted(self._by_id.values(), key=lambda ns: ns.id))

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, namespace_id: object) -> bool:
        return namespace_id in self._by_id

    def __repr__(self):
        return f"Namespaces({len(self)} declared)"
