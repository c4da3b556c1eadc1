"""
Streaming reader for MediaWiki XML dumps (pages-articles.xml.bz2).

Dumps are several gigabytes even compressed, so pages are read one at a time
with lxml's iterparse and every finished <page> is cleared from the tree.
Malformed XML raises lxml.etree.XMLSyntaxError; nothing is repaired.
"""
import logging
from typing import BinaryIO, Collection, Iterator, Optional, Union

from lxml import etree

from ..compression import PathLike, open_source
from .namespaces import CATEGORY, MAIN, Namespace, Namespaces
from .pages import RawPage

logger = logging.getLogger(__name__)

Source = Union[PathLike, BinaryIO]


def read_namespaces(source: Source) -> Namespaces:
    """
    Read the namespace declarations in the <siteinfo> header of a dump.

    Parsing stops as soon as the declarations end, so this is cheap even on
    a full dump.
    """
    with open_source(source) as stream:
        for _, element in etree.iterparse(stream, events=('end',), tag='{*}namespaces'):
            namespaces = Namespaces(
                Namespace(int(child.get('key')), child.text or '')
                for child in element.iterchildren('{*}namespace')
            )
            logger.info(f"Read {len(namespaces)} namespace declarations")
            return namespaces
    raise ValueError("The dump declares no namespaces")


class StreamingPageParser:
    """
    Yields the pages of a dump that belong to the accepted namespaces.

    The namespace of a page is derived from its title, not from its <ns>
    element, so that the namespace table is the single source of truth.
    """

    def __init__(self, namespaces: Namespaces, accepted: Collection[int] = (MAIN, CATEGORY)):
        self.namespaces = namespaces
        self.accepted = frozenset(accepted)
        self.skipped = 0

    def iter_pages(self, source: Source) -> Iterator[RawPage]:
        """
        Stream the accepted pages of a dump.

        The id of a page is the first <id> inside it; the ids of its
        revisions and contributors come later and are ignored.
        """
        with open_source(source) as stream:
            context = etree.iterparse(stream, events=('end',), tag='{*}page', huge_tree=True)
            for _, element in context:
                page = self._read_page(element)
                element.clear()
                while element.getprevious() is not None:
                    del element.getparent()[0]
                if page is None:
                    self.skipped += 1
                    continue
                yield page
            del context

    def _read_page(self, element) -> Optional[RawPage]:
        title = element.findtext('{*}title')
        if not title or self.namespaces.namespace_of(title) not in self.accepted:
            return None
        wiki_id = next(element.iter('{*}id'), None)
        redirect = element.find('{*}redirect')
        text = element.find('{*}revision/{*}text')
        return RawPage(
            title=title,
            wiki_id=wiki_id.text.strip() if wiki_id is not None and wiki_id.text else '',
            text=text.text if text is not None else None,
            redirect_target=redirect.get('title') if redirect is not None else None,
        )
