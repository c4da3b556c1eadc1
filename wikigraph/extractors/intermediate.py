"""
The intermediate link stream.

Link extraction and graph import are decoupled by a compressed XML file with
one <p> element per page. Tags are kept to one or two letters because the
file holds every link of an edition:

    <d>
      <p><t>Java</t><i>15580</i><nms>0</nms><dis>t</dis>
        <dl><lt>Java (island)</lt><of>2</of><r>1</r><in>t</in><oc>1</oc></dl>
        <rl><lt>Coffee</lt><a>coffee</a><of>61</of><r>3</r><oc>2</oc></rl>
      </p>
    </d>

Boolean flags are written only when true. Disambiguation links use <dl>
instead of <rl>.
"""
import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Iterator, Optional

from lxml import etree

from ..compression import PathLike, open_compressed
from ..wikipedia.pages import LinkRecord, PageRecord

logger = logging.getLogger(__name__)

TRUE = 't'


class Tags:
    """Element names of the intermediate stream."""
    ROOT = 'd'
    PAGE = 'p'
    TITLE = 't'
    ID = 'i'
    REDIRECT = 'rdr'
    DISAMBIGUATION = 'dis'
    NAMESPACE = 'nms'
    REGULAR_LINK = 'rl'
    DISAMBIGUATION_LINK = 'dl'
    LINK_TITLE = 'lt'
    ANCHOR = 'a'
    OFFSET = 'of'
    RANK = 'r'
    INFOBOX = 'ib'
    INTRO = 'in'
    OCCURRENCES = 'oc'


def _child(parent, tag: str, text: str):
    etree.SubElement(parent, tag).text = text


def page_to_element(page: PageRecord):
    """Build the <p> element of a page."""
    element = etree.Element(Tags.PAGE)
    _child(element, Tags.TITLE, page.title)
    _child(element, Tags.ID, page.wiki_id)
    _child(element, Tags.NAMESPACE, str(page.namespace_id))
    if page.is_redirect:
        _child(element, Tags.REDIRECT, TRUE)
    if page.is_disambiguation:
        _child(element, Tags.DISAMBIGUATION, TRUE)
    for link in page.links:
        tag = Tags.DISAMBIGUATION_LINK if link.is_disambiguation_link else Tags.REGULAR_LINK
        link_element = etree.SubElement(element, tag)
        _child(link_element, Tags.LINK_TITLE, link.target_title)
        # sorted so that the file does not depend on set ordering
        for anchor in sorted(link.anchors):
            _child(link_element, Tags.ANCHOR, anchor)
        _child(link_element, Tags.OFFSET, str(link.offset))
        _child(link_element, Tags.RANK, str(link.rank))
        if link.in_infobox:
            _child(link_element, Tags.INFOBOX, TRUE)
        if link.in_intro:
            _child(link_element, Tags.INTRO, TRUE)
        _child(link_element, Tags.OCCURRENCES, str(link.occurrences))
    return element


def _link_from_element(element) -> LinkRecord:
    return LinkRecord(
        target_title=element.findtext(Tags.LINK_TITLE, default=''),
        offset=int(element.findtext(Tags.OFFSET, default='0')),
        rank=int(element.findtext(Tags.RANK, default='0')),
        anchors={anchor.text or '' for anchor in element.iterchildren(Tags.ANCHOR)},
        in_infobox=element.find(Tags.INFOBOX) is not None,
        in_intro=element.find(Tags.INTRO) is not None,
        occurrences=int(element.findtext(Tags.OCCURRENCES, default='1')),
        is_disambiguation_link=element.tag == Tags.DISAMBIGUATION_LINK,
    )


def page_from_element(element) -> PageRecord:
    """Rebuild a PageRecord from its <p> element."""
    return PageRecord(
        title=element.findtext(Tags.TITLE, default=''),
        wiki_id=element.findtext(Tags.ID, default=''),
        namespace_id=int(element.findtext(Tags.NAMESPACE, default='0')),
        is_redirect=element.find(Tags.REDIRECT) is not None,
        is_disambiguation=element.find(Tags.DISAMBIGUATION) is not None,
        links=[
            _link_from_element(child)
            for child in element.iterchildren(Tags.REGULAR_LINK, Tags.DISAMBIGUATION_LINK)
        ],
    )


class IntermediateWriter:
    """
    Writes PageRecords to an intermediate file, one at a time.

    Use as a context manager; the document is only complete once closed.

    Example:
        with IntermediateWriter(path) as writer:
            for page in pages:
                writer.write(page)
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self.count = 0
        self._stack: Optional[ExitStack] = None
        self._xf = None

    def open(self) -> 'IntermediateWriter':
        self.path.parent.mkdir(parents=True, exist_ok=True)
        stack = ExitStack()
        try:
            stream = stack.enter_context(open_compressed(self.path, 'wb'))
            self._xf = stack.enter_context(etree.xmlfile(stream, encoding='utf-8'))
            self._xf.write_declaration()
            stack.enter_context(self._xf.element(Tags.ROOT))
        except BaseException:
            stack.close()
            raise
        self._stack = stack
        return self

    def write(self, page: PageRecord) -> None:
        if self._xf is None:
            raise RuntimeError(f"{self.path} is not open for writing")
        self._xf.write(page_to_element(page))
        self.count += 1

    def close(self) -> None:
        if self._stack is not None:
            self._stack.close()
            self._stack = None
            self._xf = None

    def __enter__(self) -> 'IntermediateWriter':
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def read_intermediate(path: PathLike) -> Iterator[PageRecord]:
    """Stream the PageRecords of an intermediate file, in the order they were written."""
    with open_compressed(path, 'rb') as stream:
        context = etree.iterparse(stream, events=('end',), tag=Tags.PAGE)
        for _, element in context:
            yield page_from_element(element)
            element.clear()
            while element.getprevious() is not None:
                del element.getparent()[0]
        del context
