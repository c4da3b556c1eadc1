"""
Link extraction from raw wiki markup.

The markup is never rendered. References and templates are cut out, the
infobox and the introduction are located so that links can be flagged as
appearing in them, and every [[...]] is turned into a LinkRecord.

Offsets are character positions in the text after references and templates
have been removed, which is also the text the introduction is measured on.
The infobox span is measured before templates are removed.
"""
import re
from dataclasses import dataclass
from typing import AbstractSet, Dict, List, Optional, Tuple

from .namespaces import GRAPHED_NAMESPACES, Namespaces, normalize_title
from .pages import LinkRecord, PageRecord, RawPage

LINK_PATTERN = re.compile(r'\[\[(.+?)\]\]')

# <ref>, <ref name=...>, <ref .../> and </ref>; group 1 is "/" when self-closing.
REF_TAG_PATTERN = re.compile(r'<ref(?=[\s>/])[^>]*?(/?)>|</ref\s*>', re.IGNORECASE)

_BRACE = re.compile(r'[{}]')

SECTION_HEADING = '=='


@dataclass(frozen=True)
class Span:
    """A region of a page's text. Both ends count as inside."""
    start: int
    end: int

    def covers(self, offset: int) -> bool:
        return self.start <= offset <= self.end


def _first_reference(text: str) -> Optional[Tuple[int, int]]:
    depth = 0
    start = None
    for match in REF_TAG_PATTERN.finditer(text):
        if match.group(0).startswith('</'):
            if depth == 0:
                # closing tag without an opener
                continue
            depth -= 1
        else:
            if depth == 0:
                start = match.start()
            depth += 1
            if match.group(1):
                depth -= 1
        if depth == 0:
            return start, match.end()
    if start is not None:
        return start, len(text)
    return None


def strip_references(text: str) -> str:
    """
    Remove <ref>...</ref> blocks and self-closing <ref/> tags.

    Nested references are removed together with the outermost one. A
    reference that is never closed runs to the end of the text. Each removal
    restarts the scan from the beginning.
    """
    span = _first_reference(text)
    while span is not None:
        start, end = span
        text = text[:start] + text[end:]
        span = _first_reference(text)
    return text


def _template_end(text: str, start: int) -> Optional[int]:
    """Index of the '}' closing the template opened by the '{{' at start."""
    depth = 2
    for match in _BRACE.finditer(text, start + 2):
        depth += 1 if match.group(0) == '{' else -1
        if depth == 0:
            return match.start()
    return None


def find_infobox(text: str, infobox_templates: AbstractSet[str]) -> Optional[Span]:
    """
    Locate the first template whose name is a known infobox template.

    Only templates with at least one parameter are considered. The search
    stops at the first unterminated template.

    Args:
        text: Page markup
        infobox_templates: Normalized template names, without namespace prefix

    Returns:
        Span of the template including its braces, or None
    """
    search_from = 0
    while True:
        start = text.find('{{', search_from)
        if start < 0:
            return None
        end = _template_end(text, start)
        if end is None:
            return None
        bar = text.find('|', start, end + 1)
        if bar >= 0:
            name = normalize_title(text[start + 2:bar].strip())
            if name in infobox_templates:
                return Span(start, end + 1)
        search_from = end + 1


def strip_templates(text: str) -> str:
    """
    Remove every top-level {{...}} template, nested ones included.

    An unterminated template is removed up to the end of the text.

    Example:
        >>> strip_templates("a {{b {{c}} d}} e")
        'a  e'
    """
    search_from = 0
    while True:
        start = text.find('{{', search_from)
        if start < 0:
            return text
        end = _template_end(text, start)
        if end is None:
            return text[:start]
        text = text[:start] + text[end + 1:]
        # the removal may have joined two single braces
        search_from = max(0, start - 1)


def find_introduction(text: str) -> Optional[Span]:
    """The text before the first section heading, or None if there is no heading."""
    end = text.find(SECTION_HEADING)
    if end <= 0:
        return None
    return Span(0, end)


def split_anchor(link: str) -> Tuple[str, Optional[str]]:
    """
    Split the inside of a [[...]] into target title and anchor text.

    The split happens on the last '|'.

    Example:
        >>> split_anchor("Java (island)|Java")
        ('Java (island)', 'Java')
    """
    target, bar, anchor = link.rpartition('|')
    if not bar:
        return link, None
    return target, anchor


def is_first_on_bullet(text: str, offset: int) -> bool:
    """
    True if only apostrophes and whitespace lie between the closest '*'
    before offset and offset itself.
    """
    star = text.rfind('*', 0, offset)
    if star < 0:
        return False
    return not text[star + 1:offset].replace("'", "").strip()


class WikiMarkupAnalyzer:
    """
    Turns the markup of a page into its outgoing LinkRecords.

    The lookup tables are read-only and may be shared between analyzers
    running in different threads.
    """

    def __init__(
        self,
        namespaces: Namespaces,
        infobox_templates: AbstractSet[str] = frozenset(),
        disambiguation_pages: AbstractSet[str] = frozenset(),
    ):
        """
        Args:
            namespaces: Namespace table of the edition
            infobox_templates: Names of the templates that render an infobox
            disambiguation_pages: Titles of the edition's disambiguation pages
        """
        self.namespaces = namespaces
        self.infobox_templates = infobox_templates
        self.disambiguation_pages = disambiguation_pages

    def extract_links(self, title: str, text: Optional[str]) -> List[LinkRecord]:
        """
        Extract the links of a page, one record per target, in scan order.

        The rank of a link counts every [[...]] seen so far, including links
        that were discarded (self-links, other namespaces).
        """
        if text is None:
            return []
        text = strip_references(text)
        infobox = find_infobox(text, self.infobox_templates)
        text = strip_templates(text)
        intro = find_introduction(text)
        on_disambiguation_page = title in self.disambiguation_pages

        links: Dict[str, LinkRecord] = {}
        for rank, match in enumerate(LINK_PATTERN.finditer(text), start=1):
            target, anchor = split_anchor(normalize_title(match.group(1)))
            if not target or target == title:
                continue
            if self.namespaces.namespace_of(target) not in GRAPHED_NAMESPACES:
                continue
            offset = match.start()
            in_infobox = infobox is not None and infobox.covers(offset)
            in_intro = intro is not None and intro.covers(offset)

            link = links.get(target)
            if link is not None:
                link.merge(anchor, in_infobox, in_intro)
                continue
            links[target] = LinkRecord(
                target_title=target,
                offset=offset,
                rank=rank,
                anchors={anchor} if anchor else set(),
                in_infobox=in_infobox,
                in_intro=in_intro,
                is_disambiguation_link=(
                    on_disambiguation_page and is_first_on_bullet(text, offset)
                ),
            )
        return list(links.values())

    def analyze(
        self,
        title: str,
        text: Optional[str],
        wiki_id: str,
        redirect_target: Optional[str] = None,
    ) -> PageRecord:
        """
        Build the intermediate record of a page.

        A redirect page gets a single link, to its target, and its markup is
        not looked at.
        """
        if redirect_target is not None:
            target = normalize_title(redirect_target)
            links = [LinkRecord(target, offset=0, rank=1)] if target and target != title else []
        else:
            links = self.extract_links(title, text)
        return PageRecord(
            title=title,
            wiki_id=wiki_id,
            namespace_id=self.namespaces.namespace_of(title),
            is_redirect=redirect_target is not None,
            is_disambiguation=title in self.disambiguation_pages,
            links=links,
        )

    def analyze_page(self, page: RawPage) -> PageRecord:
        return self.analyze(page.title, page.text, page.wiki_id, page.redirect_target)
