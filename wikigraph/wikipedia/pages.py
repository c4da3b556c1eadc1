"""
Records passed between the stages of an import.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Set


@dataclass
class RawPage:
    """A <page> element of an XML dump, as read by StreamingPageParser."""
    title: str
    wiki_id: str
    text: Optional[str]
    redirect_target: Optional[str] = None


@dataclass
class LinkRecord:
    """
    All the links from one page to one target title, merged.

    offset and rank belong to the first occurrence; the flags are true if any
    occurrence had them.
    """
    target_title: str
    offset: int
    rank: int
    anchors: Set[str] = field(default_factory=set)
    in_infobox: bool = False
    in_intro: bool = False
    occurrences: int = 1
    is_disambiguation_link: bool = False

    def merge(self, anchor: Optional[str], in_infobox: bool, in_intro: bool) -> None:
        """Fold a further occurrence of the same target into this record."""
        if anchor:
            self.anchors.add(anchor)
        self.occurrences += 1
        self.in_infobox = self.in_infobox or in_infobox
        self.in_intro = self.in_intro or in_intro


@dataclass
class PageRecord:
    """A page of the intermediate stream: one future graph node and its out-links."""
    title: str
    wiki_id: str
    namespace_id: int
    is_redirect: bool = False
    is_disambiguation: bool = False
    links: List[LinkRecord] = field(default_factory=list)


@dataclass
class Geotags:
    """Primary coordinates of a page, from the geo_tags table."""
    latitude: float
    longitude: float
    globe: Optional[str] = None
    type: Optional[str] = None
