"""
Labels, relationship types and property names of the Wikipedia graph.
"""
from enum import Enum
from typing import Tuple


class NodeLabel(str, Enum):
    ARTICLE = 'Article'
    REDIRECT = 'Redirect'
    DISAMBIG = 'Disambig'
    CATEGORY = 'Category'


class LinkType(str, Enum):
    LINK = 'link'
    CROSSLINK = 'crosslink'
    REDIRECT_TO = 'redirectTo'
    BELONG_TO = 'belongTo'
    CHILD_OF = 'childOf'


class NodeAttribute(str, Enum):
    TITLE = 'title'
    LANG = 'lang'
    WIKIID = 'wikiid'
    OUTDEGREE = 'outdegree'
    INDEGREE = 'indegree'
    PARENTS = 'parents'
    CHILDREN = 'children'
    SIZE = 'size'
    GLOBE = 'globe'
    LATITUDE = 'latitude'
    LONGITUDE = 'longitude'
    TYPE = 'type'


class LinkAttribute(str, Enum):
    ANCHORS = 'anchors'
    OFFSET = 'offset'
    RANK = 'rank'
    INFOBOX = 'infobox'
    INTRO = 'intro'
    OCCURRENCES = 'occurrences'
    DISAMBIG = 'disambig'


# Every node carries its primary label, so lookups by title, language or
# wiki id are indexed per label.
DEFAULT_INDEXES: Tuple[Tuple[str, str], ...] = tuple(
    (label.value, attribute.value)
    for label in NodeLabel
    for attribute in (NodeAttribute.TITLE, NodeAttribute.LANG, NodeAttribute.WIKIID)
)
