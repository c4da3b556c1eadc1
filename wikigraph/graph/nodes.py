"""
In-memory node records used while one edition is imported.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..wikipedia.pages import Geotags
from .schema import NodeAttribute


class NodeKind(Enum):
    ARTICLE = 'article'
    CATEGORY = 'category'


@dataclass
class GraphNode:
    """
    A page of the edition being imported, with its running counters.

    Articles and categories share this one record; kind says which counters
    are meaningful (outdegree/indegree/geotags for articles, size/children for
    categories, parents for both).
    """
    kind: NodeKind
    title: str
    lang: str
    wiki_id: str
    store_id: int
    is_redirect: bool = False
    parents: int = 0
    outdegree: int = 0
    indegree: int = 0
    geotags: Optional[Geotags] = None
    size: int = 0
    children: int = 0

    @property
    def is_article(self) -> bool:
        return self.kind is NodeKind.ARTICLE

    @property
    def is_category(self) -> bool:
        return self.kind is NodeKind.CATEGORY

    def attributes(self) -> Dict[str, Any]:
        """The full property set written to the store once all links are in."""
        attributes: Dict[str, Any] = {
            NodeAttribute.TITLE.value: self.title,
            NodeAttribute.LANG.value: self.lang,
            NodeAttribute.WIKIID.value: self.wiki_id,
        }
        if self.is_category:
            attributes[NodeAttribute.SIZE.value] = self.size
            attributes[NodeAttribute.CHILDREN.value] = self.children
            attributes[NodeAttribute.PARENTS.value] = self.parents
            return attributes

        attributes[NodeAttribute.OUTDEGREE.value] = self.outdegree
        attributes[NodeAttribute.INDEGREE.value] = self.indegree
        attributes[NodeAttribute.PARENTS.value] = self.parents
        if self.geotags is not None:
            if self.geotags.globe is not None:
                attributes[NodeAttribute.GLOBE.value] = self.geotags.globe
            attributes[NodeAttribute.LATITUDE.value] = self.geotags.latitude
            attributes[NodeAttribute.LONGITUDE.value] = self.geotags.longitude
            if self.geotags.type is not None:
                attributes[NodeAttribute.TYPE.value] = self.geotags.type
        return attributes

    def __repr__(self):
        return (f"GraphNode(kind={self.kind.value}, title={self.title!r}, "
                f"lang={self.lang!r}, store_id={self.store_id}, "
                f"redirect={self.is_redirect})")
