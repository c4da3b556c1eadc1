"""
Graph construction from the intermediate link stream.

The import of one edition reads the stream twice:
1. Create one node per article or category and index it by title
2. Create the relationships between indexed nodes, counting them per node
3. Write the counters (and geotags) as node properties

The title index only lives for the duration of one edition. All editions
write into the same store, so imports of different editions must not run
at the same time.
"""
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..extractors.intermediate import read_intermediate
from ..progress import ProgressCounter, elapsed_since
from ..wikipedia.namespaces import CATEGORY, MAIN
from ..wikipedia.pages import Geotags, LinkRecord, PageRecord
from .nodes import GraphNode, NodeKind
from .protocols import GraphStore, RelationshipSpec
from .schema import LinkAttribute, LinkType, NodeAttribute, NodeLabel

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5000


@dataclass
class BuildStats:
    """What the import of one edition produced."""
    language: str
    nodes: int = 0
    relationships: Counter = field(default_factory=Counter)
    unresolved_links: int = 0
    dropped_links: int = 0
    updated_nodes: int = 0

    @property
    def total_relationships(self) -> int:
        return sum(self.relationships.values())


def link_properties(link: LinkRecord) -> Dict[str, Any]:
    """Relationship properties of a link; flags only appear when true."""
    properties: Dict[str, Any] = {
        LinkAttribute.OFFSET.value: link.offset,
        LinkAttribute.RANK.value: link.rank,
        LinkAttribute.OCCURRENCES.value: link.occurrences,
    }
    if link.anchors:
        properties[LinkAttribute.ANCHORS.value] = sorted(link.anchors)
    if link.in_infobox:
        properties[LinkAttribute.INFOBOX.value] = True
    if link.in_intro:
        properties[LinkAttribute.INTRO.value] = True
    if link.is_disambiguation_link:
        properties[LinkAttribute.DISAMBIG.value] = True
    return properties


def node_labels(page: PageRecord) -> List[str]:
    labels = [NodeLabel.CATEGORY.value if page.namespace_id == CATEGORY else NodeLabel.ARTICLE.value]
    if page.is_redirect:
        labels.append(NodeLabel.REDIRECT.value)
    if page.is_disambiguation:
        labels.append(NodeLabel.DISAMBIG.value)
    return labels


class GraphBuilder:
    """
    Imports the pages of one edition into a graph store.

    Writes are buffered and sent to the store batch_size at a time.

    Example:
        builder = GraphBuilder(store, "en", geotags=geotags)
        stats = builder.import_file(Path("en/links.xml.bz2"))
    """

    def __init__(
        self,
        store: GraphStore,
        language: str,
        geotags: Optional[Mapping[str, Geotags]] = None,
        show_progress: bool = True,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        """
        Args:
            store: Graph store shared by all editions
            language: Language code written on every node
            geotags: Coordinates by wiki id, merged onto articles
            show_progress: Show tqdm counters
            batch_size: Nodes, relationships or property updates per store call
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.store = store
        self.language = language
        self.geotags = geotags or {}
        self.show_progress = show_progress
        self.batch_size = batch_size
        self.index: Dict[str, GraphNode] = {}
        self.stats = BuildStats(language)

    def _flush_nodes(self, pending: List[Tuple[GraphNode, List[str], Dict[str, Any]]]) -> None:
        store_ids = self.store.create_nodes([(labels, properties) for _, labels, properties in pending])
        for (node, _, _), store_id in zip(pending, store_ids):
            node.store_id = store_id
        pending.clear()

    def create_nodes(self, pages: Iterable[PageRecord]) -> int:
        """
        Create the node of every article and category and index it by title.

        A title seen twice keeps the later node in the index.
        """
        created = 0
        pending: List[Tuple[GraphNode, List[str], Dict[str, Any]]] = []
        with ProgressCounter("Creating nodes", unit="nodes", show_progress=self.show_progress) as counter:
            for page in pages:
                if page.namespace_id not in (MAIN, CATEGORY):
                    continue
                kind = NodeKind.CATEGORY if page.namespace_id == CATEGORY else NodeKind.ARTICLE
                properties = {
                    NodeAttribute.TITLE.value: page.title,
                    NodeAttribute.LANG.value: self.language,
                    NodeAttribute.WIKIID.value: page.wiki_id,
                }
                if page.title in self.index:
                    logger.warning(f"Duplicate title {page.title!r}, the earlier node is no longer indexed")
                node = GraphNode(
                    kind=kind,
                    title=page.title,
                    lang=self.language,
                    wiki_id=page.wiki_id,
                    store_id=-1,
                    is_redirect=page.is_redirect,
                    geotags=self.geotags.get(page.wiki_id) if kind is NodeKind.ARTICLE else None,
                )
                self.index[page.title] = node
                pending.append((node, node_labels(page), properties))
                if len(pending) >= self.batch_size:
                    self._flush_nodes(pending)
                created += 1
                counter.increment()
            if pending:
                self._flush_nodes(pending)
        self.stats.nodes += created
        return created

    def create_links(self, pages: Iterable[PageRecord]) -> int:
        """Create the relationships of every indexed page. Run after create_nodes."""
        created = 0
        pending: List[RelationshipSpec] = []
        with ProgressCounter("Creating links", unit="links", show_progress=self.show_progress) as counter:
            for page in pages:
                source = self.index.get(page.title)
                if source is None:
                    continue
                for link in page.links:
                    target = self.index.get(link.target_title)
                    if target is None:
                        self.stats.unresolved_links += 1
                        continue
                    link_type = self._link_type(source, target)
                    if link_type is None:
                        self.stats.dropped_links += 1
                        continue
                    pending.append(
                        (source.store_id, target.store_id, link_type.value, link_properties(link))
                    )
                    if len(pending) >= self.batch_size:
                        self.store.create_relationships(pending)
                        pending.clear()
                    self.stats.relationships[link_type.value] += 1
                    created += 1
                    counter.increment()
            if pending:
                self.store.create_relationships(pending)
        return created

    @staticmethod
    def _link_type(source: GraphNode, target: GraphNode) -> Optional[LinkType]:
        """Pick the relationship type and update the counters it implies."""
        if source.is_redirect:
            return LinkType.REDIRECT_TO
        if source.is_article and target.is_category:
            source.parents += 1
            target.size += 1
            return LinkType.BELONG_TO
        if source.is_category and target.is_category:
            source.parents += 1
            target.children += 1
            return LinkType.CHILD_OF
        if source.is_article and target.is_article:
            source.outdegree += 1
            target.indegree += 1
            return LinkType.LINK
        # category to article
        return None

    def update_attributes(self) -> int:
        """Write the final properties of every indexed node."""
        pending: List[Tuple[int, Dict[str, Any]]] = []
        with ProgressCounter("Updating attributes", unit="nodes", show_progress=self.show_progress) as counter:
            for node in self.index.values():
                pending.append((node.store_id, node.attributes()))
                if len(pending) >= self.batch_size:
                    self.store.set_nodes_properties(pending)
                    pending.clear()
                counter.increment()
            if pending:
                self.store.set_nodes_properties(pending)
        self.stats.updated_nodes += counter.count
        return counter.count

    def import_file(self, path: Path) -> BuildStats:
        """
        Run the three passes over an intermediate file.

        The title index is emptied afterwards.
        """
        start = time.monotonic()
        logger.info(f"[{self.language}] Importing {Path(path).name}")
        try:
            self.create_nodes(read_intermediate(path))
            logger.info(f"[{self.language}] {self.stats.nodes} nodes created in {elapsed_since(start)}")
            self.create_links(read_intermediate(path))
            logger.info(
                f"[{self.language}] {self.stats.total_relationships} links created "
                f"({self.stats.unresolved_links} unresolved) in {elapsed_since(start)}"
            )
            self.update_attributes()
        finally:
            self.index.clear()
        logger.info(f"[{self.language}] Import done in {elapsed_since(start)}")
        return self.stats
