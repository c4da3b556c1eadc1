"""
Cross-language links between editions already in the graph.

For every edition, the langlinks table says which page of which other
edition covers the same topic. Resolution runs against the store once all
editions are imported; the resolved pairs are written to a CSV file and
imported in a separate, sequential step.
"""
import csv
import logging
import time
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple

from ..compression import PathLike
from ..progress import ProgressCounter, elapsed_since
from ..wikipedia.namespaces import CATEGORY, MAIN, Namespaces, normalize_title
from ..wikipedia.sql_dumps import iter_langlinks
from .builder import DEFAULT_BATCH_SIZE
from .protocols import GraphStore, RelationshipSpec
from .schema import LinkType, NodeAttribute, NodeLabel

logger = logging.getLogger(__name__)

_LABEL_BY_NAMESPACE = {MAIN: NodeLabel.ARTICLE.value, CATEGORY: NodeLabel.CATEGORY.value}


class CrossLinkResolver:
    """
    Resolves the langlinks rows of one edition to pairs of store node ids.

    Only reads the store, so resolvers of several editions can run side by
    side.
    """

    def __init__(
        self,
        store: GraphStore,
        language: str,
        namespaces_by_language: Mapping[str, Namespaces],
        show_progress: bool = True,
    ):
        """
        Args:
            store: Graph store holding every imported edition
            language: Edition the langlinks rows come from
            namespaces_by_language: Namespace tables of all imported editions
            show_progress: Show a tqdm counter
        """
        self.store = store
        self.language = language
        self.namespaces_by_language = namespaces_by_language
        self.show_progress = show_progress
        self.misses = 0

    def _node_with_language(self, label: str, key: str, value: str, language: str) -> Optional[int]:
        for node in self.store.find_nodes(label, key, value):
            node_language = node.properties.get(NodeAttribute.LANG.value)
            if node_language is not None and node_language.lower() == language.lower():
                return node.id
        return None

    def source_node(self, wiki_id: str) -> Optional[int]:
        """Node of this edition's page with the wiki id, articles first."""
        for label in (NodeLabel.ARTICLE.value, NodeLabel.CATEGORY.value):
            node_id = self._node_with_language(label, NodeAttribute.WIKIID.value, wiki_id, self.language)
            if node_id is not None:
                return node_id
        return None

    def target_node(self, title: str, language: str) -> Optional[int]:
        """Node of the page with the title in another edition, if it is an article or category."""
        namespaces = self.namespaces_by_language.get(language)
        if namespaces is None:
            return None
        label = _LABEL_BY_NAMESPACE.get(namespaces.namespace_of(title))
        if label is None:
            return None
        return self._node_with_language(label, NodeAttribute.TITLE.value, title, language)

    def resolve(self, rows: Iterable[Tuple[str, str, str]]) -> Iterator[Tuple[int, int]]:
        """
        Yield (source node id, target node id) for every resolvable row.

        Rows pointing to an edition that was not imported are ignored; rows
        whose source or target is not in the store are counted in misses.
        """
        for wiki_id, language, title in rows:
            if language not in self.namespaces_by_language:
                continue
            title = normalize_title(title)
            namespaces = self.namespaces_by_language[language]
            if namespaces.namespace_of(title) not in _LABEL_BY_NAMESPACE:
                continue
            source_id = self.source_node(wiki_id)
            target_id = self.target_node(title, language) if source_id is not None else None
            if source_id is None or target_id is None:
                self.misses += 1
                continue
            yield source_id, target_id

    def extract(self, langlinks_path: PathLike, output_path: PathLike) -> int:
        """
        Resolve a langlinks dump and write the pairs as "source,target" lines.

        Returns:
            Number of cross-links written
        """
        start = time.monotonic()
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8', newline='') as f, \
                ProgressCounter(f"Resolving cross-links ({self.language})", unit="links",
                                show_progress=self.show_progress) as counter:
            writer = csv.writer(f)
            for source_id, target_id in self.resolve(iter_langlinks(langlinks_path)):
                writer.writerow([source_id, target_id])
                counter.increment()
        logger.info(
            f"[{self.language}] {counter.count} cross-links resolved "
            f"({self.misses} unresolved) in {elapsed_since(start)}"
        )
        return counter.count


def import_cross_links(
    store: GraphStore,
    path: PathLike,
    show_progress: bool = True,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Create a crosslink relationship for every line of a resolved cross-link file."""
    pending: List[RelationshipSpec] = []
    with open(path, 'r', encoding='utf-8', newline='') as f, \
            ProgressCounter("Importing cross-links", unit="links", show_progress=show_progress) as counter:
        for line_number, row in enumerate(csv.reader(f), start=1):
            if not row:
                continue
            if len(row) != 2:
                raise ValueError(f"{path}:{line_number}: expected 'source,target', got {row!r}")
            pending.append((int(row[0]), int(row[1]), LinkType.CROSSLINK.value, {}))
            if len(pending) >= batch_size:
                store.create_relationships(pending)
                pending.clear()
            counter.increment()
        if pending:
            store.create_relationships(pending)
    return counter.count
