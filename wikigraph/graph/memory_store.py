"""
A graph store that keeps everything in process memory.

Used for tests and for small editions; on shutdown the graph can be written
out as two JSONL files.
"""
import json
import logging
import threading
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from tqdm import tqdm

from .protocols import NodeSpec, RelationshipSpec, StoredNode, StoredRelationship

logger = logging.getLogger(__name__)


class InMemoryGraphStore:
    """
    GraphStore kept in dictionaries.

    find_nodes on an indexed (label, key) pair is a dictionary lookup; other
    pairs fall back to a scan. Writes are serialized by a lock, so several
    readers and one writer may share the store.
    """

    def __init__(self, output_dir: Optional[Path] = None, show_progress: bool = True):
        """
        Args:
            output_dir: Where shutdown() writes nodes.jsonl and relationships.jsonl,
                or None to keep the graph in memory only
            show_progress: Show progress bars while exporting
        """
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.show_progress = show_progress
        self.nodes: Dict[int, StoredNode] = {}
        self.relationships: Dict[int, StoredRelationship] = {}
        self._indexes: Dict[Tuple[str, str], Dict[Any, Set[int]]] = {}
        self._lock = threading.Lock()

    def create_node(self, labels: Sequence[str], properties: Optional[Dict[str, Any]] = None) -> int:
        with self._lock:
            node_id = len(self.nodes)
            node = StoredNode(node_id, tuple(labels), dict(properties or {}))
            self.nodes[node_id] = node
            self._index_node(node)
            return node_id

    def create_nodes(self, nodes: Sequence[NodeSpec]) -> List[int]:
        return [self.create_node(labels, properties) for labels, properties in nodes]

    def set_node_properties(self, node_id: int, properties: Dict[str, Any]) -> None:
        with self._lock:
            node = self.nodes[node_id]
            self._unindex_node(node)
            node.properties = dict(properties)
            self._index_node(node)

    def set_nodes_properties(self, updates: Sequence[Tuple[int, Dict[str, Any]]]) -> None:
        for node_id, properties in updates:
            self.set_node_properties(node_id, properties)

    def create_relationship(
        self,
        source_id: int,
        target_id: int,
        type: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> int:
        with self._lock:
            if source_id not in self.nodes or target_id not in self.nodes:
                raise KeyError(f"Unknown node in relationship {source_id} -> {target_id}")
            relationship_id = len(self.relationships)
            self.relationships[relationship_id] = StoredRelationship(
                relationship_id, source_id, target_id, type, dict(properties or {})
            )
            return relationship_id

    def create_relationships(self, relationships: Sequence[RelationshipSpec]) -> List[int]:
        return [
            self.create_relationship(source_id, target_id, type, properties)
            for source_id, target_id, type, properties in relationships
        ]

    def find_nodes(self, label: str, key: str, value: Any) -> Iterator[StoredNode]:
        index = self._indexes.get((label, key))
        if index is not None:
            node_ids = sorted(index.get(value, ()))
            return iter([self.nodes[node_id] for node_id in node_ids])
        return iter([
            node for node in list(self.nodes.values())
            if label in node.labels and node.properties.get(key) == value
        ])

    def create_indexes(self, indexes: Iterable[Tuple[str, str]]) -> None:
        with self._lock:
            for label, key in indexes:
                if (label, key) in self._indexes:
                    continue
                index: Dict[Any, Set[int]] = defaultdict(set)
                for node in self.nodes.values():
                    if label in node.labels and key in node.properties:
                        index[node.properties[key]].add(node.id)
                self._indexes[(label, key)] = index
                logger.debug(f"Index on :{label}({key}) created")

    def relationships_of_type(self, type: str) -> List[StoredRelationship]:
        return [rel for rel in self.relationships.values() if rel.type == type]

    def _index_node(self, node: StoredNode) -> None:
        for (label, key), index in self._indexes.items():
            if label in node.labels and key in node.properties:
                index[node.properties[key]].add(node.id)

    def _unindex_node(self, node: StoredNode) -> None:
        for (label, key), index in self._indexes.items():
            if label in node.labels and key in node.properties:
                index[node.properties[key]].discard(node.id)

    def shutdown(self) -> None:
        if self.output_dir is None:
            return
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._write_jsonl(
            self.output_dir / 'nodes.jsonl',
            ({'id': node.id, 'labels': list(node.labels), **node.properties}
             for node in self.nodes.values()),
            total=len(self.nodes),
            desc="Writing nodes",
        )
        self._write_jsonl(
            self.output_dir / 'relationships.jsonl',
            ({'id': rel.id, 'source': rel.source_id, 'target': rel.target_id,
              'type': rel.type, **rel.properties}
             for rel in self.relationships.values()),
            total=len(self.relationships),
            desc="Writing relationships",
        )
        logger.info(
            f"Graph written to {self.output_dir}: {len(self.nodes)} nodes, "
            f"{len(self.relationships)} relationships"
        )

    def _write_jsonl(self, path: Path, records, total: int, desc: str) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            for record in tqdm(records, total=total, disable=not self.show_progress, desc=desc):
                f.write(json.dumps(record, ensure_ascii=False) + '\n')

    def __repr__(self):
        return (f"InMemoryGraphStore(nodes={len(self.nodes)}, "
                f"relationships={len(self.relationships)})")
