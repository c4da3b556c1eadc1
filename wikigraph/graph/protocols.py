"""
Core protocols defining the interface between the importer and a graph store.
"""
from typing import Protocol, Iterator, Iterable, List, Sequence, Tuple, Dict, Any, Optional
from dataclasses import dataclass, field


@dataclass
class StoredNode:
    """A node as kept by a graph store."""
    id: int
    labels: Tuple[str, ...]
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StoredRelationship:
    """A directed, typed relationship between two stored nodes."""
    id: int
    source_id: int
    target_id: int
    type: str
    properties: Dict[str, Any] = field(default_factory=dict)


# A node to create: (labels, properties)
NodeSpec = Tuple[Sequence[str], Dict[str, Any]]
# A relationship to create: (source id, target id, type, properties)
RelationshipSpec = Tuple[int, int, str, Dict[str, Any]]


class GraphStore(Protocol):
    """
    Where nodes and relationships end up.

    The batch methods are what the importer calls on its hot paths; a store
    should write a whole batch in one round trip.
    """

    def create_node(self, labels: Sequence[str], properties: Optional[Dict[str, Any]] = None) -> int:
        """Creates a node and returns its id, which never changes afterwards."""
        ...

    def create_nodes(self, nodes: Sequence[NodeSpec]) -> List[int]:
        """Creates a batch of nodes and returns their ids, in input order."""
        ...

    def set_node_properties(self, node_id: int, properties: Dict[str, Any]) -> None:
        """Replaces all the properties of a node."""
        ...

    def set_nodes_properties(self, updates: Sequence[Tuple[int, Dict[str, Any]]]) -> None:
        """Replaces all the properties of a batch of nodes."""
        ...

    def create_relationship(
        self,
        source_id: int,
        target_id: int,
        type: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Creates a relationship and returns its id."""
        ...

    def create_relationships(self, relationships: Sequence[RelationshipSpec]) -> List[int]:
        """Creates a batch of relationships and returns their ids, in input order."""
        ...

    def find_nodes(self, label: str, key: str, value: Any) -> Iterator[StoredNode]:
        """Yields the nodes with the label whose property key equals value."""
        ...

    def create_indexes(self, indexes: Iterable[Tuple[str, str]]) -> None:
        """Declares (label, property) pairs that find_nodes will be called with."""
        ...

    def shutdown(self) -> None:
        """Flushes and releases the store."""
        ...
