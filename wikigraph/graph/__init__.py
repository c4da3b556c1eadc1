"""
Graph construction: schema, node records, stores, builder and cross-links.
"""

from .protocols import GraphStore, NodeSpec, RelationshipSpec, StoredNode, StoredRelationship
from .schema import NodeLabel, LinkType, NodeAttribute, LinkAttribute, DEFAULT_INDEXES
from .nodes import GraphNode, NodeKind
from .memory_store import InMemoryGraphStore
from .builder import GraphBuilder, BuildStats
from .crosslinks import CrossLinkResolver, import_cross_links

__all__ = [
    # Store contract
    "GraphStore",
    "StoredNode",
    "StoredRelationship",
    "NodeSpec",
    "RelationshipSpec",
    "InMemoryGraphStore",
    # Schema
    "NodeLabel",
    "LinkType",
    "NodeAttribute",
    "LinkAttribute",
    "DEFAULT_INDEXES",
    # Builder
    "GraphNode",
    "NodeKind",
    "GraphBuilder",
    "BuildStats",
    # Cross-links
    "CrossLinkResolver",
    "import_cross_links",
]
