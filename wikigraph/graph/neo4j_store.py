"""
GraphStore backed by a Neo4j server, through the official driver.

Node and relationship ids are the internal ids returned by id(), which the
cross-link files carry as integers. id() is deprecated in Neo4j 5 but still
available there; the store targets 5.x servers.
"""
import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from neo4j import GraphDatabase

from .protocols import NodeSpec, RelationshipSpec, StoredNode

logger = logging.getLogger(__name__)


def _quote(name: str) -> str:
    """Quote a label, relationship type or property key for Cypher."""
    return '`' + name.replace('`', '``') + '`'


def _create_nodes(tx, nodes: Sequence[NodeSpec]) -> List[int]:
    # labels cannot be parameters, so one UNWIND per label combination
    groups: Dict[Tuple[str, ...], List[Dict[str, Any]]] = defaultdict(list)
    for index, (labels, properties) in enumerate(nodes):
        groups[tuple(labels)].append({'index': index, 'properties': properties or {}})

    node_ids: List[Optional[int]] = [None] * len(nodes)
    for labels, rows in groups.items():
        label_clause = ''.join(f":{_quote(label)}" for label in labels)
        query = (
            f"UNWIND $rows AS row CREATE (n{label_clause}) SET n = row.properties "
            "RETURN row.index AS index, id(n) AS node_id"
        )
        for record in tx.run(query, rows=rows):
            node_ids[record["index"]] = record["node_id"]
    return node_ids


def _set_nodes_properties(tx, updates: Sequence[Tuple[int, Dict[str, Any]]]) -> None:
    rows = [{'node_id': node_id, 'properties': properties} for node_id, properties in updates]
    tx.run("UNWIND $rows AS row MATCH (n) WHERE id(n) = row.node_id SET n = row.properties",
           rows=rows)


def _create_relationships(tx, relationships: Sequence[RelationshipSpec]) -> List[int]:
    groups: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for index, (source_id, target_id, type, properties) in enumerate(relationships):
        groups[type].append({
            'index': index,
            'source_id': source_id,
            'target_id': target_id,
            'properties': properties or {},
        })

    relationship_ids: List[Optional[int]] = [None] * len(relationships)
    for type, rows in groups.items():
        query = (
            "UNWIND $rows AS row "
            "MATCH (a) WHERE id(a) = row.source_id "
            "MATCH (b) WHERE id(b) = row.target_id "
            f"CREATE (a)-[r:{_quote(type)}]->(b) SET r = row.properties "
            "RETURN row.index AS index, id(r) AS relationship_id"
        )
        for record in tx.run(query, rows=rows):
            relationship_ids[record["index"]] = record["relationship_id"]

    missing = [relationships[index][:2] for index, rel_id in enumerate(relationship_ids) if rel_id is None]
    if missing:
        # raising rolls the whole batch back
        raise KeyError(f"Unknown node in relationship(s) {missing[:5]}")
    return relationship_ids


def _find_nodes(tx, label: str, key: str, value: Any):
    query = (
        f"MATCH (n:{_quote(label)}) WHERE n.{_quote(key)} = $value "
        "RETURN id(n) AS node_id, labels(n) AS labels, properties(n) AS properties "
        "ORDER BY node_id"
    )
    return [
        StoredNode(record["node_id"], tuple(record["labels"]), dict(record["properties"]))
        for record in tx.run(query, value=value)
    ]


class Neo4jGraphStore:
    """
    GraphStore over a Neo4j database.

    Every call runs in its own short session, so the store can be shared by
    the reader threads of the cross-link pass. A batch is written in a
    single transaction.
    """

    def __init__(self, uri: str, user: str, password: str, database: Optional[str] = None):
        self.uri = uri
        self.database = database
        self.driver = GraphDatabase.driver(uri, auth=(user, password))
        self.driver.verify_connectivity()
        logger.info(f"Connected to Neo4j at {uri}")

    def _session(self):
        return self.driver.session(database=self.database)

    def create_node(self, labels: Sequence[str], properties: Optional[Dict[str, Any]] = None) -> int:
        return self.create_nodes([(labels, properties or {})])[0]

    def create_nodes(self, nodes: Sequence[NodeSpec]) -> List[int]:
        if not nodes:
            return []
        with self._session() as session:
            return session.execute_write(_create_nodes, list(nodes))

    def set_node_properties(self, node_id: int, properties: Dict[str, Any]) -> None:
        self.set_nodes_properties([(node_id, properties)])

    def set_nodes_properties(self, updates: Sequence[Tuple[int, Dict[str, Any]]]) -> None:
        if not updates:
            return
        with self._session() as session:
            session.execute_write(_set_nodes_properties, list(updates))

    def create_relationship(
        self,
        source_id: int,
        target_id: int,
        type: str,
        properties: Optional[Dict[str, Any]] = None,
    ) -> int:
        return self.create_relationships([(source_id, target_id, type, properties or {})])[0]

    def create_relationships(self, relationships: Sequence[RelationshipSpec]) -> List[int]:
        if not relationships:
            return []
        with self._session() as session:
            return session.execute_write(_create_relationships, list(relationships))

    def find_nodes(self, label: str, key: str, value: Any) -> Iterator[StoredNode]:
        with self._session() as session:
            return iter(session.execute_read(_find_nodes, label, key, value))

    def create_indexes(self, indexes: Iterable[Tuple[str, str]]) -> None:
        with self._session() as session:
            for label, key in indexes:
                session.run(
                    f"CREATE INDEX IF NOT EXISTS FOR (n:{_quote(label)}) ON (n.{_quote(key)})"
                ).consume()
                logger.debug(f"Index on :{label}({key}) ensured")

    def shutdown(self) -> None:
        self.driver.close()
        logger.info(f"Disconnected from Neo4j at {self.uri}")

    def __repr__(self):
        return f"Neo4jGraphStore(uri={self.uri!r}, database={self.database!r})"
