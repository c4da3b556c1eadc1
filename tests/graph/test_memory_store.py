"""
Tests for the in-memory graph store.
"""
import json

import pytest

from wikigraph.graph.memory_store import InMemoryGraphStore


def test_node_ids_are_sequential():
    store = InMemoryGraphStore()
    first = store.create_node(["Article"], {"title": "Paris"})
    second = store.create_node(["Category"], {"title": "Category:Cities"})

    assert (first, second) == (0, 1)
    assert store.nodes[second].labels == ("Category",)


def test_find_nodes_without_index():
    store = InMemoryGraphStore()
    store.create_node(["Article"], {"title": "Paris", "lang": "en"})
    store.create_node(["Article"], {"title": "Paris", "lang": "fr"})
    store.create_node(["Category"], {"title": "Paris", "lang": "en"})

    found = list(store.find_nodes("Article", "title", "Paris"))

    assert [node.properties["lang"] for node in found] == ["en", "fr"]


def test_index_follows_property_changes():
    store = InMemoryGraphStore()
    store.create_indexes([("Article", "wikiid")])
    node_id = store.create_node(["Article"], {"wikiid": "10"})

    assert [node.id for node in store.find_nodes("Article", "wikiid", "10")] == [node_id]

    store.set_node_properties(node_id, {"wikiid": "11", "indegree": 2})

    assert list(store.find_nodes("Article", "wikiid", "10")) == []
    assert store.nodes[node_id].properties == {"wikiid": "11", "indegree": 2}
    assert [node.id for node in store.find_nodes("Article", "wikiid", "11")] == [node_id]


def test_index_created_after_nodes():
    store = InMemoryGraphStore()
    store.create_node(["Article"], {"title": "Paris"})
    store.create_indexes([("Article", "title"), ("Article", "title")])

    assert len(list(store.find_nodes("Article", "title", "Paris"))) == 1


def test_relationships():
    store = InMemoryGraphStore()
    a = store.create_node(["Article"])
    b = store.create_node(["Category"])

    rel = store.create_relationship(a, b, "belongTo", {"rank": 1})

    assert store.relationships[rel].source_id == a
    assert store.relationships[rel].target_id == b
    assert [r.id for r in store.relationships_of_type("belongTo")] == [rel]
    assert store.relationships_of_type("link") == []


def test_relationship_to_unknown_node():
    store = InMemoryGraphStore()
    a = store.create_node(["Article"])
    with pytest.raises(KeyError):
        store.create_relationship(a, 99, "link")


def test_shutdown_writes_jsonl(tmp_path):
    store = InMemoryGraphStore(output_dir=tmp_path / "graph", show_progress=False)
    a = store.create_node(["Article", "Redirect"], {"title": "Zürich"})
    b = store.create_node(["Article"], {"title": "Zurich"})
    store.create_relationship(a, b, "redirectTo", {"offset": 0})

    store.shutdown()

    nodes = [json.loads(line) for line in (tmp_path / "graph" / "nodes.jsonl").read_text(encoding="utf-8").splitlines()]
    relationships = [
        json.loads(line)
        for line in (tmp_path / "graph" / "relationships.jsonl").read_text(encoding="utf-8").splitlines()
    ]
    assert nodes[0] == {"id": 0, "labels": ["Article", "Redirect"], "title": "Zürich"}
    assert relationships == [{"id": 0, "source": 0, "target": 1, "type": "redirectTo", "offset": 0}]


def test_shutdown_without_output_dir_writes_nothing(tmp_path):
    store = InMemoryGraphStore()
    store.create_node(["Article"])
    store.shutdown()
    assert list(tmp_path.iterdir()) == []


def test_batch_writes():
    store = InMemoryGraphStore()
    ids = store.create_nodes([(["Article"], {"title": "Paris"}), (["Category"], {"title": "Category:Cities"})])
    rel_ids = store.create_relationships([(ids[0], ids[1], "belongTo", {"rank": 1}), (ids[1], ids[0], "link", {})])
    store.set_nodes_properties([(ids[0], {"title": "Paris", "parents": 1})])

    assert ids == [0, 1]
    assert rel_ids == [0, 1]
    assert store.relationships[rel_ids[0]].properties == {"rank": 1}
    assert store.nodes[ids[0]].properties == {"title": "Paris", "parents": 1}
    assert store.create_nodes([]) == []
