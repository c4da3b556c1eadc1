"""
Tests for the precomputed title lists.
"""
from wikigraph.wikipedia.lookups import load_template_names, load_title_set


def test_load_title_set(tmp_path):
    path = tmp_path / "disambiguation-pages.txt"
    path.write_text("Mercury\nJava\n\nJava\n", encoding="utf-8")

    assert load_title_set(path) == frozenset({"Mercury", "Java"})


def test_missing_title_set_is_empty(tmp_path):
    assert load_title_set(tmp_path / "missing.txt") == frozenset()


def test_load_template_names_drops_namespace(tmp_path):
    path = tmp_path / "infobox-templates.txt"
    path.write_text(
        "Template:Infobox person\nModèle:infobox Pays\nInfobox settlement\n",
        encoding="utf-8",
    )

    assert load_template_names(path) == frozenset({
        "Infobox person", "Infobox Pays", "Infobox settlement",
    })


def test_missing_template_names_is_empty(tmp_path):
    assert load_template_names(tmp_path / "missing.txt") == frozenset()
