"""
Tests for the command line entry point.
"""
import argparse
import json

import pytest

from wikigraph.cli import main, parse_languages


def test_parse_languages():
    assert parse_languages("en, fr,,de") == ["en", "fr", "de"]
    with pytest.raises(argparse.ArgumentTypeError):
        parse_languages(" , ")


def test_unknown_language_exits(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["xx", "--root", str(tmp_path), "-q"])
    assert excinfo.value.code == 1


def test_missing_root_exits(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["en", "--root", str(tmp_path / "missing"), "-q"])
    assert excinfo.value.code == 1


def test_import_with_config_file(tmp_path, write_dump):
    root = tmp_path / "wikipedia"
    write_dump(root / "en" / "enwiki-latest-pages-articles.xml.bz2", [
        ("Paris", "10", "[[France]]", None),
        ("France", "11", "", None),
    ])
    config = tmp_path / "import.json"
    config.write_text(json.dumps({"root_dir": str(root), "graph_dir": str(tmp_path / "out")}))

    main(["en", "--config", str(config), "--keep-working-files", "-q"])

    assert len((tmp_path / "out" / "nodes.jsonl").read_text(encoding="utf-8").splitlines()) == 2
    assert (root / "en" / "links.xml.bz2").exists()
