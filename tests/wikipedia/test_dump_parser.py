"""
Tests for the streaming dump reader.
"""
import bz2
import io

import pytest
from lxml import etree

from wikigraph.wikipedia.dump_parser import StreamingPageParser, read_namespaces
from wikigraph.wikipedia.namespaces import CATEGORY, FILE, MAIN, Namespace, Namespaces
from wikigraph.wikipedia.pages import RawPage

PAGES = [
    ("Paris", "681159", "'''Paris''' is the capital of [[France]].", None),
    ("Template:Infobox settlement", "1000", "{{{name}}}", None),
    ("Category:Cities in France", "2000", "[[Category:France]]", None),
    ("Paris, France", "3000", "#REDIRECT [[Paris]]", "Paris"),
    ("Talk:Paris", "4000", "Discussion", None),
    ("Empty", "5000", None, None),
]


def test_read_namespaces(write_dump, tmp_path):
    dump = write_dump(tmp_path / "enwiki-pages-articles.xml.bz2", PAGES)
    namespaces = read_namespaces(dump)

    assert len(namespaces) == 7
    assert namespaces.from_id(0) == Namespace(0, "")
    assert namespaces.from_title("Category").id == CATEGORY
    assert namespaces.from_id(FILE).title == "File"


def test_read_namespaces_without_declarations():
    stream = io.BytesIO(b"<mediawiki><siteinfo></siteinfo></mediawiki>")
    with pytest.raises(ValueError):
        read_namespaces(stream)


def test_iter_pages_keeps_articles_and_categories(write_dump, tmp_path):
    dump = write_dump(tmp_path / "enwiki-pages-articles.xml.bz2", PAGES)
    parser = StreamingPageParser(read_namespaces(dump))

    pages = list(parser.iter_pages(dump))

    assert [page.title for page in pages] == [
        "Paris", "Category:Cities in France", "Paris, France", "Empty",
    ]
    assert parser.skipped == 2


def test_iter_pages_fields(write_dump, tmp_path):
    dump = write_dump(tmp_path / "enwiki-pages-articles.xml.bz2", PAGES)
    pages = {page.title: page for page in StreamingPageParser(read_namespaces(dump)).iter_pages(dump)}

    assert pages["Paris"] == RawPage(
        title="Paris",
        wiki_id="681159",
        text="'''Paris''' is the capital of [[France]].",
        redirect_target=None,
    )
    # the revision and contributor ids come later and are ignored
    assert pages["Category:Cities in France"].wiki_id == "2000"
    assert pages["Paris, France"].redirect_target == "Paris"
    assert pages["Empty"].text is None


def test_iter_pages_from_stream(render_dump):
    namespaces = Namespaces([Namespace(0, ""), Namespace(14, "Catégorie")])
    xml = render_dump([("Lyon", "12", "[[Rhône]]", None)], {0: "", 14: "Catégorie"})
    stream = io.BytesIO(xml.encode("utf-8"))

    pages = list(StreamingPageParser(namespaces).iter_pages(stream))

    assert [(page.title, page.wiki_id) for page in pages] == [("Lyon", "12")]


def test_accepted_namespaces_configurable(write_dump, tmp_path):
    dump = write_dump(tmp_path / "dump.xml.bz2", PAGES)
    parser = StreamingPageParser(read_namespaces(dump), accepted=(MAIN,))

    titles = [page.title for page in parser.iter_pages(dump)]

    assert "Category:Cities in France" not in titles
    assert "Paris" in titles


def test_malformed_xml_raises(render_dump, tmp_path):
    path = tmp_path / "broken.xml.bz2"
    xml = render_dump(PAGES[:1])
    with bz2.open(path, "wb") as f:
        f.write(xml[: len(xml) // 2].encode("utf-8"))

    parser = StreamingPageParser(Namespaces([Namespace(0, "")]))
    with pytest.raises(etree.XMLSyntaxError):
        list(parser.iter_pages(path))
