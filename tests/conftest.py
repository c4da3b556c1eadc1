"""
Shared fixtures: small but real compressed dump files.
"""
import bz2
import gzip
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

import pytest

EXPORT_NS = "http://www.mediawiki.org/xml/export-0.10/"

DEFAULT_NAMESPACES = {
    -2: "Media",
    -1: "Special",
    0: "",
    1: "Talk",
    6: "File",
    10: "Template",
    14: "Category",
}


def dump_xml(pages, namespaces=None):
    """
    Render a pages-articles dump.

    pages: (title, wiki_id, text, redirect_target) tuples; text may be None
    """
    namespaces = DEFAULT_NAMESPACES if namespaces is None else namespaces
    parts = [
        f'<mediawiki xmlns="{EXPORT_NS}" version="0.10" xml:lang="en">',
        "<siteinfo><sitename>Wikipedia</sitename><namespaces>",
    ]
    for key, title in namespaces.items():
        if title:
            parts.append(f'<namespace key="{key}" case="first-letter">{escape(title)}</namespace>')
        else:
            parts.append(f'<namespace key="{key}" case="first-letter" />')
    parts.append("</namespaces></siteinfo>")
    for title, wiki_id, text, redirect in pages:
        parts.append(f"<page><title>{escape(title)}</title><ns>0</ns><id>{wiki_id}</id>")
        if redirect is not None:
            parts.append(f"<redirect title={quoteattr(redirect)} />")
        parts.append(f"<revision><id>9{wiki_id}</id><contributor><id>42</id></contributor>")
        if text is None:
            parts.append('<text xml:space="preserve" />')
        else:
            parts.append(f'<text xml:space="preserve">{escape(text)}</text>')
        parts.append("</revision></page>")
    parts.append("</mediawiki>")
    return "\n".join(parts)


@pytest.fixture
def write_dump():
    """Write a bz2 pages-articles dump and return its path."""
    def _write(path: Path, pages, namespaces=None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with bz2.open(path, "wb") as f:
            f.write(dump_xml(pages, namespaces).encode("utf-8"))
        return path
    return _write


@pytest.fixture
def write_sql():
    """Write a gzipped mysqldump script with the given INSERT value lists."""
    def _write(path: Path, table: str, *values: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = [
            "-- MySQL dump 10.19",
            f"DROP TABLE IF EXISTS `{table}`;",
            f"CREATE TABLE `{table}` (",
            "  `id` int(10) unsigned NOT NULL",
            ") ENGINE=InnoDB;",
            f"LOCK TABLES `{table}` WRITE;",
        ]
        lines.extend(f"INSERT INTO `{table}` VALUES {value};" for value in values)
        lines.append("UNLOCK TABLES;")
        with gzip.open(path, "wb") as f:
            f.write(("\n".join(lines) + "\n").encode("utf-8"))
        return path
    return _write


@pytest.fixture
def render_dump():
    """The dump_xml renderer, for tests that need the XML text itself."""
    return dump_xml
