"""
Tests for the intermediate link stream.
"""
import bz2
import shutil
import tempfile
import unittest
from pathlib import Path

from wikigraph.extractors.intermediate import IntermediateWriter, Tags, read_intermediate
from wikigraph.wikipedia.namespaces import CATEGORY, MAIN
from wikigraph.wikipedia.pages import LinkRecord, PageRecord


def sample_pages():
    return [
        PageRecord(
            title="Java",
            wiki_id="15580",
            namespace_id=MAIN,
            is_disambiguation=True,
            links=[
                LinkRecord("Java (island)", offset=2, rank=1, in_intro=True,
                           is_disambiguation_link=True),
                LinkRecord("Coffee", offset=61, rank=3, anchors={"coffee", "a cup of java"},
                           in_infobox=True, occurrences=2),
            ],
        ),
        PageRecord(title="Category:Islands", wiki_id="77", namespace_id=CATEGORY),
        PageRecord(
            title="Jawa",
            wiki_id="88",
            namespace_id=MAIN,
            is_redirect=True,
            links=[LinkRecord("Java (island)", offset=0, rank=1)],
        ),
    ]


class TestIntermediateStream(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = Path(self.temp_dir) / "en" / "links.xml.bz2"

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_read_back_what_was_written(self):
        """Records come back equal and in order, zero-link pages included."""
        with IntermediateWriter(self.path) as writer:
            for page in sample_pages():
                writer.write(page)

        self.assertEqual(writer.count, 3)
        self.assertEqual(list(read_intermediate(self.path)), sample_pages())

    def test_false_flags_are_not_written(self):
        page = PageRecord("Paris", "1", MAIN, links=[LinkRecord("France", offset=4, rank=1)])
        with IntermediateWriter(self.path) as writer:
            writer.write(page)

        xml = bz2.decompress(self.path.read_bytes()).decode("utf-8")
        self.assertIn("<rl><lt>France</lt><of>4</of><r>1</r><oc>1</oc></rl>", xml)
        for tag in (Tags.REDIRECT, Tags.DISAMBIGUATION, Tags.INFOBOX, Tags.INTRO, Tags.ANCHOR):
            self.assertNotIn(f"<{tag}>", xml)

    def test_each_anchor_is_its_own_element(self):
        page = PageRecord("Java", "1", MAIN, links=[
            LinkRecord("Coffee", offset=0, rank=1, anchors={"b", "a"}, occurrences=2),
        ])
        with IntermediateWriter(self.path) as writer:
            writer.write(page)

        xml = bz2.decompress(self.path.read_bytes()).decode("utf-8")
        self.assertIn("<a>a</a><a>b</a>", xml)

    def test_empty_stream(self):
        with IntermediateWriter(self.path):
            pass
        self.assertEqual(list(read_intermediate(self.path)), [])

    def test_write_requires_open_writer(self):
        writer = IntermediateWriter(self.path)
        with self.assertRaises(RuntimeError):
            writer.write(sample_pages()[1])

    def test_markup_characters_survive(self):
        page = PageRecord("AT&T", "2", MAIN, links=[
            LinkRecord("<Bell>", offset=0, rank=1, anchors={"\"Ma\" & 'Bell'"}),
        ])
        with IntermediateWriter(self.path) as writer:
            writer.write(page)
        self.assertEqual(list(read_intermediate(self.path)), [page])


if __name__ == "__main__":
    unittest.main()
