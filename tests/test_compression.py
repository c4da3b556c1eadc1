"""
Tests for compressed file access.
"""
import bz2
import gzip
import io

import pytest

from wikigraph.compression import open_compressed, open_source


@pytest.mark.parametrize("name,decompress", [
    ("links.xml.bz2", bz2.decompress),
    ("langlinks.sql.gz", gzip.decompress),
    ("namespaces.tsv", lambda data: data),
])
def test_codec_follows_suffix(tmp_path, name, decompress):
    path = tmp_path / name
    with open_compressed(path, "wb") as f:
        f.write(b"payload")

    assert decompress(path.read_bytes()) == b"payload"
    with open_compressed(str(path)) as f:
        assert f.read() == b"payload"


def test_open_source_leaves_streams_open():
    stream = io.BytesIO(b"<mediawiki />")
    with open_source(stream) as f:
        assert f.read() == b"<mediawiki />"
    assert not stream.closed


def test_open_source_closes_files(tmp_path):
    path = tmp_path / "dump.xml.bz2"
    path.write_bytes(bz2.compress(b"<mediawiki />"))
    with open_source(path) as f:
        assert f.read() == b"<mediawiki />"
    assert f.closed
