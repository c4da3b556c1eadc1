"""
Tests for the checkpoint ledger.
"""
import threading

import pytest

from wikigraph.checkpoint import CheckpointLedger, Stage


def test_fresh_ledger(tmp_path):
    ledger = CheckpointLedger(tmp_path / "wikigraph-checkpoint")

    assert ledger.load() is False
    assert not ledger.is_done(Stage.LINKS_EXTRACTED, "en")
    assert len(ledger) == 0


def test_milestones_survive_a_restart(tmp_path):
    path = tmp_path / "wikigraph-checkpoint"
    ledger = CheckpointLedger(path)
    ledger.mark_done(Stage.LINKS_EXTRACTED, "en")
    ledger.mark_done(Stage.CROSSLINKS_EXTRACTED, "en")
    ledger.mark_done(Stage.FILE_DOWNLOAD, "frwiki-latest-langlinks.sql.gz")

    resumed = CheckpointLedger(path)
    assert resumed.load() is True
    assert resumed.is_done(Stage.LINKS_EXTRACTED, "en")
    assert resumed.is_done(Stage.FILE_DOWNLOAD, "frwiki-latest-langlinks.sql.gz")
    assert not resumed.is_done(Stage.LINKS_EXTRACTED, "fr")
    assert len(resumed) == 3


def test_mark_done_is_idempotent(tmp_path):
    path = tmp_path / "wikigraph-checkpoint"
    ledger = CheckpointLedger(path)
    ledger.mark_done(Stage.LINKS_EXTRACTED, "en")
    ledger.mark_done(Stage.LINKS_EXTRACTED, "en")

    assert path.read_text(encoding="utf-8") == "linksExtracted\ten\n"


def test_concurrent_mark_done(tmp_path):
    path = tmp_path / "wikigraph-checkpoint"
    ledger = CheckpointLedger(path)
    languages = [f"l{i}" for i in range(50)]

    threads = [
        threading.Thread(target=ledger.mark_done, args=(Stage.DISAMBIG_EXTRACTED, language))
        for language in languages
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert sorted(lines) == sorted(f"disambigExtracted\t{language}" for language in languages)


def test_delete(tmp_path):
    path = tmp_path / "wikigraph-checkpoint"
    ledger = CheckpointLedger(path)
    ledger.mark_done(Stage.INFOBOX_EXTRACTED, "en")

    ledger.delete()

    assert not path.exists()
    assert not ledger.is_done(Stage.INFOBOX_EXTRACTED, "en")
    ledger.delete()


@pytest.mark.parametrize("content", ["linksExtracted\n", "linksExtracted\t\n", "downloaded\ten\n"])
def test_malformed_ledger(tmp_path, content):
    path = tmp_path / "wikigraph-checkpoint"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError):
        CheckpointLedger(path).load()
