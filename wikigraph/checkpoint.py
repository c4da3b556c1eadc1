"""
Checkpoint ledger: which expensive stages are already done.

The ledger is an append-only file of "stage<TAB>key" lines. It is replayed
once at startup; a stage/key pair found there is not redone. The file is
deleted after a fully successful run.
"""
import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Dict, Set

logger = logging.getLogger(__name__)

CHECKPOINT_FILE_NAME = 'wikigraph-checkpoint'


class Stage(str, Enum):
    FILE_DOWNLOAD = 'fileDownload'
    EDITION_DOWNLOAD = 'editionDownload'
    DISAMBIG_EXTRACTED = 'disambigExtracted'
    INFOBOX_EXTRACTED = 'infoboxExtracted'
    LINKS_EXTRACTED = 'linksExtracted'
    CROSSLINKS_EXTRACTED = 'crosslinksExtracted'


class CheckpointLedger:
    """
    Completed (stage, key) milestones, persisted as an append-only log.

    Keys are language codes for per-edition stages and file names for
    downloads. mark_done may be called from several worker threads.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._done: Dict[Stage, Set[str]] = {stage: set() for stage in Stage}
        self._lock = threading.Lock()

    def load(self) -> bool:
        """
        Replay the log.

        Returns:
            False if there is no ledger yet (a fresh run)

        Raises:
            ValueError: On a line that is not "stage<TAB>key" or names an unknown stage
        """
        if not self.path.exists():
            return False
        with open(self.path, 'r', encoding='utf-8') as f:
            for line_number, line in enumerate(f, start=1):
                line = line.rstrip('\n')
                if not line:
                    continue
                stage_name, tab, key = line.partition('\t')
                if not tab or not key:
                    raise ValueError(f"{self.path}:{line_number}: malformed checkpoint line {line!r}")
                try:
                    stage = Stage(stage_name)
                except ValueError:
                    raise ValueError(
                        f"{self.path}:{line_number}: unknown checkpoint stage {stage_name!r}"
                    ) from None
                self._done[stage].add(key)
        logger.info(f"Resuming from checkpoint {self.path} ({len(self)} milestones)")
        return True

    def is_done(self, stage: Stage, key: str) -> bool:
        return key in self._done[stage]

    def mark_done(self, stage: Stage, key: str) -> None:
        """Record a milestone, appending it to the log unless already recorded."""
        with self._lock:
            if key in self._done[stage]:
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(f"{stage.value}\t{key}\n")
            self._done[stage].add(key)

    def delete(self) -> None:
        """Forget every milestone; called once the whole run has succeeded."""
        with self._lock:
            if self.path.exists():
                self.path.unlink()
            for keys in self._done.values():
                keys.clear()

    def __len__(self) -> int:
        return sum(len(keys) for keys in self._done.values())

    def __repr__(self):
        return f"CheckpointLedger(path={str(self.path)!r}, milestones={len(self)})"
