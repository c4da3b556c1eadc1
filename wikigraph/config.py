"""
Import configuration.

One ImportConfig describes where the dumps are, which graph store receives
the graph and how the run behaves. It can be saved next to the dumps as
JSON and loaded back by later invocations.
"""
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Literal, Optional
import json
import logging

from .checkpoint import CHECKPOINT_FILE_NAME

logger = logging.getLogger(__name__)

STORE_TYPES = ('memory', 'neo4j')


@dataclass
class ImportConfig:
    """
    Settings of an import run.

    Attributes:
        root_dir: Directory holding one sub-directory of dumps per language code
        store: Graph store receiving the graph ('memory' or 'neo4j')
        graph_dir: Where the memory store exports its JSONL files
            (default: <root_dir>/graph)
        neo4j_uri: Bolt URI of the Neo4j server
        neo4j_user: Neo4j user name
        neo4j_password: Neo4j password
        neo4j_database: Neo4j database name (None for the server default)
        crosslink_batch_size: Editions whose cross-links are resolved concurrently
        import_batch_size: Nodes, relationships or property updates per graph store call
        show_progress: Show tqdm progress counters
        keep_working_files: Keep intermediate files and the checkpoint after success
    """

    root_dir: Path
    store: Literal['memory', 'neo4j'] = 'memory'
    graph_dir: Optional[Path] = None
    neo4j_uri: str = 'bolt://localhost:7687'
    neo4j_user: str = 'neo4j'
    neo4j_password: str = 'neo4j'
    neo4j_database: Optional[str] = None
    crosslink_batch_size: int = 5
    import_batch_size: int = 5000
    show_progress: bool = True
    keep_working_files: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.root_dir = Path(self.root_dir)
        if self.graph_dir is not None:
            self.graph_dir = Path(self.graph_dir)

        if self.store not in STORE_TYPES:
            raise ValueError(f"store must be one of {STORE_TYPES}, got {self.store!r}")
        if self.crosslink_batch_size < 1:
            raise ValueError(
                f"crosslink_batch_size must be at least 1, got {self.crosslink_batch_size}"
            )
        if self.import_batch_size < 1:
            raise ValueError(
                f"import_batch_size must be at least 1, got {self.import_batch_size}"
            )
        if self.store == 'neo4j' and self.neo4j_password == 'neo4j':
            logger.warning("Using the default Neo4j password; set neo4j_password in the config")

    def edition_dir(self, language: str) -> Path:
        """Directory of the dumps and working files of one edition."""
        return self.root_dir / language

    @property
    def checkpoint_path(self) -> Path:
        return self.root_dir / CHECKPOINT_FILE_NAME

    @property
    def graph_path(self) -> Path:
        return self.graph_dir if self.graph_dir is not None else self.root_dir / 'graph'

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data['root_dir'] = str(self.root_dir)
        data['graph_dir'] = str(self.graph_dir) if self.graph_dir is not None else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ImportConfig':
        """Create from dictionary."""
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save configuration to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> 'ImportConfig':
        """Load configuration from JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)
