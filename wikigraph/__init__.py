"""
wikigraph: Wikipedia dumps to a graph of articles, categories and links.

The import runs per language edition: pages are streamed out of the XML
dump, their markup is reduced to typed links with positional metadata,
and the result is loaded into a graph store in two passes (nodes, then
relationships). Cross-language links are added once every edition is in.
"""

from .checkpoint import CheckpointLedger, Stage
from .config import ImportConfig
from .editions import Edition, EditionFiles, load_editions
from .pipeline import ImportPipeline, ImportSummary

__version__ = "0.1.0"

__all__ = [
    "CheckpointLedger",
    "Stage",
    "ImportConfig",
    "Edition",
    "EditionFiles",
    "load_editions",
    "ImportPipeline",
    "ImportSummary",
]
